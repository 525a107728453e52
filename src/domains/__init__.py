"""Application Domains.

Each domain contains:
- Tool definitions
- Adapter implementation
- Backend client

The server currently ships a single domain: GitLab.
"""

from typing import TYPE_CHECKING, Optional

from shared.config import Settings
from shared.models import DomainConfig

if TYPE_CHECKING:
    from domains.gitlab.service import RepositoryService
    from mcp_server.registry import ToolRegistry
    from mcp_server.router import ToolRouter


def load_all_domains(
    registry: "ToolRegistry",
    router: "ToolRouter",
    settings: Settings,
    service: Optional["RepositoryService"] = None,
) -> "RepositoryService":
    """
    Load and register all application domains.

    Called at server startup to register domain tools and adapters.
    A prebuilt service may be supplied (tests); otherwise a GitLab API
    client is created from settings.

    Returns:
        The repository service in use, so the caller can close it on shutdown
    """
    from domains.gitlab import register_gitlab_domain
    from domains.gitlab.client import GitLabClient

    config = DomainConfig(
        name="gitlab",
        description="GitLab projects, files, issues and merge requests",
        base_url=settings.gitlab_api_url,
        timeout_seconds=settings.request_timeout_seconds,
    )

    if service is None:
        service = GitLabClient(config, token=settings.require_token())

    register_gitlab_domain(registry, router, config, service)
    return service


__all__ = ["load_all_domains"]
