"""Server assembly.

Wires registry, policy engine, audit logger, router and backend domain into
one object shared by every transport.
"""

from dataclasses import dataclass
from typing import Any, Optional

from shared.config import PolicyConfig, Settings
from shared.logging import get_logger
from shared.models import ToolCall, ToolResult
from domains import load_all_domains
from domains.gitlab.service import RepositoryService
from mcp_server.audit import AuditLogger
from mcp_server.policy import PolicyEngine
from mcp_server.registry import ToolRegistry
from mcp_server.router import ToolRouter

logger = get_logger(__name__)

SERVER_NAME = "gitlab-zero-leak-mcp-server"
SERVER_VERSION = "1.0.0"


@dataclass
class MCPApplication:
    """Everything a transport needs to serve tool listings and calls."""
    settings: Settings
    policy_config: PolicyConfig
    registry: ToolRegistry
    router: ToolRouter
    service: RepositoryService

    def list_tools(self) -> list[dict[str, Any]]:
        return self.registry.list_descriptors()

    async def call_tool(self, name: str, arguments: Optional[dict[str, Any]]) -> ToolResult:
        return await self.router.execute(ToolCall(tool_name=name, arguments=arguments))

    async def close(self) -> None:
        await self.service.close()


def build_application(
    settings: Settings,
    service: Optional[RepositoryService] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> MCPApplication:
    """
    Assemble the server from settings.

    Args:
        settings: Loaded settings
        service: Optional prebuilt repository service (tests)
        audit_logger: Optional audit logger override

    Raises:
        ConfigurationError: If the GitLab token is required and missing
    """
    policy_config = settings.policy_config()
    registry = ToolRegistry(policy_config)

    router = ToolRouter(
        registry=registry,
        policy=PolicyEngine(policy_config, frozenset()),
        audit_logger=audit_logger,
    )
    service = load_all_domains(registry, router, settings, service=service)

    # The allowlisted read set is only known once tools are registered
    router.policy = PolicyEngine(policy_config, registry.allowlisted_operations())

    known = {t.name for t in registry.list_tools(include_disabled=True)}
    unknown = policy_config.disabled_operations - known
    if unknown:
        logger.warning("Disabled handlers name unknown tools", tools=sorted(unknown))

    return MCPApplication(
        settings=settings,
        policy_config=policy_config,
        registry=registry,
        router=router,
        service=service,
    )
