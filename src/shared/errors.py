"""Exception hierarchy for the GitLab Zero-Leak MCP Server.

Policy denials, validation failures and unknown tools are not exceptions:
they travel through the pipeline as ToolResult statuses. Only conditions
that interrupt control flow (startup configuration, remote failures) raise.
"""

import json
from typing import Any, Optional


class GitLabMCPError(Exception):
    """Base exception for the server."""
    pass


class ConfigurationError(GitLabMCPError):
    """Required configuration is missing or invalid. Fatal at startup."""
    pass


class BackendError(GitLabMCPError):
    """The GitLab API answered with a non-success response."""

    def __init__(
        self,
        status_code: int,
        status_text: str,
        body: Optional[str] = None
    ) -> None:
        self.status_code = status_code
        self.status_text = status_text
        self.body = body or ""
        super().__init__(
            f"GitLab API error: {status_text} ({status_code}) - {self.body}"
        )

    @classmethod
    def from_body(cls, status_code: int, status_text: str, raw: str) -> "BackendError":
        """Build an error, re-rendering the body compactly when it is JSON."""
        try:
            parsed: Any = json.loads(raw)
        except ValueError:
            return cls(status_code, status_text, raw)
        return cls(status_code, status_text, json.dumps(parsed, separators=(",", ":")))
