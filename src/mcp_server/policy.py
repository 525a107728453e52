"""Policy engine for MCP Server.

Decides ALLOW/DENY for a tool call from two static sets: operations
disabled outright, and projects allowed for read operations. Decisions
are pure functions of the configuration and the call; auditing is the
router's job.
"""

import math
from collections.abc import Mapping
from typing import Any, Optional

from shared.config import PolicyConfig
from shared.models import PolicyDecision

REASON_DISABLED = "Operation disabled by policy"
REASON_NOT_IN_ALLOWLIST = "Project not in allowlist"
REASON_IN_ALLOWLIST = "Project in allowlist"
REASON_PROJECT_REQUIRED = "Project identifier required"
REASON_PERMITTED = "Operation permitted"
REASON_MISSING_ARGUMENTS = "Missing arguments"
REASON_UNKNOWN_TOOL = "Unknown tool"


def _render(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return repr(value)
    if isinstance(value, Mapping):
        return "[object Object]"
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else _render(item) for item in value)
    return str(value)


def peek_project_id(arguments: Any) -> Optional[str]:
    """
    Best-effort read of `project_id` ahead of schema validation.

    Only looks at that one key of a mapping. Strings pass through; other
    JSON values render as JavaScript's String() would (42.0 -> "42",
    None -> "null", {} -> "[object Object]"). Never raises.
    """
    if not isinstance(arguments, Mapping) or "project_id" not in arguments:
        return None

    return _render(arguments["project_id"])


class PolicyEngine:
    """
    Server-side access policy.

    Args:
        config: Immutable policy configuration
        allowlisted_operations: Read operations subject to the project allowlist
    """

    def __init__(
        self,
        config: PolicyConfig,
        allowlisted_operations: frozenset[str]
    ) -> None:
        self.config = config
        self.allowlisted_operations = frozenset(allowlisted_operations)

    def decide(self, operation: str, project_id: Optional[str] = None) -> PolicyDecision:
        """
        Decide whether an operation may run.

        Args:
            operation: Tool name
            project_id: Project identifier extracted from the arguments, if any

        Returns:
            Policy decision with audit reason and, for denials, caller message
        """
        if operation in self.config.disabled_operations:
            return PolicyDecision(
                allowed=False,
                reason=REASON_DISABLED,
                message=f'Tool "{operation}" is disabled by server policy.',
            )

        if operation in self.allowlisted_operations:
            if project_id:
                if project_id not in self.config.allowed_read_projects:
                    return PolicyDecision(
                        allowed=False,
                        reason=REASON_NOT_IN_ALLOWLIST,
                        message=f'Project "{project_id}" is not allowed for read operations.',
                    )
                return PolicyDecision(allowed=True, reason=REASON_IN_ALLOWLIST)

            # Without strict mode a read with no project id is let through
            if self.config.strict_read_policy:
                return PolicyDecision(
                    allowed=False,
                    reason=REASON_PROJECT_REQUIRED,
                    message=f'Tool "{operation}" requires a project_id for read operations.',
                )

        return PolicyDecision(allowed=True, reason=REASON_PERMITTED)

