"""Tool Router for MCP Server.

Routes tool calls to the appropriate domain adapter. Every call passes
through the same pipeline: policy check, audit, schema validation, backend
call. Each stage reports its outcome as a value; this module is the single
place where outcomes become a ToolResult for the caller.
"""

from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel

from shared.errors import BackendError
from shared.logging import bind_context, clear_context, get_logger
from shared.models import ToolCall, ToolResult, ToolResultStatus
from mcp_server.audit import AuditLogger
from mcp_server.policy import (
    REASON_MISSING_ARGUMENTS,
    REASON_PERMITTED,
    REASON_UNKNOWN_TOOL,
    PolicyEngine,
    peek_project_id,
)
from mcp_server.registry import ToolRegistry

logger = get_logger(__name__)


# Type alias for adapter execute functions
AdapterExecutor = Callable[[str, BaseModel], Awaitable[Any]]


class ToolRouter:
    """
    Routes tool calls to appropriate domain adapters.

    Responsibilities:
    - Authorize requests against the server policy
    - Audit every decision
    - Validate arguments after authorization
    - Route to the appropriate adapter, exactly once
    """

    def __init__(
        self,
        registry: ToolRegistry,
        policy: PolicyEngine,
        audit_logger: Optional[AuditLogger] = None
    ) -> None:
        self.registry = registry
        self.policy = policy
        self.audit_logger = audit_logger or AuditLogger()
        self._adapters: dict[str, AdapterExecutor] = {}

    def register_adapter(self, domain: str, executor: AdapterExecutor) -> None:
        """
        Register a domain adapter.

        Args:
            domain: Domain name
            executor: Coroutine function that executes tools for this domain
        """
        self._adapters[domain] = executor
        logger.debug("Adapter registered", domain=domain)

    async def execute(self, call: ToolCall) -> ToolResult:
        """
        Execute a tool call.

        This is the main entry point for tool execution.

        Args:
            call: Tool call request

        Returns:
            Tool execution result; failures are reported through its status
        """
        bind_context(request_id=call.request_id, tool=call.tool_name)
        try:
            return await self._execute(call)
        finally:
            clear_context()

    async def _execute(self, call: ToolCall) -> ToolResult:
        tool_name = call.tool_name
        audit = self.audit_logger

        if call.arguments is None:
            audit.record(tool_name, None, False, REASON_MISSING_ARGUMENTS)
            return self._failure(
                tool_name,
                ToolResultStatus.VALIDATION_ERROR,
                "Arguments are required",
                "MISSING_ARGUMENTS",
            )

        project_id = peek_project_id(call.arguments)

        decision = self.policy.decide(tool_name, project_id)
        if not decision.allowed:
            audit.record(tool_name, project_id, False, decision.reason)
            return self._failure(
                tool_name,
                ToolResultStatus.UNAUTHORIZED,
                decision.message or decision.reason,
                "POLICY_DENIED",
            )

        tool = self.registry.get(tool_name)
        if tool is None:
            audit.record(tool_name, project_id, False, REASON_UNKNOWN_TOOL)
            return self._failure(
                tool_name,
                ToolResultStatus.NOT_FOUND,
                f"Unknown tool: {tool_name}",
                "UNKNOWN_TOOL",
            )

        # Allowlist outcome and generic permit are audited separately
        if decision.reason != REASON_PERMITTED:
            audit.record(tool_name, project_id, True, decision.reason)
        audit.record(tool_name, project_id, True, REASON_PERMITTED)

        arguments, errors = self.registry.validate_input(tool_name, call.arguments)
        if errors:
            return self._failure(
                tool_name,
                ToolResultStatus.VALIDATION_ERROR,
                f"Invalid arguments: {', '.join(errors)}",
                "VALIDATION_ERROR",
            )

        adapter = self._adapters.get(tool.domain)
        if not adapter:
            return self._failure(
                tool_name,
                ToolResultStatus.ERROR,
                f"No adapter registered for domain '{tool.domain}'",
                "NO_ADAPTER",
            )

        try:
            data = await adapter(tool_name, arguments)
        except BackendError as e:
            return self._failure(tool_name, ToolResultStatus.ERROR, str(e), "BACKEND_ERROR")
        except Exception as e:
            logger.error(
                "Tool execution failed",
                error=str(e),
                exc_info=True
            )
            return self._failure(tool_name, ToolResultStatus.ERROR, str(e), "EXECUTION_ERROR")

        return ToolResult(
            tool_name=tool_name,
            status=ToolResultStatus.SUCCESS,
            data=data
        )

    def _failure(
        self,
        tool_name: str,
        status: ToolResultStatus,
        message: str,
        code: str
    ) -> ToolResult:
        logger.error(message, status=status.value, error_code=code)
        return ToolResult(
            tool_name=tool_name,
            status=status,
            error=message,
            error_code=code
        )
