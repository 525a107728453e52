"""Tool Registry for MCP Server.

Manages registration and lookup of tools from all domains. Tools are
registered once at startup; the advertised listing is recomputed per
request and excludes operations disabled by policy.
"""

from typing import Any, Optional

from pydantic import BaseModel

from shared.config import PolicyConfig
from shared.logging import get_logger
from shared.models import ExecutionType, ToolDefinition
from shared.schema import check_schema, validate_arguments

logger = get_logger(__name__)


class ToolRegistry:
    """
    Central registry for all MCP tools.

    Responsibilities:
    - Register tools from domains, preserving declaration order
    - Lookup tools by name
    - Validate tool arguments
    - Produce the policy-filtered tool listing
    """

    def __init__(self, policy_config: Optional[PolicyConfig] = None) -> None:
        self.policy_config = policy_config or PolicyConfig()
        self._tools: dict[str, ToolDefinition] = {}

    def register(self, tool: ToolDefinition) -> None:
        """
        Register a tool in the registry.

        Args:
            tool: Tool definition to register

        Raises:
            ValueError: If tool name is already registered
            jsonschema.SchemaError: If the input schema is not valid Draft 7
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        if tool.input_schema:
            check_schema(tool.input_schema)

        self._tools[tool.name] = tool

        logger.debug(
            "Tool registered",
            tool=tool.name,
            domain=tool.domain,
            execution_type=tool.execution_type.value
        )

    def register_many(self, tools: list[ToolDefinition]) -> None:
        """Register multiple tools at once."""
        for tool in tools:
            self.register(tool)

    def get(self, tool_name: str) -> Optional[ToolDefinition]:
        """Get a tool by name."""
        return self._tools.get(tool_name)

    def list_tools(self, include_disabled: bool = False) -> list[ToolDefinition]:
        """
        List registered tools in declaration order.

        Args:
            include_disabled: Include tools disabled by policy

        Returns:
            List of tool definitions
        """
        tools = list(self._tools.values())
        if not include_disabled:
            disabled = self.policy_config.disabled_operations
            tools = [t for t in tools if t.name not in disabled]
        return tools

    def list_descriptors(self) -> list[dict[str, Any]]:
        """Return the advertised tool listing (name, description, inputSchema)."""
        return [tool.descriptor() for tool in self.list_tools()]

    def allowlisted_operations(self) -> frozenset[str]:
        """Names of project-scoped read tools, which the project allowlist governs."""
        return frozenset(
            tool.name
            for tool in self._tools.values()
            if tool.execution_type == ExecutionType.READ and tool.project_scoped
        )

    def validate_input(
        self,
        tool_name: str,
        arguments: Any
    ) -> tuple[Optional[BaseModel], list[str]]:
        """
        Validate arguments against a tool's arguments model.

        Args:
            tool_name: Tool name
            arguments: Untyped argument payload

        Returns:
            Tuple of (validated arguments or None, list of error messages)
        """
        tool = self.get(tool_name)
        if not tool:
            return None, [f"Tool '{tool_name}' not found"]

        if tool.arguments_model is None:
            return None, [f"Tool '{tool_name}' declares no arguments model"]

        return validate_arguments(tool.arguments_model, arguments)

    def get_tool_count(self) -> int:
        """Number of advertised tools."""
        return len(self.list_tools())
