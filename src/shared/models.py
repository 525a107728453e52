"""Core data models for the GitLab Zero-Leak MCP Server.

This module defines the shared data structures that flow through the
dispatch pipeline: tool definitions, calls, results, policy decisions and
audit entries.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExecutionType(str, Enum):
    """Type of tool execution - read operations vs write operations."""
    READ = "read"
    WRITE = "write"


class ToolDefinition(BaseModel):
    """
    Complete definition of an MCP tool.

    Tools are declarative and defined once at process start. The arguments
    model is the tool's validator; the input schema advertised to clients is
    derived from it.
    """
    name: str = Field(..., description="Tool name as exposed to clients")
    domain: str = Field(..., description="Backend domain the tool routes to")
    description: str = Field(..., description="Clear description for LLM usage")

    input_schema: dict[str, Any] = Field(
        default_factory=dict,
        description="JSON Schema for input validation"
    )
    arguments_model: Optional[type[BaseModel]] = Field(default=None, exclude=True)

    execution_type: ExecutionType = Field(default=ExecutionType.WRITE)
    project_scoped: bool = Field(
        default=True,
        description="Whether the tool addresses a single project via project_id"
    )

    model_config = ConfigDict(frozen=True)

    def descriptor(self) -> dict[str, Any]:
        """Return the listing form of this tool."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema or {
                "type": "object",
                "properties": {},
            },
        }


class ToolCall(BaseModel):
    """
    A request to execute a specific tool.

    `arguments` is None when the caller sent no argument payload at all,
    which is distinct from an empty mapping.
    """
    tool_name: str = Field(..., description="Tool name")
    arguments: Optional[dict[str, Any]] = None
    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()))


class ToolResultStatus(str, Enum):
    """Status of tool execution."""
    SUCCESS = "success"
    ERROR = "error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    VALIDATION_ERROR = "validation_error"


class ToolResult(BaseModel):
    """
    Result of a tool execution.

    Every pipeline outcome, success or failure, is expressed as a ToolResult;
    transports translate the status into their own error representation.
    """
    tool_name: str
    status: ToolResultStatus
    data: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == ToolResultStatus.SUCCESS


class PolicyDecision(BaseModel):
    """ALLOW/DENY outcome of the policy engine for one call."""
    allowed: bool
    reason: str
    message: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class AuditEntry(BaseModel):
    """
    Audit log entry for a single policy or dispatch decision.

    Written once to the diagnostic stream and never retained.
    """
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str
    project_id: str = "unknown"
    allowed: bool
    reason: str

    model_config = ConfigDict(frozen=True)


class DomainConfig(BaseModel):
    """Configuration for a backend domain."""
    name: str
    description: str
    version: str = "1.0.0"

    base_url: str
    timeout_seconds: Optional[float] = None
