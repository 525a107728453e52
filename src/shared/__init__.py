"""Shared utilities and base classes for the GitLab Zero-Leak MCP Server."""

from shared.models import (
    AuditEntry,
    ExecutionType,
    PolicyDecision,
    ToolCall,
    ToolDefinition,
    ToolResult,
    ToolResultStatus,
)
from shared.config import PolicyConfig, Settings, get_settings
from shared.errors import BackendError, ConfigurationError, GitLabMCPError
from shared.logging import get_logger, setup_logging

__all__ = [
    "AuditEntry",
    "ExecutionType",
    "PolicyDecision",
    "ToolCall",
    "ToolDefinition",
    "ToolResult",
    "ToolResultStatus",
    "PolicyConfig",
    "Settings",
    "get_settings",
    "BackendError",
    "ConfigurationError",
    "GitLabMCPError",
    "get_logger",
    "setup_logging",
]
