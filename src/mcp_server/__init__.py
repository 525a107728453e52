"""MCP Server - Tool registry, policy enforcement, and execution routing.

The MCP Server is the authoritative component for tool execution.
It registers tools, enforces the security policy, routes calls to the
backend domain, and audits every decision.
"""

from mcp_server.registry import ToolRegistry
from mcp_server.router import ToolRouter
from mcp_server.policy import PolicyEngine, peek_project_id
from mcp_server.audit import AuditLogger

__all__ = [
    "ToolRegistry",
    "ToolRouter",
    "PolicyEngine",
    "peek_project_id",
    "AuditLogger",
]
