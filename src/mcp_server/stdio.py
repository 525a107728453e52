"""MCP stdio transport.

Serves tools/list and tools/call over the MCP stdio channel. stdout belongs
to the protocol; all diagnostics go to stderr.
"""

import asyncio
import os
import signal
import sys

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from shared.logging import get_logger
from shared.models import ToolResult, ToolResultStatus
from shared.schema import serialize_result
from mcp_server.app import SERVER_NAME, SERVER_VERSION, MCPApplication

logger = get_logger(__name__)


def to_call_tool_result(result: ToolResult) -> types.CallToolResult:
    """
    Translate a ToolResult into the MCP response.

    Raises:
        McpError: For every non-success status; the error message is the
            ToolResult's error text
    """
    if result.ok:
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=serialize_result(result.data))],
            isError=False,
        )

    code = (
        types.INVALID_PARAMS
        if result.status == ToolResultStatus.VALIDATION_ERROR
        else types.INTERNAL_ERROR
    )
    raise McpError(types.ErrorData(code=code, message=result.error or "Tool execution failed"))


def create_mcp_server(application: MCPApplication) -> Server:
    """Build the MCP server bound to an application."""
    server: Server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        """List all tools not disabled by policy."""
        tools = [
            types.Tool(
                name=descriptor["name"],
                description=descriptor["description"],
                inputSchema=descriptor["inputSchema"],
            )
            for descriptor in application.list_tools()
        ]
        logger.debug("Listed tools", count=len(tools))
        return tools

    async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
        # Registered directly so an absent `arguments` stays None and no
        # SDK-side schema validation runs ahead of the policy check
        result = await application.call_tool(request.params.name, request.params.arguments)
        return types.ServerResult(to_call_tool_result(result))

    server.request_handlers[types.CallToolRequest] = call_tool
    return server


def _install_signal_handlers(loop: asyncio.AbstractEventLoop) -> None:
    def _shutdown(sig: signal.Signals) -> None:
        logger.info("Server shutting down", signal=sig.name)
        sys.stderr.flush()
        # Blocking stdin reads cannot be cancelled; in-flight calls are abandoned
        os._exit(0)

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, _shutdown, sig)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            pass


async def serve_stdio(application: MCPApplication) -> None:
    """Run the server over stdio until the client closes the channel."""
    server = create_mcp_server(application)
    _install_signal_handlers(asyncio.get_running_loop())

    logger.info(f"{SERVER_NAME} starting...")
    try:
        async with stdio_server() as (read_stream, write_stream):
            logger.info(f"{SERVER_NAME} running on stdio")
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
    finally:
        await application.close()
