"""HTTP transport - FastAPI Application.

Exposes the same tool listing and tool call pipeline as the stdio transport
for hosts that reach the server over the network.
"""

from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, Field

from shared.logging import get_logger
from shared.models import ToolResultStatus
from shared.schema import serialize_result
from mcp_server.app import SERVER_NAME, SERVER_VERSION, MCPApplication
from mcp_server.auth import APIKeyAuth, security

logger = get_logger(__name__)

STATUS_CODES = {
    ToolResultStatus.UNAUTHORIZED: 403,
    ToolResultStatus.NOT_FOUND: 404,
    ToolResultStatus.VALIDATION_ERROR: 422,
    ToolResultStatus.ERROR: 502,
}


# Request/Response Models
class ToolCallRequest(BaseModel):
    """Request to execute a tool."""
    name: str = Field(..., description="Tool name")
    arguments: Optional[dict[str, Any]] = Field(default=None)


class TextContent(BaseModel):
    type: str = "text"
    text: str


class ToolCallResponse(BaseModel):
    """Successful tool execution."""
    content: list[TextContent]


class ToolListResponse(BaseModel):
    """List of available tools."""
    tools: list[dict[str, Any]]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    tool_count: int


def create_app(application: MCPApplication) -> FastAPI:
    """Create the FastAPI app bound to an application."""
    api_key = application.settings.mcp_http_api_key
    auth = APIKeyAuth(api_key.get_secret_value() if api_key else None)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{SERVER_NAME} running on http")
        yield
        logger.info("Server shutting down")
        await application.close()

    app = FastAPI(
        title=SERVER_NAME,
        description="GitLab MCP tools behind a server-side security policy",
        version=SERVER_VERSION,
        lifespan=lifespan
    )

    async def authenticated(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
    ) -> None:
        auth.verify(credentials)

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            version=SERVER_VERSION,
            tool_count=application.registry.get_tool_count()
        )

    @app.get(
        "/tools",
        response_model=ToolListResponse,
        tags=["Tools"],
        dependencies=[Depends(authenticated)]
    )
    async def list_tools():
        """List all tools not disabled by policy."""
        return ToolListResponse(tools=application.list_tools())

    @app.post(
        "/tools/call",
        response_model=ToolCallResponse,
        tags=["Execution"],
        dependencies=[Depends(authenticated)]
    )
    async def call_tool(request: ToolCallRequest):
        """
        Execute a tool.

        Handles authorization, validation, routing, and auditing.
        """
        result = await application.call_tool(request.name, request.arguments)

        if not result.ok:
            raise HTTPException(
                status_code=STATUS_CODES.get(result.status, status.HTTP_500_INTERNAL_SERVER_ERROR),
                detail=result.error
            )

        return ToolCallResponse(content=[TextContent(text=serialize_result(result.data))])

    return app


def serve_http(application: MCPApplication) -> None:
    """Run the HTTP transport."""
    import uvicorn

    settings = application.settings
    uvicorn.run(
        create_app(application),
        host=settings.mcp_http_host,
        port=settings.mcp_http_port,
        log_config=None,
    )
