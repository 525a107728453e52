"""Base classes for domain adapters.

All adapters must:
- Translate validated tool arguments into backend calls
- Return typed results
- Raise BackendError for remote failures and let the router translate it
- Never make policy decisions
"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from shared.errors import BackendError
from shared.logging import get_logger
from shared.models import DomainConfig, ToolDefinition

logger = get_logger(__name__)

# Characters encodeURIComponent leaves untouched besides unreserved ones
_URI_COMPONENT_SAFE = "!~*'()"


def encode_path_segment(value: str) -> str:
    """Percent-encode a value for use as a single URL path segment."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


class BaseAdapter(ABC):
    """
    Base class for domain adapters.

    Each adapter:
    - Handles one domain only
    - Declares the tools it serves
    - Maps validated arguments to backend operations
    """

    def __init__(self, config: DomainConfig) -> None:
        self.config = config
        self.domain = config.name
        self._tools: dict[str, ToolDefinition] = {}

    @property
    def tools(self) -> list[ToolDefinition]:
        """Return all tool definitions for this domain in declaration order."""
        return list(self._tools.values())

    @abstractmethod
    async def execute(self, action: str, arguments: BaseModel) -> BaseModel:
        """
        Execute a tool action.

        Args:
            action: Tool name
            arguments: Validated tool arguments

        Returns:
            Typed result of the backend call
        """
        pass

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        """Get a tool definition by name."""
        return self._tools.get(name)


class RESTClient:
    """
    Base client for REST API backends.

    Provides common HTTP client functionality. Non-success responses are
    raised as BackendError; calls are never retried.
    """

    def __init__(
        self,
        config: DomainConfig,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        self.base_url = config.base_url.rstrip("/")
        self.timeout = config.timeout_seconds
        self._headers = headers or {}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self._headers,
                transport=self._transport,
            )
        return self._client

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Make an HTTP request and raise BackendError on non-2xx."""
        client = self._get_client()
        logger.debug("Backend request", method=method, path=path)
        response = await client.request(method, self.url(path), **kwargs)

        if not response.is_success:
            raise BackendError.from_body(
                response.status_code,
                response.reason_phrase,
                response.text,
            )
        return response

    async def _request(
        self,
        method: str,
        path: str,
        model: type[BaseModel],
        **kwargs: Any
    ) -> Any:
        """Make an HTTP request and parse the JSON body into `model`."""
        response = await self._send(method, path, **kwargs)
        return self._parse(model, response.json(), response.status_code)

    @staticmethod
    def _parse(model: type[BaseModel], payload: Any, status_code: int = 200) -> Any:
        """Validate a response payload, reporting shape mismatches as backend errors."""
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise BackendError(status_code, "Unexpected response", str(e)) from e

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RESTClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
