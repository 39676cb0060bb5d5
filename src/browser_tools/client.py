"""HTTP client for talking to a browser tools service."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from .models import ToolResult


class ToolInfo(BaseModel):
    name: str
    description: str
    parameters: Dict[str, Any]


class ServiceHealth(BaseModel):
    session: str
    tabs: int
    tools: int


class ToolServiceClient:
    """Wrapper around the browser tools HTTP API."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def list_tools(self) -> List[ToolInfo]:
        async with self._client() as client:
            response = await client.get("/tools")
            response.raise_for_status()
            data = response.json()
        return [ToolInfo.model_validate(item) for item in data]

    async def call(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        async with self._client() as client:
            response = await client.post(f"/tools/{name}", json=arguments or {})
            response.raise_for_status()
            data = response.json()
        return ToolResult.model_validate(data)

    async def close_session(self) -> ToolResult:
        async with self._client() as client:
            response = await client.delete("/session")
            response.raise_for_status()
            data = response.json()
        return ToolResult.model_validate(data)

    async def get_health(self) -> ServiceHealth:
        async with self._client() as client:
            response = await client.get("/health")
            response.raise_for_status()
            data = response.json()
        return ServiceHealth.model_validate(data)
