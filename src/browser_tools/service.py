"""HTTP service exposing the browser commands."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException
from pydantic import BaseModel

from .browser.session import SessionHandle
from .tools.registry import ToolDispatcher

LOGGER = logging.getLogger(__name__)


class ToolDescription(BaseModel):
    name: str
    description: str
    parameters: Dict[str, Any]


class HealthModel(BaseModel):
    session: str
    tabs: int
    tools: int


def create_app(dispatcher: ToolDispatcher, *, shutdown_on_exit: bool = True) -> FastAPI:
    """Build the FastAPI application serving ``dispatcher``."""

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        if shutdown_on_exit:
            LOGGER.info("Shutting down browser tools")
            dispatcher.shutdown()

    app = FastAPI(title="Browser Tools", lifespan=lifespan)

    def _envelope(name: str, arguments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        try:
            result = dispatcher.call(name, arguments)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Unknown tool: {name}") from None
        return result.model_dump(by_alias=True, exclude_none=True)

    @app.get("/health", response_model=HealthModel)
    def get_health() -> HealthModel:
        live, tabs = dispatcher.run(_session_status)
        return HealthModel(
            session="live" if live else "absent",
            tabs=tabs,
            tools=len(dispatcher.names()),
        )

    @app.get("/tools", response_model=List[ToolDescription])
    def list_tools() -> List[ToolDescription]:
        return [ToolDescription.model_validate(item) for item in dispatcher.describe()]

    @app.post("/tools/{name}")
    def call_tool(
        name: str,
        arguments: Optional[Dict[str, Any]] = Body(default=None),
    ) -> Dict[str, Any]:
        return _envelope(name, arguments)

    @app.delete("/session")
    def close_session() -> Dict[str, Any]:
        return _envelope("browser_close", None)

    return app


def _session_status(handle: SessionHandle) -> tuple[bool, int]:
    if not handle.is_live:
        return False, 0
    return True, len(handle.current().tabs)
