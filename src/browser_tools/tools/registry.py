"""Command registry and the uniform boundary every command runs through."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, TypeVar

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..browser.base import (
    ArgumentValidationError,
    BrowserToolError,
    DriverActionError,
    DriverTimeoutError,
)
from ..browser.session import Session, SessionHandle
from ..models import ToolResult

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class ToolContext:
    """What a command body may touch: the session handle and, lazily, the session."""

    def __init__(self, handle: SessionHandle) -> None:
        self.handle = handle

    @property
    def session(self) -> Session:
        return self.handle.ensure()

    @property
    def page(self) -> Any:
        return self.session.page


Handler = Callable[[ToolContext, Any], ToolResult]


@dataclass(frozen=True)
class Tool:
    """A named command with a validated argument model."""

    name: str
    description: str
    args_model: type[BaseModel]
    handler: Handler
    label: str

    def schema(self) -> dict[str, Any]:
        return self.args_model.model_json_schema(by_alias=True)


class ToolRegistry:
    """Collect tool definitions declared with :meth:`tool`."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def tool(
        self,
        name: str,
        description: str,
        args_model: type[BaseModel],
        *,
        label: str,
    ) -> Callable[[Handler], Handler]:
        def decorator(handler: Handler) -> Handler:
            if name in self._tools:
                raise ValueError(f"Tool already registered: {name}")
            self._tools[name] = Tool(
                name=name,
                description=description,
                args_model=args_model,
                handler=handler,
                label=label,
            )
            return handler

        return decorator

    def __iter__(self):
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


class ToolDispatcher:
    """Run commands against a shared session and always return an envelope.

    Commands execute one at a time on a single worker thread. This keeps
    concurrent callers from observing half-applied session or tab state and
    keeps the sync Playwright driver on the thread that started it.
    """

    def __init__(self, handle: SessionHandle, tools: Iterable[Tool]) -> None:
        self._handle = handle
        self._tools = {tool.name: tool for tool in tools}
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="browser-tools")

    @property
    def handle(self) -> SessionHandle:
        return self._handle

    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError:
            raise KeyError(name) from None

    def describe(self) -> list[dict[str, Any]]:
        return [
            {"name": tool.name, "description": tool.description, "parameters": tool.schema()}
            for tool in self._tools.values()
        ]

    def call(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> ToolResult:
        """Invoke ``name`` with raw ``arguments``. Raises ``KeyError`` for unknown tools."""

        tool = self.get(name)
        return self._executor.submit(self._invoke, tool, arguments).result()

    def run(self, func: Callable[[SessionHandle], T]) -> T:
        """Run ``func`` with the session handle on the worker thread."""

        return self._executor.submit(func, self._handle).result()

    def shutdown(self) -> None:
        """Close the session on the worker thread and stop the worker."""

        try:
            self._executor.submit(self._handle.close).result()
        finally:
            self._executor.shutdown(wait=True)

    def _invoke(self, tool: Tool, arguments: Optional[Mapping[str, Any]]) -> ToolResult:
        LOGGER.debug("Calling %s with %s", tool.name, arguments)
        try:
            try:
                args = tool.args_model.model_validate(dict(arguments or {}))
            except PydanticValidationError as exc:
                raise ArgumentValidationError(_format_validation_error(exc)) from exc
            result = tool.handler(ToolContext(self._handle), args)
        except PlaywrightTimeoutError as exc:
            return _failure(tool, DriverTimeoutError(_first_line(exc)))
        except PlaywrightError as exc:
            return _failure(tool, DriverActionError(_first_line(exc)))
        except BrowserToolError as exc:
            return _failure(tool, exc)
        except Exception as exc:
            LOGGER.exception("Unexpected error in %s", tool.name)
            return ToolResult.failure(f"{tool.label} failed: {exc}", error_type="InternalError")
        return result


def _failure(tool: Tool, error: BrowserToolError) -> ToolResult:
    LOGGER.info("%s failed (%s): %s", tool.name, type(error).__name__, error)
    return ToolResult.failure(f"{tool.label} failed: {error}", error_type=type(error).__name__)


def _first_line(exc: Exception) -> str:
    # Playwright appends a multi-line call log to its messages.
    message = getattr(exc, "message", None) or str(exc)
    return message.strip().splitlines()[0] if message.strip() else type(exc).__name__


def _format_validation_error(exc: PydanticValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "arguments"
        problems.append(f"{location}: {error['msg']}")
    return "invalid arguments (" + "; ".join(problems) + ")"
