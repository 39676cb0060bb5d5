"""Raw input injection through the Chrome DevTools Protocol."""

from __future__ import annotations

import logging
from typing import Any, Optional

from .base import DriverActionError

LOGGER = logging.getLogger(__name__)


class InputInjector:
    """Dispatch mouse and keyboard events straight into the page's input queue.

    Unlike locator actions these events carry no element targeting and no
    actionability checks, which makes them usable for drag gestures and
    synthetic key codes.
    """

    def __init__(self, context: Any) -> None:
        self._context = context
        self._sessions: dict[Any, Any] = {}

    def mouse_event(
        self,
        page: Any,
        *,
        event_type: str,
        x: float,
        y: float,
        button: Optional[str] = None,
        click_count: Optional[int] = None,
        delta_x: Optional[float] = None,
        delta_y: Optional[float] = None,
    ) -> None:
        params: dict[str, Any] = {"type": event_type, "x": x, "y": y}
        if button is not None:
            params["button"] = button
        elif event_type in {"mousePressed", "mouseReleased"}:
            params["button"] = "left"
        if click_count is not None:
            params["clickCount"] = click_count
        elif event_type in {"mousePressed", "mouseReleased"}:
            params["clickCount"] = 1
        if event_type == "mouseWheel":
            params["deltaX"] = delta_x or 0
            params["deltaY"] = delta_y or 0
        self._send(page, "Input.dispatchMouseEvent", params)

    def keyboard_event(
        self,
        page: Any,
        *,
        event_type: str,
        key: Optional[str] = None,
        code: Optional[str] = None,
        text: Optional[str] = None,
    ) -> None:
        if event_type == "char" and not text:
            raise DriverActionError("char events require text")
        params: dict[str, Any] = {"type": event_type}
        if key is not None:
            params["key"] = key
        if code is not None:
            params["code"] = code
        if text is not None:
            params["text"] = text
        self._send(page, "Input.dispatchKeyEvent", params)

    def forget(self, page: Any) -> None:
        session = self._sessions.pop(page, None)
        if session is not None:
            try:
                session.detach()
            except Exception:  # pragma: no cover - page may already be gone
                LOGGER.debug("CDP session for %s was already detached", page)

    def clear(self) -> None:
        self._sessions.clear()

    def _send(self, page: Any, method: str, params: dict[str, Any]) -> None:
        session = self._sessions.get(page)
        if session is None:
            try:
                session = self._context.new_cdp_session(page)
            except Exception as exc:
                raise DriverActionError(
                    f"Raw input injection requires a Chromium browser: {exc}"
                ) from exc
            self._sessions[page] = session
            page.on("close", self.forget)
        LOGGER.debug("Dispatching %s %s", method, params)
        session.send(method, params)
