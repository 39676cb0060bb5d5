"""Index-addressed registry of the pages open in a session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .base import IndexOutOfRangeError

LOGGER = logging.getLogger(__name__)


@dataclass
class TabInfo:
    """Caller-facing identity of an open tab."""

    index: int
    title: str
    url: str
    active: bool = False


class TabRegistry:
    """Track the ordered pages of a browsing context and the active one.

    Callers only ever see indices. Closing a tab shifts every tab after it
    down by one. When the active tab is closed, the tab that preceded it
    becomes active; if the closed tab was the first one, the new first tab
    becomes active.
    """

    def __init__(self, context: Any) -> None:
        self._context = context
        self._pages: list[Any] = []
        self._active: Optional[int] = None
        for page in list(context.pages):
            self._track(page)
        if self._pages:
            self._active = len(self._pages) - 1
        context.on("page", self._on_page)

    def __len__(self) -> int:
        return len(self._pages)

    @property
    def active_index(self) -> Optional[int]:
        return self._active

    @property
    def active_page(self) -> Any:
        if self._active is None:
            raise IndexOutOfRangeError("No open tabs; open one with browser_new_tab")
        return self._pages[self._active]

    def new_tab(self, url: Optional[str] = None, *, wait_until: Optional[str] = None) -> TabInfo:
        """Open a page, make it active and optionally navigate it."""

        page = self._context.new_page()
        self._track(page)
        index = self._pages.index(page)
        self._activate(index)
        if url:
            page.goto(url, wait_until=wait_until)
        LOGGER.info("Opened tab %s of %s", index, len(self._pages))
        return self._info(index)

    def switch_to(self, index: int) -> TabInfo:
        self._check_index(index)
        self._activate(index)
        LOGGER.info("Switched to tab %s", index)
        return self._info(index)

    def list_tabs(self) -> list[TabInfo]:
        return [self._info(index) for index in range(len(self._pages))]

    def close_tab(self, index: Optional[int] = None) -> tuple[int, int]:
        """Close the tab at ``index`` (default: the active one).

        Returns the closed index and the number of remaining tabs.
        """

        if not self._pages:
            raise IndexOutOfRangeError("No open tabs to close")
        if index is None:
            index = self._active if self._active is not None else len(self._pages) - 1
        self._check_index(index)
        page = self._pages[index]
        self._forget(page)
        page.close()
        LOGGER.info("Closed tab %s, %s remaining", index, len(self._pages))
        return index, len(self._pages)

    def clear(self) -> None:
        self._pages.clear()
        self._active = None

    def _info(self, index: int) -> TabInfo:
        page = self._pages[index]
        return TabInfo(
            index=index,
            title=page.title(),
            url=page.url,
            active=index == self._active,
        )

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._pages):
            total = len(self._pages)
            raise IndexOutOfRangeError(
                f"Tab index {index} out of range (0-{total - 1})"
                if total
                else f"Tab index {index} out of range (no open tabs)"
            )

    def _activate(self, index: int) -> None:
        self._active = index
        self._pages[index].bring_to_front()

    def _track(self, page: Any) -> None:
        if page in self._pages:
            return
        self._pages.append(page)
        page.on("close", self._forget)

    def _on_page(self, page: Any) -> None:
        # Popups and window.open() targets join the registry without
        # stealing the active pointer.
        if page not in self._pages:
            LOGGER.debug("Tracking page opened by the browser: %s", page)
        self._track(page)
        if self._active is None:
            self._active = self._pages.index(page)

    def _forget(self, page: Any) -> None:
        if page not in self._pages:
            return
        removed = self._pages.index(page)
        self._pages.pop(removed)
        if not self._pages:
            self._active = None
        elif self._active is None:
            self._active = 0
        elif removed < self._active:
            self._active -= 1
        elif removed == self._active:
            self._activate(max(removed - 1, 0))
