"""The process-wide browser session and the handle that owns it."""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from ..config import BrowserConfig
from .base import BrowserLauncher, LaunchedBrowser, SessionAbsentError
from .input import InputInjector
from .refs import ReferenceResolver
from .snapshot import Snapshot, SnapshotOptions, take_snapshot
from .tabs import TabRegistry

LOGGER = logging.getLogger(__name__)


class Session:
    """A live browser together with its tabs, refs and input channel."""

    def __init__(self, browser: LaunchedBrowser, config: BrowserConfig) -> None:
        self.config = config
        self._browser = browser
        self.tabs = TabRegistry(browser.context)
        self.refs = ReferenceResolver()
        self.input = InputInjector(browser.context)
        self.live = True
        if not len(self.tabs):
            self.tabs.new_tab()

    @property
    def page(self) -> Any:
        """The active page."""

        return self.tabs.active_page

    def locate(self, locator: str) -> Any:
        """Resolve a selector or snapshot ref against the active page."""

        return self.refs.resolve(self.page, locator)

    def snapshot(self, options: Optional[SnapshotOptions] = None) -> Snapshot:
        """Snapshot the active page and make its refs the current generation."""

        page = self.page
        snapshot = take_snapshot(page, options)
        self.refs.install(snapshot, page)
        return snapshot

    def is_connected(self) -> bool:
        return self.live and self._browser.is_connected()

    def close(self) -> None:
        if not self.live:
            return
        self._release()
        self._browser.close()

    def discard(self) -> None:
        """Drop a session whose browser went away without a close."""

        if not self.live:
            return
        self._release()
        try:
            self._browser.close()
        except Exception:
            LOGGER.warning("Cleanup of disconnected browser failed", exc_info=True)

    def _release(self) -> None:
        self.live = False
        self.refs.invalidate()
        self.input.clear()
        self.tabs.clear()


class SessionHandle:
    """Own zero or one live :class:`Session`.

    ``ensure`` creates the session on first use, ``launch`` creates it
    explicitly and ``close`` tears it down. Every command shares the same
    handle, so a transition made by one command is seen by the next.
    """

    def __init__(self, launcher: BrowserLauncher, config: Optional[BrowserConfig] = None) -> None:
        self._launcher = launcher
        self._config = config or BrowserConfig()
        self._lock = threading.RLock()
        self._session: Optional[Session] = None

    @property
    def config(self) -> BrowserConfig:
        return self._config

    @property
    def is_live(self) -> bool:
        with self._lock:
            return self._live_session() is not None

    def current(self) -> Session:
        """Return the live session without creating one."""

        with self._lock:
            session = self._live_session()
            if session is None:
                raise SessionAbsentError("Browser is not running; call browser_launch first")
            return session

    def ensure(self) -> Session:
        """Return the live session, launching one with the default config if needed."""

        with self._lock:
            session = self._live_session()
            if session is not None:
                return session
            if not self._config.auto_launch:
                raise SessionAbsentError("Browser is not running; call browser_launch first")
            return self._start(self._config)

    def launch(self, config: Optional[BrowserConfig] = None) -> tuple[Session, bool]:
        """Launch a session unless one is live.

        Returns the session and whether it was created by this call.
        """

        with self._lock:
            session = self._live_session()
            if session is not None:
                return session, False
            return self._start(config or self._config), True

    def close(self) -> bool:
        """Close the live session, if any. Returns whether one was closed."""

        with self._lock:
            session = self._session
            self._session = None
            if session is None or not session.live:
                return False
            LOGGER.info("Closing browser session")
            session.close()
            return True

    def _live_session(self) -> Optional[Session]:
        # A browser that crashed or disconnected is dropped so the next
        # ensure or launch starts a fresh one.
        session = self._session
        if session is None or not session.live:
            return None
        if not session.is_connected():
            LOGGER.warning("Browser disconnected; discarding session")
            self._session = None
            session.discard()
            return None
        return session

    def _start(self, config: BrowserConfig) -> Session:
        LOGGER.info(
            "Launching browser session (headless=%s, viewport=%sx%s)",
            config.headless,
            config.viewport_width,
            config.viewport_height,
        )
        browser = self._launcher.launch(config)
        try:
            session = Session(browser, config)
        except Exception:
            browser.close()
            raise
        self._session = session
        return session
