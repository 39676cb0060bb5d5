"""Playwright-powered browser launcher."""

from __future__ import annotations

import logging
from typing import Any, Optional

from playwright.sync_api import Error, sync_playwright

from ..config import BrowserConfig
from .base import BrowserLauncher, DriverActionError, LaunchedBrowser

LOGGER = logging.getLogger(__name__)


class PlaywrightBrowser(LaunchedBrowser):
    """A browser started through Playwright's sync API."""

    def __init__(self, playwright: Any, browser: Any, context: Any) -> None:
        self._playwright = playwright
        self._browser = browser
        self._context = context

    @property
    def context(self) -> Any:
        return self._context

    def is_connected(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    def close(self) -> None:
        LOGGER.debug("Stopping Playwright browser")
        try:
            if self._context:
                self._context.close()
        finally:
            if self._browser:
                self._browser.close()
            if self._playwright:
                self._playwright.stop()
        self._context = None
        self._browser = None
        self._playwright = None


class PlaywrightLauncher(BrowserLauncher):
    """Launch browsers with Playwright."""

    def launch(self, config: BrowserConfig) -> PlaywrightBrowser:
        LOGGER.debug(
            "Starting Playwright %s (headless=%s)", config.browser_type, config.headless
        )
        playwright = sync_playwright().start()
        launch_kwargs: dict[str, Any] = {
            "headless": config.headless,
            "args": list(config.args),
        }
        if config.executable_path:
            launch_kwargs["executable_path"] = str(config.executable_path)
        viewport = {"width": config.viewport_width, "height": config.viewport_height}
        try:
            browser_type = getattr(playwright, config.browser_type)
            browser = browser_type.launch(**launch_kwargs)
            context = browser.new_context(viewport=viewport)
        except Error as exc:
            playwright.stop()
            raise DriverActionError(str(exc)) from exc
        timeout = _to_timeout(config.default_timeout)
        if timeout is not None:
            context.set_default_timeout(timeout)
        return PlaywrightBrowser(playwright, browser, context)


def _to_timeout(timeout: Optional[float]) -> Optional[int]:
    if timeout is None:
        return None
    return int(timeout * 1000)
