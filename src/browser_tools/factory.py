"""Factories for constructing components from configuration."""

from __future__ import annotations

from typing import Optional

from .browser.base import BrowserLauncher
from .browser.playwright_session import PlaywrightLauncher
from .browser.session import SessionHandle
from .config import BrowserConfig
from .tools.browser import registry
from .tools.registry import ToolDispatcher


def build_launcher() -> BrowserLauncher:
    return PlaywrightLauncher()


def build_session_handle(
    config: BrowserConfig,
    launcher: Optional[BrowserLauncher] = None,
) -> SessionHandle:
    return SessionHandle(launcher or build_launcher(), config)


def build_dispatcher(handle: SessionHandle) -> ToolDispatcher:
    return ToolDispatcher(handle, registry)
