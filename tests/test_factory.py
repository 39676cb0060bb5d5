from __future__ import annotations

from browser_tools.browser.playwright_session import PlaywrightLauncher
from browser_tools.config import BrowserConfig
from browser_tools.factory import build_dispatcher, build_launcher, build_session_handle


def test_build_launcher_uses_playwright() -> None:
    assert isinstance(build_launcher(), PlaywrightLauncher)


def test_build_session_handle_keeps_config_and_launcher(launcher) -> None:
    config = BrowserConfig(headless=False)

    handle = build_session_handle(config, launcher)
    handle.ensure()

    assert handle.config is config
    assert launcher.browsers[0].config is config
    handle.close()


def test_build_dispatcher_registers_every_command(handle) -> None:
    dispatcher = build_dispatcher(handle)
    try:
        assert len(dispatcher.names()) == 31
    finally:
        dispatcher.shutdown()
