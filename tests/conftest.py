from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from browser_tools.browser.base import BrowserLauncher, LaunchedBrowser
from browser_tools.browser.session import SessionHandle
from browser_tools.config import BrowserConfig
from browser_tools.factory import build_dispatcher

EXAMPLE_OUTLINE = """\
- heading "Example Domain" [level=1]
- paragraph: This domain is for use in illustrative examples.
- link "More information...":
  - /url: https://www.iana.org/domains/example
"""

FORM_OUTLINE = """\
- banner:
  - navigation "Main":
    - link "Home":
      - /url: /
    - link "Docs":
      - /url: /docs
- main:
  - heading "Sign in" [level=1]
  - textbox "Email"
  - checkbox "Remember me" [checked]
  - button "Submit"
  - button "Submit"
  - generic:
    - text: footer
"""


@dataclass
class SitePage:
    title: str = ""
    outline: str = ""
    elements: set[str] = field(default_factory=set)
    texts: dict[str, str] = field(default_factory=dict)
    attributes: dict[tuple[str, str], str] = field(default_factory=dict)


DEFAULT_SITE = {
    "about:blank": SitePage(),
    "https://example.test": SitePage(
        title="Example Domain",
        outline=EXAMPLE_OUTLINE,
        elements={"h1", "a"},
        texts={"h1": "Example Domain"},
        attributes={("a", "href"): "https://www.iana.org/domains/example"},
    ),
    "https://form.test": SitePage(
        title="Sign in",
        outline=FORM_OUTLINE,
        elements={"#email", "button"},
    ),
}


class Emitter:
    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[..., Any]]] = {}

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def emit(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers.get(event, [])):
            handler(*args)


class FakeKeyboard:
    def __init__(self, page: "FakePage") -> None:
        self._page = page

    def press(self, key: str) -> None:
        self._page.actions.append(("keyboard.press", None, {"key": key}))


class FakeMouse:
    def __init__(self, page: "FakePage") -> None:
        self._page = page

    def wheel(self, delta_x: float, delta_y: float) -> None:
        self._page.actions.append(("mouse.wheel", None, {"delta_x": delta_x, "delta_y": delta_y}))


class FakeLocator:
    def __init__(self, page: "FakePage", target: tuple[Any, ...]) -> None:
        self.page = page
        self.target = target

    def nth(self, index: int) -> "FakeLocator":
        return FakeLocator(self.page, (*self.target, index))

    def _act(self, action: str, **kwargs: Any) -> None:
        if self.target[0] == "css" and self.target[1] in self.page.broken:
            raise PlaywrightError(f"Element is not interactable\nCall log:\n  - {action}")
        self.page.actions.append((action, self.target, kwargs))

    def click(self, **kwargs: Any) -> None:
        self._act("click", **kwargs)

    def hover(self) -> None:
        self._act("hover")

    def fill(self, value: str) -> None:
        self._act("fill", value=value)

    def press_sequentially(self, text: str, **kwargs: Any) -> None:
        self._act("press_sequentially", text=text, **kwargs)

    def select_option(self, value: Any) -> list[str]:
        self._act("select_option", value=value)
        return list(value) if isinstance(value, list) else [value]

    def check(self) -> None:
        self._act("check")

    def uncheck(self) -> None:
        self._act("uncheck")

    def press(self, key: str) -> None:
        self._act("press", key=key)

    def scroll_into_view_if_needed(self) -> None:
        self._act("scroll_into_view_if_needed")

    def screenshot(self, **kwargs: Any) -> bytes:
        self._act("screenshot", **kwargs)
        return b"element-png"

    def text_content(self) -> Optional[str]:
        return self.page.site_page.texts.get(self.target[1])

    def get_attribute(self, name: str) -> Optional[str]:
        return self.page.site_page.attributes.get((self.target[1], name))

    def aria_snapshot(self) -> str:
        return self.page.site_page.outline


class FakePage(Emitter):
    def __init__(self, context: "FakeContext") -> None:
        super().__init__()
        self.context = context
        self.url = "about:blank"
        self.history: list[str] = ["about:blank"]
        self.position = 0
        self.actions: list[tuple[str, Any, dict[str, Any]]] = []
        self.broken: set[str] = set()
        self.eval_results: dict[str, Any] = {}
        self.crashed = False
        self.closed = False
        self.keyboard = FakeKeyboard(self)
        self.mouse = FakeMouse(self)

    @property
    def site_page(self) -> SitePage:
        return self.context.site.get(self.url, SitePage(title=self.url))

    def title(self) -> str:
        return self.site_page.title

    def goto(self, url: str, wait_until: Optional[str] = None, timeout: Any = None) -> None:
        if self.crashed:
            raise PlaywrightError("Target page, context or browser has been closed")
        if url not in self.context.site:
            raise PlaywrightError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        self.history = self.history[: self.position + 1] + [url]
        self.position = len(self.history) - 1
        self.url = url
        self.actions.append(("goto", url, {"wait_until": wait_until}))

    def go_back(self) -> None:
        self.position = max(self.position - 1, 0)
        self.url = self.history[self.position]

    def go_forward(self) -> None:
        self.position = min(self.position + 1, len(self.history) - 1)
        self.url = self.history[self.position]

    def reload(self) -> None:
        self.actions.append(("reload", self.url, {}))

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, ("css", selector))

    def get_by_role(self, role: str, name: Optional[str] = None, exact: Optional[bool] = None) -> FakeLocator:
        return FakeLocator(self, ("role", role, name))

    def screenshot(self, **kwargs: Any) -> bytes:
        self.actions.append(("screenshot", None, kwargs))
        return b"page-png"

    def evaluate(self, expression: str) -> Any:
        return self.eval_results.get(expression)

    def wait_for_selector(self, selector: str, state: str = "visible", timeout: float = 30000) -> None:
        self.actions.append(("wait_for_selector", selector, {"state": state, "timeout": timeout}))
        if selector not in self.site_page.elements:
            raise PlaywrightTimeoutError(
                f"Timeout {timeout:g}ms exceeded.\n=========================== logs"
            )

    def wait_for_url(self, url: str, timeout: float = 30000) -> None:
        if url != self.url:
            raise PlaywrightTimeoutError(f"Timeout {timeout:g}ms exceeded.")

    def bring_to_front(self) -> None:
        self.context.front = self

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self in self.context.pages:
            self.context.pages.remove(self)
        self.emit("close", self)


class FakeCDPSession:
    def __init__(self, context: "FakeContext", page: FakePage) -> None:
        self._context = context
        self._page = page

    def send(self, method: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        self._context.cdp_calls.append((self._page, method, params or {}))
        return {}

    def detach(self) -> None:
        return None


class FakeContext(Emitter):
    def __init__(self, site: dict[str, SitePage]) -> None:
        super().__init__()
        self.site = site
        self.pages: list[FakePage] = []
        self.front: Optional[FakePage] = None
        self.cdp_calls: list[tuple[FakePage, str, dict[str, Any]]] = []
        self.cdp_supported = True

    def new_page(self) -> FakePage:
        page = FakePage(self)
        self.pages.append(page)
        self.emit("page", page)
        return page

    def new_cdp_session(self, page: FakePage) -> FakeCDPSession:
        if not self.cdp_supported:
            raise PlaywrightError("CDP session is only available in Chromium")
        return FakeCDPSession(self, page)


class FakeBrowser(LaunchedBrowser):
    def __init__(self, site: dict[str, SitePage], config: BrowserConfig) -> None:
        self._context = FakeContext(site)
        self.config = config
        self.closed = False
        self.connected = True

    @property
    def context(self) -> FakeContext:
        return self._context

    def is_connected(self) -> bool:
        return self.connected and not self.closed

    def disconnect(self) -> None:
        """Simulate a crashed browser: the process is gone, pages stop answering."""

        self.connected = False
        for page in self._context.pages:
            page.crashed = True

    def close(self) -> None:
        self.closed = True


class FakeLauncher(BrowserLauncher):
    def __init__(self, site: Optional[dict[str, SitePage]] = None) -> None:
        self.site = dict(site or DEFAULT_SITE)
        self.browsers: list[FakeBrowser] = []

    def launch(self, config: BrowserConfig) -> FakeBrowser:
        browser = FakeBrowser(self.site, config)
        self.browsers.append(browser)
        return browser

    @property
    def context(self) -> FakeContext:
        return self.browsers[-1].context

    @property
    def live_browsers(self) -> list[FakeBrowser]:
        return [browser for browser in self.browsers if not browser.closed]


@pytest.fixture
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def handle(launcher: FakeLauncher) -> SessionHandle:
    return SessionHandle(launcher, BrowserConfig())


@pytest.fixture
def dispatcher(handle: SessionHandle):
    dispatcher = build_dispatcher(handle)
    yield dispatcher
    dispatcher.shutdown()


@pytest.fixture
def context(launcher: FakeLauncher) -> FakeContext:
    return launcher.launch(BrowserConfig()).context
