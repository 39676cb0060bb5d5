"""Browser commands exposed to the agent loop."""

from __future__ import annotations

import base64
import json
import time
from typing import Any

from ..browser.snapshot import SnapshotOptions
from ..config import BrowserConfig
from ..models import (
    ClickArgs,
    CloseTabArgs,
    EvaluateArgs,
    FillArgs,
    GetAttributeArgs,
    ImageContent,
    KeyboardEventArgs,
    LaunchArgs,
    MouseEventArgs,
    NavigateArgs,
    NewTabArgs,
    NoArgs,
    PressArgs,
    ScreenshotArgs,
    ScrollArgs,
    SelectArgs,
    SelectorArgs,
    SnapshotArgs,
    SwitchTabArgs,
    TextContent,
    ToolResult,
    TypeArgs,
    WaitArgs,
    WaitForSelectorArgs,
    WaitForUrlArgs,
    WaitState,
)
from .registry import ToolContext, ToolRegistry

DEFAULT_WAIT_TIMEOUT_MS = 30_000
DEFAULT_SCROLL_Y = 300

registry = ToolRegistry()


# Launch & navigation ---------------------------------------------------------


@registry.tool(
    "browser_launch",
    "Launch or ensure the browser is running. Call this before other browser operations.",
    LaunchArgs,
    label="Launch",
)
def launch(ctx: ToolContext, args: LaunchArgs) -> ToolResult:
    if ctx.handle.is_live:
        return ToolResult.text("Browser already running")
    config = _launch_config(ctx.handle.config, args)
    ctx.handle.launch(config)
    return ToolResult.text("Browser launched successfully")


def _launch_config(base: BrowserConfig, args: LaunchArgs) -> BrowserConfig:
    updates: dict[str, Any] = {}
    if args.headless is not None:
        updates["headless"] = args.headless
    if args.viewport is not None:
        updates["viewport_width"] = args.viewport.width
        updates["viewport_height"] = args.viewport.height
    if args.executable_path:
        updates["executable_path"] = args.executable_path
    if not updates:
        return base
    return BrowserConfig.model_validate({**base.model_dump(), **updates})


@registry.tool("browser_navigate", "Navigate to a URL", NavigateArgs, label="Navigation")
def navigate(ctx: ToolContext, args: NavigateArgs) -> ToolResult:
    session = ctx.session
    page = session.page
    session.refs.invalidate()
    page.goto(args.url, wait_until=session.config.wait_until)
    return ToolResult.text(f"Navigated to {args.url}\nTitle: {page.title()}")


@registry.tool("browser_back", "Go back in browser history", NoArgs, label="Back")
def back(ctx: ToolContext, args: NoArgs) -> ToolResult:
    session = ctx.session
    session.refs.invalidate()
    session.page.go_back()
    return ToolResult.text("Navigated back")


@registry.tool("browser_forward", "Go forward in browser history", NoArgs, label="Forward")
def forward(ctx: ToolContext, args: NoArgs) -> ToolResult:
    session = ctx.session
    session.refs.invalidate()
    session.page.go_forward()
    return ToolResult.text("Navigated forward")


@registry.tool("browser_reload", "Reload the current page", NoArgs, label="Reload")
def reload(ctx: ToolContext, args: NoArgs) -> ToolResult:
    session = ctx.session
    session.refs.invalidate()
    session.page.reload()
    return ToolResult.text("Page reloaded")


# Element interaction ---------------------------------------------------------


@registry.tool(
    "browser_click",
    "Click on an element. Accepts a CSS selector or a ref from a snapshot (e.g. 'e1', '@e1').",
    ClickArgs,
    label="Click",
)
def click(ctx: ToolContext, args: ClickArgs) -> ToolResult:
    kwargs: dict[str, Any] = {}
    if args.button is not None:
        kwargs["button"] = args.button.value
    if args.click_count is not None:
        kwargs["click_count"] = args.click_count
    ctx.session.locate(args.selector).click(**kwargs)
    return ToolResult.text(f'Clicked "{args.selector}"')


@registry.tool(
    "browser_hover",
    "Hover over an element (useful for dropdowns and tooltips)",
    SelectorArgs,
    label="Hover",
)
def hover(ctx: ToolContext, args: SelectorArgs) -> ToolResult:
    ctx.session.locate(args.selector).hover()
    return ToolResult.text(f'Hovering over "{args.selector}"')


@registry.tool("browser_fill", "Clear an input and fill it with text", FillArgs, label="Fill")
def fill(ctx: ToolContext, args: FillArgs) -> ToolResult:
    ctx.session.locate(args.selector).fill(args.text)
    return ToolResult.text(f'Filled "{args.selector}"')


@registry.tool(
    "browser_type",
    "Type text into an element key by key (appends to existing content)",
    TypeArgs,
    label="Type",
)
def type_text(ctx: ToolContext, args: TypeArgs) -> ToolResult:
    kwargs: dict[str, Any] = {}
    if args.delay is not None:
        kwargs["delay"] = args.delay
    ctx.session.locate(args.selector).press_sequentially(args.text, **kwargs)
    return ToolResult.text(f'Typed into "{args.selector}"')


@registry.tool("browser_select", "Select option(s) from a dropdown", SelectArgs, label="Select")
def select(ctx: ToolContext, args: SelectArgs) -> ToolResult:
    ctx.session.locate(args.selector).select_option(args.values)
    return ToolResult.text(f'Selected in "{args.selector}"')


@registry.tool("browser_check", "Check a checkbox or radio button", SelectorArgs, label="Check")
def check(ctx: ToolContext, args: SelectorArgs) -> ToolResult:
    ctx.session.locate(args.selector).check()
    return ToolResult.text(f'Checked "{args.selector}"')


@registry.tool("browser_uncheck", "Uncheck a checkbox", SelectorArgs, label="Uncheck")
def uncheck(ctx: ToolContext, args: SelectorArgs) -> ToolResult:
    ctx.session.locate(args.selector).uncheck()
    return ToolResult.text(f'Unchecked "{args.selector}"')


@registry.tool(
    "browser_press",
    "Press a keyboard key (Enter, Tab, Escape, ...), optionally on a focused element",
    PressArgs,
    label="Press",
)
def press(ctx: ToolContext, args: PressArgs) -> ToolResult:
    session = ctx.session
    if args.selector:
        session.locate(args.selector).press(args.key)
    else:
        session.page.keyboard.press(args.key)
    return ToolResult.text(f'Pressed "{args.key}"')


@registry.tool("browser_scroll", "Scroll the page or an element", ScrollArgs, label="Scroll")
def scroll(ctx: ToolContext, args: ScrollArgs) -> ToolResult:
    session = ctx.session
    if args.selector:
        session.locate(args.selector).scroll_into_view_if_needed()
    else:
        delta_y = args.y if args.y is not None else DEFAULT_SCROLL_Y
        session.page.mouse.wheel(args.x or 0, delta_y)
    return ToolResult.text("Scrolled")


# Screenshots & page info -----------------------------------------------------


@registry.tool(
    "browser_screenshot",
    "Take a screenshot and return it as an image for visual analysis",
    ScreenshotArgs,
    label="Screenshot",
)
def screenshot(ctx: ToolContext, args: ScreenshotArgs) -> ToolResult:
    session = ctx.session
    if args.selector:
        data = session.locate(args.selector).screenshot(type="png")
    else:
        data = session.page.screenshot(type="png", full_page=bool(args.full_page))
    return ToolResult(
        content=[
            ImageContent(data=base64.b64encode(data).decode("ascii"), mime_type="image/png"),
            TextContent(
                text="Screenshot captured. Analyze the image to understand page content and layout."
            ),
        ]
    )


@registry.tool(
    "browser_snapshot",
    "Get the accessibility tree with element refs for interaction. "
    "Use refs like 'e1' with other tools.",
    SnapshotArgs,
    label="Snapshot",
)
def snapshot(ctx: ToolContext, args: SnapshotArgs) -> ToolResult:
    result = ctx.session.snapshot(
        SnapshotOptions(
            interactive_only=bool(args.interactive),
            compact=bool(args.compact),
            max_depth=args.max_depth,
        )
    )
    return ToolResult.text(
        f"Accessibility tree:\n{result.text}\n\n"
        "Use element refs (e.g., 'e1', 'e2') with browser_click, browser_fill, etc."
    )


@registry.tool("browser_get_text", "Get the text content of an element", SelectorArgs, label="Get text")
def get_text(ctx: ToolContext, args: SelectorArgs) -> ToolResult:
    text = ctx.session.locate(args.selector).text_content()
    return ToolResult.text(text or "(empty)")


@registry.tool(
    "browser_get_attribute",
    "Get an attribute value from an element",
    GetAttributeArgs,
    label="Get attribute",
)
def get_attribute(ctx: ToolContext, args: GetAttributeArgs) -> ToolResult:
    value = ctx.session.locate(args.selector).get_attribute(args.attribute)
    return ToolResult.text(value or "(null)")


@registry.tool("browser_get_url", "Get the current page URL", NoArgs, label="Get URL")
def get_url(ctx: ToolContext, args: NoArgs) -> ToolResult:
    return ToolResult.text(ctx.page.url)


@registry.tool("browser_get_title", "Get the current page title", NoArgs, label="Get title")
def get_title(ctx: ToolContext, args: NoArgs) -> ToolResult:
    return ToolResult.text(ctx.page.title())


@registry.tool(
    "browser_evaluate",
    "Execute JavaScript in the page context and return the result",
    EvaluateArgs,
    label="Evaluate",
)
def evaluate(ctx: ToolContext, args: EvaluateArgs) -> ToolResult:
    result = ctx.page.evaluate(args.script)
    if result is None:
        return ToolResult.text("(null)")
    if isinstance(result, str):
        return ToolResult.text(result)
    return ToolResult.text(json.dumps(result, indent=2, default=str))


# Waiting ---------------------------------------------------------------------


@registry.tool(
    "browser_wait_for_selector",
    "Wait for an element to reach a state (default: visible)",
    WaitForSelectorArgs,
    label="Wait",
)
def wait_for_selector(ctx: ToolContext, args: WaitForSelectorArgs) -> ToolResult:
    state = args.state or WaitState.VISIBLE
    ctx.page.wait_for_selector(
        args.selector,
        state=state.value,
        timeout=args.timeout or DEFAULT_WAIT_TIMEOUT_MS,
    )
    return ToolResult.text(f'Element "{args.selector}" found')


@registry.tool(
    "browser_wait_for_url",
    "Wait for the URL to match a string or glob pattern",
    WaitForUrlArgs,
    label="Wait for URL",
)
def wait_for_url(ctx: ToolContext, args: WaitForUrlArgs) -> ToolResult:
    ctx.page.wait_for_url(args.url, timeout=args.timeout or DEFAULT_WAIT_TIMEOUT_MS)
    return ToolResult.text(f"URL matched: {args.url}")


@registry.tool("browser_wait", "Wait for a specified duration", WaitArgs, label="Wait")
def wait(ctx: ToolContext, args: WaitArgs) -> ToolResult:
    time.sleep(args.ms / 1000)
    return ToolResult.text(f"Waited {args.ms:g}ms")


# Tab management --------------------------------------------------------------


@registry.tool("browser_new_tab", "Open a new browser tab", NewTabArgs, label="New tab")
def new_tab(ctx: ToolContext, args: NewTabArgs) -> ToolResult:
    session = ctx.session
    session.refs.invalidate()
    info = session.tabs.new_tab(args.url, wait_until=session.config.wait_until)
    suffix = f" at {args.url}" if args.url else ""
    return ToolResult.text(f"Opened tab {info.index} of {len(session.tabs)}{suffix}")


@registry.tool(
    "browser_switch_tab",
    "Switch to a specific tab by index",
    SwitchTabArgs,
    label="Switch tab",
)
def switch_tab(ctx: ToolContext, args: SwitchTabArgs) -> ToolResult:
    session = ctx.session
    info = session.tabs.switch_to(args.index)
    session.refs.invalidate()
    return ToolResult.text(f"Switched to tab {info.index}: {info.title}\nURL: {info.url}")


@registry.tool("browser_list_tabs", "List all open tabs", NoArgs, label="List tabs")
def list_tabs(ctx: ToolContext, args: NoArgs) -> ToolResult:
    tabs = ctx.session.tabs.list_tabs()
    if not tabs:
        return ToolResult.text("(no open tabs)")
    lines = [
        f"{'→ ' if tab.active else '  '}[{tab.index}] {tab.title}\n     {tab.url}"
        for tab in tabs
    ]
    return ToolResult.text("\n".join(lines))


@registry.tool("browser_close_tab", "Close a tab", CloseTabArgs, label="Close tab")
def close_tab(ctx: ToolContext, args: CloseTabArgs) -> ToolResult:
    session = ctx.session
    closed, remaining = session.tabs.close_tab(args.index)
    session.refs.invalidate()
    return ToolResult.text(f"Closed tab {closed}, {remaining} tabs remaining")


# Low-level input -------------------------------------------------------------


@registry.tool(
    "browser_mouse_event",
    "Inject a low-level mouse event at specific coordinates",
    MouseEventArgs,
    label="Mouse event",
)
def mouse_event(ctx: ToolContext, args: MouseEventArgs) -> ToolResult:
    session = ctx.session
    session.input.mouse_event(
        session.page,
        event_type=args.type.value,
        x=args.x,
        y=args.y,
        button=args.button.value if args.button else None,
        click_count=args.click_count,
        delta_x=args.delta_x,
        delta_y=args.delta_y,
    )
    return ToolResult.text(f"Mouse {args.type.value} at ({args.x:g}, {args.y:g})")


@registry.tool(
    "browser_keyboard_event",
    "Inject a low-level keyboard event",
    KeyboardEventArgs,
    label="Keyboard event",
)
def keyboard_event(ctx: ToolContext, args: KeyboardEventArgs) -> ToolResult:
    session = ctx.session
    session.input.keyboard_event(
        session.page,
        event_type=args.type.value,
        key=args.key,
        code=args.code,
        text=args.text,
    )
    return ToolResult.text(f"Keyboard {args.type.value}: {args.key or args.text}")


# Cleanup ---------------------------------------------------------------------


@registry.tool("browser_close", "Close the browser completely", NoArgs, label="Close")
def close(ctx: ToolContext, args: NoArgs) -> ToolResult:
    ctx.handle.close()
    return ToolResult.text("Browser closed")
