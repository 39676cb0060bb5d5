"""Argument and result models shared by every browser command."""

from __future__ import annotations

import enum
from typing import Annotated, Literal, Optional, Union

from pydantic import AfterValidator, AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

_URL_ADAPTER = TypeAdapter(AnyUrl)


class MouseButton(str, enum.Enum):
    LEFT = "left"
    RIGHT = "right"
    MIDDLE = "middle"


class InjectedMouseButton(str, enum.Enum):
    LEFT = "left"
    RIGHT = "right"
    MIDDLE = "middle"
    NONE = "none"


class WaitState(str, enum.Enum):
    """Element states accepted by selector waits."""

    ATTACHED = "attached"
    DETACHED = "detached"
    VISIBLE = "visible"
    HIDDEN = "hidden"


class MouseEventType(str, enum.Enum):
    PRESSED = "mousePressed"
    RELEASED = "mouseReleased"
    MOVED = "mouseMoved"
    WHEEL = "mouseWheel"


class KeyEventType(str, enum.Enum):
    KEY_DOWN = "keyDown"
    KEY_UP = "keyUp"
    CHAR = "char"


class ToolArgs(BaseModel):
    """Base for command arguments: camelCase keys, unknown keys rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


def _check_absolute_url(value: str) -> str:
    try:
        _URL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        raise ValueError(f"Invalid URL: {value!r} (an absolute URL is required)") from None
    return value


AbsoluteUrl = Annotated[str, AfterValidator(_check_absolute_url)]


class Viewport(ToolArgs):
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class LaunchArgs(ToolArgs):
    headless: Optional[bool] = Field(default=None, description="Run in headless mode")
    viewport: Optional[Viewport] = Field(default=None, description="Viewport size")
    executable_path: Optional[str] = Field(
        default=None,
        description="Path to a browser executable to launch instead of the bundled one",
    )


class NoArgs(ToolArgs):
    pass


class NavigateArgs(ToolArgs):
    url: AbsoluteUrl = Field(description="The URL to navigate to")


class SelectorArgs(ToolArgs):
    selector: str = Field(min_length=1, description="CSS selector or ref from snapshot")


class ClickArgs(SelectorArgs):
    button: Optional[MouseButton] = Field(default=None, description="Mouse button")
    click_count: Optional[int] = Field(
        default=None,
        ge=1,
        description="Number of clicks (2 for double-click)",
    )


class FillArgs(SelectorArgs):
    text: str = Field(description="Text to fill")


class TypeArgs(SelectorArgs):
    text: str = Field(description="Text to type")
    delay: Optional[float] = Field(
        default=None,
        ge=0,
        description="Delay between keystrokes in ms",
    )


class SelectArgs(SelectorArgs):
    values: Union[str, list[str]] = Field(description="Value(s) to select")


class PressArgs(ToolArgs):
    key: str = Field(min_length=1, description="Key to press (e.g. 'Enter', 'Tab', 'ArrowDown')")
    selector: Optional[str] = Field(default=None, description="Optional element to focus first")


class ScrollArgs(ToolArgs):
    selector: Optional[str] = Field(
        default=None,
        description="Element to scroll into view (scrolls the page if omitted)",
    )
    x: Optional[float] = Field(default=None, description="Horizontal scroll amount")
    y: Optional[float] = Field(default=None, description="Vertical scroll amount (positive = down)")


class ScreenshotArgs(ToolArgs):
    full_page: Optional[bool] = Field(default=None, description="Capture the full scrollable page")
    selector: Optional[str] = Field(default=None, description="Capture only this element")


class SnapshotArgs(ToolArgs):
    interactive: Optional[bool] = Field(default=None, description="Only show interactive elements")
    compact: Optional[bool] = Field(default=None, description="Compact output")
    max_depth: Optional[int] = Field(default=None, ge=0, description="Limit tree depth")


class GetAttributeArgs(SelectorArgs):
    attribute: str = Field(min_length=1, description="Attribute name (e.g. 'href', 'value')")


class EvaluateArgs(ToolArgs):
    script: str = Field(min_length=1, description="JavaScript to execute in the page")


class WaitForSelectorArgs(SelectorArgs):
    state: Optional[WaitState] = Field(default=None, description="State to wait for (default: visible)")
    timeout: Optional[float] = Field(default=None, gt=0, description="Timeout in ms (default: 30000)")


class WaitForUrlArgs(ToolArgs):
    url: str = Field(min_length=1, description="URL string or glob pattern to match")
    timeout: Optional[float] = Field(default=None, gt=0, description="Timeout in ms (default: 30000)")


class WaitArgs(ToolArgs):
    ms: float = Field(ge=0, description="Milliseconds to wait")


class NewTabArgs(ToolArgs):
    url: Optional[AbsoluteUrl] = Field(default=None, description="URL to open in the new tab")


class SwitchTabArgs(ToolArgs):
    index: int = Field(description="Tab index (0-based)")


class CloseTabArgs(ToolArgs):
    index: Optional[int] = Field(
        default=None,
        description="Tab index to close (closes the current tab if omitted)",
    )


class MouseEventArgs(ToolArgs):
    type: MouseEventType = Field(description="Event type")
    x: float = Field(description="X coordinate")
    y: float = Field(description="Y coordinate")
    button: Optional[InjectedMouseButton] = None
    click_count: Optional[int] = Field(default=None, ge=0)
    delta_x: Optional[float] = Field(default=None, description="Wheel delta X")
    delta_y: Optional[float] = Field(default=None, description="Wheel delta Y")


class KeyboardEventArgs(ToolArgs):
    type: KeyEventType = Field(description="Event type")
    key: Optional[str] = Field(default=None, description="Key value")
    code: Optional[str] = Field(default=None, description="Physical key code")
    text: Optional[str] = Field(default=None, description="Text to input (for char events)")


# Result envelope ------------------------------------------------------------


class EnvelopeModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TextContent(EnvelopeModel):
    type: Literal["text"] = "text"
    text: str


class ImageContent(EnvelopeModel):
    type: Literal["image"] = "image"
    data: str = Field(description="Base64 encoded image bytes")
    mime_type: str = "image/png"


class ToolResult(EnvelopeModel):
    """Uniform outcome of a command: content blocks plus an explicit error marker."""

    content: list[Union[TextContent, ImageContent]] = Field(default_factory=list)
    is_error: bool = False
    error_type: Optional[str] = None

    @classmethod
    def text(cls, text: str) -> "ToolResult":
        return cls(content=[TextContent(text=text)])

    @classmethod
    def failure(cls, message: str, *, error_type: str) -> "ToolResult":
        return cls(content=[TextContent(text=message)], is_error=True, error_type=error_type)

    @property
    def message(self) -> str:
        """Concatenated text of all text blocks."""

        return "\n".join(block.text for block in self.content if isinstance(block, TextContent))
