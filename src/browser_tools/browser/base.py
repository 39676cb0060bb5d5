"""Browser driver abstractions and the command error taxonomy."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..config import BrowserConfig


class BrowserToolError(RuntimeError):
    """Base class for failures reported by browser commands."""


class ArgumentValidationError(BrowserToolError):
    """Raised when command arguments do not match the command schema."""


class UnknownReferenceError(BrowserToolError):
    """Raised when an element ref is unknown or belongs to a superseded snapshot."""


class IndexOutOfRangeError(BrowserToolError):
    """Raised when a tab index does not denote an open tab."""


class DriverTimeoutError(BrowserToolError):
    """Raised when a wait, navigation or action exceeds its timeout."""


class DriverActionError(BrowserToolError):
    """Raised when the browser driver rejects the requested action."""


class SessionAbsentError(BrowserToolError):
    """Raised when a command needs a session but none is running."""


class LaunchedBrowser(ABC):
    """A running browser process together with its browsing context."""

    @property
    @abstractmethod
    def context(self) -> Any:
        """Return the browsing context that owns every page of the session."""

    @abstractmethod
    def is_connected(self) -> bool:
        """Return whether the browser process is still reachable."""

    @abstractmethod
    def close(self) -> None:
        """Close the context and terminate the browser."""


class BrowserLauncher(ABC):
    """Interface for starting browser processes."""

    @abstractmethod
    def launch(self, config: BrowserConfig) -> LaunchedBrowser:
        """Launch a browser using ``config`` and return the running instance."""
