"""Resolution of caller-supplied locators to page elements."""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .base import UnknownReferenceError
from .snapshot import RefTarget, Snapshot

LOGGER = logging.getLogger(__name__)

_REF_RE = re.compile(r"^(?:@|ref=)?(?P<token>e\d+)$")


@dataclass(frozen=True)
class Selector:
    """A structural selector handed to the driver as-is."""

    value: str


@dataclass(frozen=True)
class Reference:
    """A ref minted by a snapshot, e.g. ``e3``."""

    token: str


Locator = Union[Selector, Reference]


def parse_locator(value: str) -> Locator:
    """Classify ``value``: ``e3``, ``@e3`` and ``ref=e3`` are refs, anything else a selector."""

    text = value.strip()
    match = _REF_RE.match(text)
    if match:
        return Reference(match.group("token"))
    return Selector(value)


@dataclass
class RefTable:
    """Refs of a single snapshot generation, bound to the page they came from."""

    generation: int
    page: Any = None
    url: Optional[str] = None
    targets: dict[str, RefTarget] = field(default_factory=dict)


class ReferenceResolver:
    """Hold the current ref generation and turn locators into driver locators."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generation = 0
        self._table = RefTable(generation=0)

    @property
    def generation(self) -> int:
        return self._table.generation

    def install(self, snapshot: Snapshot, page: Any) -> RefTable:
        """Replace the current table with the refs of ``snapshot``."""

        with self._lock:
            self._generation += 1
            table = RefTable(
                generation=self._generation,
                page=page,
                url=page.url,
                targets=dict(snapshot.refs),
            )
            self._table = table
        LOGGER.debug("Installed ref generation %s (%s refs)", table.generation, len(table.targets))
        return table

    def invalidate(self) -> None:
        """Drop every ref; the next snapshot starts a new generation."""

        with self._lock:
            self._generation += 1
            self._table = RefTable(generation=self._generation)

    def resolve(self, page: Any, locator: str) -> Any:
        """Return a driver locator for ``locator`` on ``page``."""

        parsed = parse_locator(locator)
        if isinstance(parsed, Selector):
            return page.locator(parsed.value)
        table = self._table
        target = table.targets.get(parsed.token)
        if target is None:
            if table.generation and table.targets:
                raise UnknownReferenceError(
                    f"Unknown ref '{parsed.token}'; take a new snapshot to get current refs"
                )
            raise UnknownReferenceError(
                f"Unknown ref '{parsed.token}'; no current snapshot, call browser_snapshot first"
            )
        if table.page is not page or table.url != page.url:
            raise UnknownReferenceError(
                f"Stale ref '{parsed.token}': the page changed since the snapshot was taken"
            )
        return target.locate(page)
