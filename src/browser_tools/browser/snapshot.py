"""Accessibility snapshots annotated with element refs.

Playwright renders the accessibility tree of a page as a YAML-like outline
(``locator.aria_snapshot()``)::

    - navigation:
      - link "Home":
        - /url: /
    - heading "Welcome" [level=1]
    - textbox "Email"
    - button "Sign in"

This module parses that outline, filters it, and mints short refs (``e1``,
``e2``, ...) in document order for the nodes an agent may want to act on.
Each ref remembers the role, accessible name and ordinal of its node so it
can later be turned back into a ``get_by_role`` locator.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

LOGGER = logging.getLogger(__name__)

INTERACTIVE_ROLES = frozenset(
    {
        "button",
        "checkbox",
        "combobox",
        "link",
        "listbox",
        "menuitem",
        "menuitemcheckbox",
        "menuitemradio",
        "option",
        "radio",
        "scrollbar",
        "searchbox",
        "slider",
        "spinbutton",
        "switch",
        "tab",
        "textbox",
        "treeitem",
    }
)

# Structural roles that get a ref when they carry a name.
CONTENT_ROLES = frozenset(
    {
        "article",
        "cell",
        "columnheader",
        "gridcell",
        "heading",
        "listitem",
        "main",
        "navigation",
        "region",
        "rowheader",
    }
)

_ITEM_RE = re.compile(r"^(?P<indent>\s*)- (?P<body>.*)$")
_QUOTED_KEY_RE = re.compile(r"^'(?P<key>(?:[^']|'')*)'(?P<rest>:.*)?$")
_NODE_RE = re.compile(
    r'^(?P<role>[A-Za-z][\w-]*)'
    r'(?:\s+"(?P<name>(?:[^"\\]|\\.)*)")?'
    r"(?P<attrs>(?:\s*\[[^\]]*\])*)"
    r"(?P<rest>:.*)?$"
)


@dataclass
class AriaNode:
    """One line of an aria snapshot outline."""

    role: str
    name: Optional[str] = None
    attrs: str = ""
    text: Optional[str] = None
    depth: int = 0
    raw: Optional[str] = None
    children: list["AriaNode"] = field(default_factory=list)
    nth: int = 0

    @property
    def is_property(self) -> bool:
        """True for ``/url: ...`` style lines and anything unparsable."""

        return self.raw is not None


@dataclass(frozen=True)
class RefTarget:
    """How a minted ref finds its element again."""

    role: str
    name: Optional[str]
    nth: int

    def locate(self, page: Any) -> Any:
        if self.name is not None:
            locator = page.get_by_role(self.role, name=self.name, exact=True)
        else:
            locator = page.get_by_role(self.role)
        return locator.nth(self.nth)


@dataclass
class SnapshotOptions:
    interactive_only: bool = False
    compact: bool = False
    max_depth: Optional[int] = None


@dataclass
class Snapshot:
    """Rendered outline plus the refs minted while rendering it."""

    text: str
    refs: dict[str, RefTarget]


def parse_aria_snapshot(outline: str) -> list[AriaNode]:
    """Parse an aria snapshot outline into a forest of nodes."""

    roots: list[AriaNode] = []
    stack: list[tuple[int, AriaNode]] = []
    for line in outline.splitlines():
        match = _ITEM_RE.match(line)
        if not match:
            continue
        indent = len(match.group("indent"))
        node = _parse_item(match.group("body"))
        while stack and stack[-1][0] >= indent:
            stack.pop()
        node.depth = len(stack)
        if stack:
            stack[-1][1].children.append(node)
        else:
            roots.append(node)
        stack.append((indent, node))
    _assign_ordinals(roots)
    return roots


def build_snapshot(outline: str, options: Optional[SnapshotOptions] = None) -> Snapshot:
    """Render ``outline`` according to ``options`` and mint refs."""

    options = options or SnapshotOptions()
    roots = parse_aria_snapshot(outline)
    builder = _Renderer(options)
    lines = builder.render(roots)
    if not lines:
        text = "(no interactive elements)" if options.interactive_only else "(empty page)"
    else:
        text = "\n".join(lines)
    return Snapshot(text=text, refs=builder.refs)


def take_snapshot(page: Any, options: Optional[SnapshotOptions] = None) -> Snapshot:
    """Capture the current page through the driver and build a snapshot."""

    outline = page.locator("body").aria_snapshot()
    snapshot = build_snapshot(outline, options)
    LOGGER.debug("Captured snapshot of %s with %s refs", page.url, len(snapshot.refs))
    return snapshot


def _parse_item(body: str) -> AriaNode:
    quoted = _QUOTED_KEY_RE.match(body)
    if quoted:
        body = quoted.group("key").replace("''", "'") + (quoted.group("rest") or "")
    match = _NODE_RE.match(body)
    if not match:
        return AriaNode(role="", raw=body)
    rest = match.group("rest")
    text = rest[1:].strip() if rest else None
    name = match.group("name")
    if name is not None:
        name = name.replace('\\"', '"').replace("\\\\", "\\")
    return AriaNode(
        role=match.group("role"),
        name=name,
        attrs=match.group("attrs").strip(),
        text=_unquote(text) if text else None,
    )


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        inner = value[1:-1]
        return inner.replace("''", "'") if value[0] == "'" else inner.replace('\\"', '"')
    return value


def _walk(nodes: list[AriaNode]) -> Iterator[AriaNode]:
    for node in nodes:
        yield node
        yield from _walk(node.children)


def _assign_ordinals(roots: list[AriaNode]) -> None:
    # Ordinals follow get_by_role semantics: a named lookup matches nodes with
    # the same role and name, an unnamed lookup matches every node of the role.
    seen: dict[tuple[str, Optional[str]], int] = {}
    for node in _walk(roots):
        if node.is_property:
            continue
        key = (node.role, node.name)
        node.nth = seen.get(key, 0)
        seen[key] = node.nth + 1
        if node.name is not None:
            any_key = (node.role, None)
            seen[any_key] = seen.get(any_key, 0) + 1


class _Renderer:
    def __init__(self, options: SnapshotOptions) -> None:
        self._options = options
        self.refs: dict[str, RefTarget] = {}

    def render(self, roots: list[AriaNode]) -> list[str]:
        lines: list[str] = []
        for node in roots:
            lines.extend(self._render_node(node))
        return lines

    def _render_node(self, node: AriaNode) -> list[str]:
        options = self._options
        if options.max_depth is not None and node.depth > options.max_depth:
            return []
        if node.is_property:
            if options.interactive_only:
                return []
            return [self._indent(node) + f"- {node.raw}"]
        if options.interactive_only:
            lines: list[str] = []
            if node.role in INTERACTIVE_ROLES:
                lines.append("- " + self._describe(node, self._mint(node)))
            for child in node.children:
                lines.extend(self._render_node(child))
            return lines
        ref = self._mint(node) if self._wants_ref(node) else None
        head = self._indent(node) + "- " + self._describe(node, ref)
        child_lines: list[str] = []
        keeps_content = False
        for child in node.children:
            rendered = self._render_node(child)
            if rendered and not child.is_property:
                keeps_content = True
            child_lines.extend(rendered)
        if options.compact and ref is None and not node.name and not node.text and not keeps_content:
            return []
        return [head, *child_lines]

    @staticmethod
    def _wants_ref(node: AriaNode) -> bool:
        if node.role in INTERACTIVE_ROLES:
            return True
        return node.role in CONTENT_ROLES and bool(node.name)

    def _mint(self, node: AriaNode) -> str:
        ref = f"e{len(self.refs) + 1}"
        self.refs[ref] = RefTarget(role=node.role, name=node.name, nth=node.nth)
        return ref

    def _indent(self, node: AriaNode) -> str:
        return "  " * node.depth

    @staticmethod
    def _describe(node: AriaNode, ref: Optional[str]) -> str:
        parts = [node.role]
        if node.name is not None:
            escaped = node.name.replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'"{escaped}"')
        if node.attrs:
            parts.append(node.attrs)
        if ref:
            parts.append(f"[ref={ref}]")
        line = " ".join(parts)
        if node.text:
            line += f": {node.text}"
        return line
