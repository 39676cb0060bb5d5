from __future__ import annotations

from browser_tools.browser.snapshot import (
    RefTarget,
    SnapshotOptions,
    build_snapshot,
    parse_aria_snapshot,
)

FORM = """\
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


def test_parse_builds_nested_tree() -> None:
    roots = parse_aria_snapshot(FORM)

    assert [node.role for node in roots] == ["banner", "main"]
    navigation = roots[0].children[0]
    assert navigation.role == "navigation"
    assert navigation.name == "Main"
    assert navigation.depth == 1
    home = navigation.children[0]
    assert home.name == "Home"
    assert home.children[0].is_property
    assert home.children[0].raw == "/url: /"
    heading = roots[1].children[0]
    assert heading.attrs == "[level=1]"


def test_parse_reads_inline_text_and_escapes() -> None:
    roots = parse_aria_snapshot(
        '- paragraph: Hello world\n- button "Say \\"hi\\""\n- \'text: with colon\': value\n'
    )

    assert roots[0].role == "paragraph"
    assert roots[0].text == "Hello world"
    assert roots[1].name == 'Say "hi"'
    assert roots[2].role == "text"


def test_duplicate_names_get_ordinals() -> None:
    snapshot = build_snapshot(FORM)

    buttons = [target for target in snapshot.refs.values() if target.role == "button"]
    assert buttons == [
        RefTarget(role="button", name="Submit", nth=0),
        RefTarget(role="button", name="Submit", nth=1),
    ]


def test_full_snapshot_renders_tree_with_refs() -> None:
    snapshot = build_snapshot(FORM)

    assert snapshot.text.splitlines() == [
        "- banner",
        '  - navigation "Main" [ref=e1]',
        '    - link "Home" [ref=e2]',
        "      - /url: /",
        '    - link "Docs" [ref=e3]',
        "      - /url: /docs",
        "- main",
        '  - heading "Sign in" [level=1] [ref=e4]',
        '  - textbox "Email" [ref=e5]',
        '  - checkbox "Remember me" [checked] [ref=e6]',
        '  - button "Submit" [ref=e7]',
        '  - button "Submit" [ref=e8]',
        "  - generic",
        "    - text: footer",
    ]
    assert list(snapshot.refs) == [f"e{i}" for i in range(1, 9)]
    assert snapshot.refs["e5"] == RefTarget(role="textbox", name="Email", nth=0)


def test_refs_are_deterministic() -> None:
    first = build_snapshot(FORM)
    second = build_snapshot(FORM)

    assert first.text == second.text
    assert first.refs == second.refs


def test_interactive_snapshot_is_flat() -> None:
    snapshot = build_snapshot(FORM, SnapshotOptions(interactive_only=True))

    assert snapshot.text.splitlines() == [
        '- link "Home" [ref=e1]',
        '- link "Docs" [ref=e2]',
        '- textbox "Email" [ref=e3]',
        '- checkbox "Remember me" [checked] [ref=e4]',
        '- button "Submit" [ref=e5]',
        '- button "Submit" [ref=e6]',
    ]
    assert snapshot.refs["e1"] == RefTarget(role="link", name="Home", nth=0)


def test_max_depth_limits_tree_and_refs() -> None:
    snapshot = build_snapshot(FORM, SnapshotOptions(max_depth=1))

    assert "link" not in snapshot.text
    assert "- banner" in snapshot.text
    assert '  - navigation "Main" [ref=e1]' in snapshot.text
    assert snapshot.refs["e2"] == RefTarget(role="heading", name="Sign in", nth=0)


def test_compact_drops_empty_structure() -> None:
    outline = "- generic\n- generic:\n  - /url: /x\n- button \"Go\"\n"

    snapshot = build_snapshot(outline, SnapshotOptions(compact=True))

    assert snapshot.text == '- button "Go" [ref=e1]'


def test_empty_outline_placeholders() -> None:
    assert build_snapshot("").text == "(empty page)"
    assert (
        build_snapshot("- paragraph: text only", SnapshotOptions(interactive_only=True)).text
        == "(no interactive elements)"
    )


def test_ref_target_locates_by_role() -> None:
    calls: list[tuple] = []

    class Locator:
        def nth(self, index: int):
            calls.append(("nth", index))
            return self

    class Page:
        def get_by_role(self, role, **kwargs):
            calls.append(("get_by_role", role, kwargs))
            return Locator()

    RefTarget(role="button", name="Submit", nth=1).locate(Page())

    assert calls == [
        ("get_by_role", "button", {"name": "Submit", "exact": True}),
        ("nth", 1),
    ]
