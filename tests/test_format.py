"""Tests for JSON-style and tree-style line formatting."""

from jfold._format import (
    FormatOptions,
    IndentConfig,
    format_line,
    format_lines,
    format_primitive,
)
from jfold._navigation import ActionKind, NavigationAction, handle_navigation
from jfold._state import initialize_state
from jfold._tree import build_tree


def lines_for(data, **kwargs):
    return format_lines(initialize_state(data), **kwargs)


class TestJsonStyle:
    """JSON-like rendering."""

    def test_flat_object(self):
        assert lines_for({"a": 1, "b": 2, "c": 3}) == [
            "{",
            '  "a": 1,',
            '  "b": 2,',
            '  "c": 3',
            "}",
        ]

    def test_collapsed_root(self):
        state = initialize_state({"a": 1, "b": 2, "c": 3})
        state = handle_navigation(
            state, NavigationAction(ActionKind.TOGGLE_NODE)
        ).state
        assert format_lines(state) == ["{...}"]

    def test_nested_commas_on_closing_lines(self):
        assert lines_for({"a": {"x": 1}, "b": [1]}) == [
            "{",
            '  "a": {',
            '    "x": 1',
            "  },",
            '  "b": [',
            "    1",
            "  ]",
            "}",
        ]

    def test_collapsed_child_keeps_comma(self):
        state = initialize_state({"a": {"x": 1}, "b": [1]})
        state = state.with_expanded(state.expanded - {"root.a", "root.b"})
        assert format_lines(state) == [
            "{",
            '  "a": {...},',
            '  "b": [...]',
            "}",
        ]

    def test_empty_containers(self):
        assert lines_for({"e": {}, "l": []}) == ["{", '  "e": {},', '  "l": []', "}"]

    def test_primitives(self):
        assert lines_for([True, None, "s", 1.5, False]) == [
            "[",
            "  true,",
            "  null,",
            '  "s",',
            "  1.5,",
            "  false",
            "]",
        ]

    def test_primitive_document(self):
        assert lines_for("hi") == ['"hi"']
        assert lines_for(None) == ["null"]

    def test_comma_on_all_but_last_child(self):
        data = {"k": [1, {"a": 2}, [3], "s"], "z": None}
        state = initialize_state(data)
        lines = format_lines(state)
        for node, line in zip(state.flattened, lines):
            opens = not node.is_closing and state.is_expanded(node.id)
            at_root = node.id == "root" or node.id == "root.]"
            expected = not (opens or at_root or node.is_last)
            assert line.endswith(",") == expected, line

    def test_tabs(self):
        lines = lines_for({"a": {"b": 1}}, indent=IndentConfig(use_tabs=True))
        assert lines[1] == '\t"a": {'
        assert lines[2] == '\t\t"b": 1'

    def test_indent_width(self):
        assert lines_for({"a": 1}, indent=IndentConfig(width=4))[1] == '    "a": 1'

    def test_zero_indent(self):
        assert lines_for({"a": 1}, indent=IndentConfig(width=0))[1] == '"a": 1'

    def test_key_is_json_escaped(self):
        assert lines_for({'say "hi"': 1})[1] == '  "say \\"hi\\"": 1'

    def test_unicode_kept(self):
        assert lines_for({"ключ": "värde"})[1] == '  "ключ": "värde"'

    def test_array_indices(self):
        lines = lines_for(["x", "y"], options=FormatOptions(show_array_indices=True))
        assert lines[1:3] == ['  [0] "x",', '  [1] "y"']

    def test_lines_cached_per_state(self):
        state = initialize_state({"a": 1})
        assert format_lines(state) is format_lines(state)


class TestFormatPrimitive:
    """Primitive literals."""

    def test_literals(self):
        assert format_primitive("a") == '"a"'
        assert format_primitive(3) == "3"
        assert format_primitive(True) == "true"
        assert format_primitive(None) == "null"

    def test_truncation(self):
        assert format_primitive("abcdefghijkl", 8) == '"abcd...'

    def test_no_truncation_when_short(self):
        assert format_primitive("ab", 8) == '"ab"'

    def test_format_line_truncates_values(self):
        root = build_tree({"k": "abcdefghijkl"})
        line = format_line(root.children[0], False, options=FormatOptions(max_value_length=8))
        assert line == '  "k": "abcd...'


class TestTreeStyle:
    """``tree``-command rendering."""

    def test_unicode_glyphs(self):
        assert lines_for({"a": 1, "b": [1, 2]}, style="tree") == [
            ".",
            "├─ a: 1",
            "└─ b",
            "   ├─ 1",
            "   └─ 2",
            "",
            "",
        ]

    def test_vertical_guides(self):
        lines = lines_for({"a": {"x": 1}, "b": 2}, style="tree")
        assert lines[:4] == [".", "├─ a", "│  └─ x: 1", "│"]

    def test_ascii_glyphs(self):
        lines = lines_for(
            {"a": 1, "b": 2}, style="tree", options=FormatOptions(use_unicode_tree=False)
        )
        assert lines[1:3] == ["|-- a: 1", "`-- b: 2"]

    def test_collapsed_and_empty_markers(self):
        state = initialize_state({"a": [1], "e": {}})
        state = state.with_expanded(state.expanded - {"root.a"})
        assert format_lines(state, style="tree") == [".", "├─ a [...]", "└─ e {}", ""]

    def test_array_root(self):
        assert lines_for([1, 2], style="tree")[0] == "."

    def test_collapsed_root(self):
        state = initialize_state({"a": 1})
        collapsed = state.with_expanded(frozenset())
        assert format_lines(collapsed, style="tree") == [". {...}"]
        state = initialize_state([1, 2])
        collapsed = state.with_expanded(frozenset())
        assert format_lines(collapsed, style="tree") == [". [...]"]

    def test_empty_root(self):
        assert lines_for([], style="tree") == [". []"]
        assert lines_for({}, style="tree") == [". {}"]

    def test_hide_values(self):
        lines = lines_for(
            {"a": 1}, style="tree", options=FormatOptions(show_primitive_values=False)
        )
        assert lines[1] == "└─ a"

    def test_aligned_with_flattened(self):
        state = initialize_state({"a": {"b": [1, {"c": 2}]}, "d": 3})
        assert len(format_lines(state, style="tree")) == len(state.flattened)
