"""Tests for node ids and tree building."""

from jfold._tree import (
    NodeType,
    PathKind,
    build_tree,
    closing_id,
    count_nodes,
    format_path,
    generate_node_id,
    iter_nodes,
    value_type,
)


class TestGenerateNodeId:
    """Node id generation from paths."""

    def test_root(self):
        assert generate_node_id([]) == "root"

    def test_keys_and_indices(self):
        assert generate_node_id(["a"]) == "root.a"
        assert generate_node_id(["a", 0, "b"]) == "root.a.[0].b"

    def test_dotted_key_differs_from_nested_path(self):
        assert generate_node_id(["a.b"]) != generate_node_id(["a", "b"])

    def test_numeric_key_differs_from_index(self):
        assert generate_node_id(["0"]) != generate_node_id([0])

    def test_key_named_root(self):
        assert generate_node_id(["root"]) != generate_node_id([])

    def test_bracket_key_differs_from_index(self):
        assert generate_node_id(["[0]"]) != generate_node_id([0])

    def test_injective_over_tricky_paths(self):
        paths = [
            [],
            ["root"],
            ["a"],
            ["a", "b"],
            ["a.b"],
            ["a\\", "b"],
            ["a\\.b"],
            ["a\\.", "b"],
            [0],
            ["0"],
            ["[0]"],
            [0, 0],
            ["0.0"],
            ["]"],
            [""],
            ["", ""],
            ["."],
        ]
        ids = [generate_node_id(p) for p in paths]
        assert len(set(ids)) == len(paths)

    def test_closing_id_never_matches_a_key(self):
        assert closing_id("root") != generate_node_id(["]"])
        assert closing_id("root.a") != generate_node_id(["a", "]"])


class TestBuildTree:
    """JSON value -> TreeNode."""

    def test_object(self):
        root = build_tree({"a": 1, "b": [1, 2], "c": {}})
        assert root.id == "root"
        assert root.type is NodeType.OBJECT
        assert root.is_collapsible
        assert root.level == 0
        assert root.path.kind is PathKind.ROOT
        assert [c.path.key for c in root.children] == ["a", "b", "c"]

    def test_children_paths_and_parents(self):
        root = build_tree({"a": 1, "b": [1, 2]})
        b = root.children[1]
        assert b.type is NodeType.ARRAY
        assert b.parent_id == "root"
        assert b.path.kind is PathKind.OBJECT
        first = b.children[0]
        assert first.path.kind is PathKind.ARRAY
        assert first.path.key == 0
        assert first.path.segments == ("b", 0)
        assert first.id == "root.b.[0]"
        assert first.parent_id == b.id
        assert first.level == 2
        assert first.value == 1

    def test_empty_containers_not_collapsible(self):
        root = build_tree({"o": {}, "l": []})
        o, l = root.children
        assert o.type is NodeType.OBJECT and not o.is_collapsible
        assert l.type is NodeType.ARRAY and not l.is_collapsible
        assert o.children == [] and l.children == []

    def test_primitive_root(self):
        root = build_tree(5)
        assert root.type is NodeType.PRIMITIVE
        assert root.value == 5
        assert not root.is_collapsible

    def test_null_root(self):
        root = build_tree(None)
        assert root.type is NodeType.PRIMITIVE
        assert root.value is None

    def test_containers_have_no_value(self):
        root = build_tree({"a": [1]})
        assert root.value is None
        assert root.children[0].value is None

    def test_sibling_positions(self):
        root = build_tree(["x", "y", "z"])
        assert [c.index for c in root.children] == [0, 1, 2]
        assert [c.is_last for c in root.children] == [False, False, True]
        assert root.is_last

    def test_key_order_is_insertion_order(self):
        root = build_tree({"z": 1, "a": 2, "m": 3})
        assert [c.path.key for c in root.children] == ["z", "a", "m"]


class TestTreeWalk:
    """Pre-order iteration and counting."""

    def test_iter_nodes_pre_order(self):
        root = build_tree({"a": {"b": 1}, "c": 2})
        assert [n.id for n in iter_nodes(root)] == [
            "root",
            "root.a",
            "root.a.b",
            "root.c",
        ]

    def test_count_nodes(self):
        root = build_tree({"a": {"b": 1}, "c": [1, 2], "d": []})
        assert count_nodes(root) == (4, 3)


class TestNodeDetails:
    """Readable paths and JSON type names."""

    def test_format_path(self):
        assert format_path(()) == "."
        assert format_path(("users", 0, "name")) == ".users[0].name"
        assert format_path((0, "a")) == ".[0].a"

    def test_format_path_quotes_odd_keys(self):
        assert format_path(("a b",)) == '.["a b"]'
        assert format_path(("x", "1st")) == '.x["1st"]'

    def test_value_type(self):
        root = build_tree({"o": {}, "l": [], "s": "", "n": 1.5, "b": False, "z": None})
        assert [value_type(c) for c in root.children] == [
            "object",
            "array",
            "string",
            "number",
            "boolean",
            "null",
        ]
