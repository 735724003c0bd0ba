"""Node -> text line rendering (JSON style and tree style)."""

from __future__ import annotations

import json
from dataclasses import dataclass

from jfold._state import CollapsibleState
from jfold._tree import NodeType, PathKind, TreeNode


@dataclass(frozen=True)
class IndentConfig:
    width: int = 2
    use_tabs: bool = False

    def unit(self) -> str:
        return "\t" if self.use_tabs else " " * max(0, self.width)


@dataclass(frozen=True)
class FormatOptions:
    """Optional display toggles.

    ``max_value_length`` of 0 disables truncation.
    """

    show_array_indices: bool = False
    show_primitive_values: bool = True
    max_value_length: int = 0
    use_unicode_tree: bool = True


DEFAULT_INDENT = IndentConfig()
DEFAULT_OPTIONS = FormatOptions()

_OPEN = {NodeType.OBJECT: "{", NodeType.ARRAY: "["}
_COLLAPSED = {NodeType.OBJECT: "{...}", NodeType.ARRAY: "[...]"}
_EMPTY = {NodeType.OBJECT: "{}", NodeType.ARRAY: "[]"}

TREE_GLYPHS = {
    True: {"branch": "├─ ", "last": "└─ ", "vertical": "│  ", "space": "   "},
    False: {"branch": "|-- ", "last": "`-- ", "vertical": "|   ", "space": "    "},
}


def format_primitive(value: object, max_length: int = 0) -> str:
    """JSON literal for a primitive, optionally truncated with ``...``."""
    try:
        text = json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        text = json.dumps(str(value), ensure_ascii=False)
    if max_length > 3 and len(text) > max_length:
        text = text[: max_length - 3] + "..."
    return text


def _key_prefix(node: TreeNode, options: FormatOptions) -> str:
    if node.path.kind is PathKind.OBJECT:
        return json.dumps(str(node.path.key), ensure_ascii=False) + ": "
    if node.path.kind is PathKind.ARRAY and options.show_array_indices:
        return f"[{node.path.key}] "
    return ""


def format_line(
    node: TreeNode,
    is_expanded: bool,
    indent: IndentConfig = DEFAULT_INDENT,
    options: FormatOptions = DEFAULT_OPTIONS,
) -> str:
    """Render one flattened node as a JSON-like text line.

    Closing markers sit at their owner's indentation and take the owner's
    comma; every other node gets a comma unless it is the last child of its
    parent.
    """
    pad = indent.unit() * node.level
    comma = "," if node.path.kind is not PathKind.ROOT and not node.is_last else ""

    if node.type is NodeType.CLOSING:
        return f"{pad}{node.value}{comma}"

    prefix = _key_prefix(node, options)
    if node.type is NodeType.PRIMITIVE:
        body = format_primitive(node.value, options.max_value_length)
    elif not node.is_collapsible:
        body = _EMPTY[node.type]
    elif is_expanded:
        # comma moves to the closing marker
        return f"{pad}{prefix}{_OPEN[node.type]}"
    else:
        body = _COLLAPSED[node.type]
    return f"{pad}{prefix}{body}{comma}"


# -- Tree style --------------------------------------------------------------


def _guides(state: CollapsibleState, node: TreeNode, glyphs: dict[str, str]) -> str:
    """Guide columns drawn in front of *node*'s children."""
    parts: list[str] = []
    current = node
    while current.parent_id is not None:
        parts.append(glyphs["space"] if current.is_last else glyphs["vertical"])
        current = state.nodes[current.parent_id]
    return "".join(reversed(parts))


def format_tree_line(
    state: CollapsibleState,
    node: TreeNode,
    options: FormatOptions = DEFAULT_OPTIONS,
) -> str:
    """Render one node like the ``tree`` command: ``├─ key: value``.

    A closing marker keeps its line (so indices match ``state.flattened``)
    and shows only the guide columns of its owner.
    """
    glyphs = TREE_GLYPHS[options.use_unicode_tree]
    if node.type is NodeType.CLOSING:
        owner = state.nodes[node.parent_id]
        return _guides(state, owner, glyphs).rstrip()

    if node.path.kind is PathKind.ROOT:
        if node.type is NodeType.PRIMITIVE:
            return format_primitive(node.value, options.max_value_length)
        # containers at the root read like any other container: ". {...}"
        prefix, label = "", "."
    else:
        parent = state.nodes[node.parent_id]
        prefix = _guides(state, parent, glyphs)
        prefix += glyphs["last"] if node.is_last else glyphs["branch"]
        if node.path.kind is PathKind.ARRAY and not options.show_array_indices:
            label = ""
        else:
            label = str(node.path.key)

    if node.type is NodeType.PRIMITIVE:
        if not options.show_primitive_values:
            return f"{prefix}{label}"
        value = format_primitive(node.value, options.max_value_length)
        return f"{prefix}{label}: {value}" if label else f"{prefix}{value}"

    if not node.is_collapsible:
        marker = _EMPTY[node.type]
    elif not state.is_expanded(node.id):
        marker = _COLLAPSED[node.type]
    else:
        marker = ""
    if label and marker:
        return f"{prefix}{label} {marker}"
    return f"{prefix}{label or marker or _OPEN[node.type]}"


def format_lines(
    state: CollapsibleState,
    indent: IndentConfig = DEFAULT_INDENT,
    options: FormatOptions = DEFAULT_OPTIONS,
    style: str = "json",
) -> list[str]:
    """Format every flattened node, index-aligned with ``state.flattened``.

    The result is cached on the state, so repeated renders of the same
    version (cursor moves, scrolling) do not re-format.
    """
    key = (style, indent, options)
    cache = state._line_cache
    cached = cache.get(key)
    if cached is not None:
        return cached
    if style == "tree":
        lines = [format_tree_line(state, n, options) for n in state.flattened]
    else:
        expanded = state.expanded
        lines = [
            format_line(n, n.id in expanded, indent, options) for n in state.flattened
        ]
    cache.clear()
    cache[key] = lines
    return lines
