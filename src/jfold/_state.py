"""Collapsible state: tree arena, expand set, cursor and the flattened view."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from textual import log

from jfold._tree import (
    CLOSING_SEGMENT,
    TreeNode,
    build_tree,
    iter_nodes,
    make_closing,
)


@dataclass(frozen=True)
class CursorPosition:
    node_id: str
    line_index: int = 0


def flatten(root: TreeNode, expanded: Iterable[str] | frozenset[str]) -> list[TreeNode]:
    """Pre-order list of visible nodes, closing markers included.

    A collapsible node contributes its children and its closing marker only
    while its id is in *expanded*.
    """
    if not isinstance(expanded, (set, frozenset)):
        expanded = frozenset(expanded)
    result: list[TreeNode] = []
    append = result.append
    # (node, closing) pairs; closing entries are emitted after the subtree
    stack: list[tuple[TreeNode, bool]] = [(root, False)]
    while stack:
        node, is_close = stack.pop()
        if is_close:
            append(make_closing(node))
            continue
        append(node)
        if node.is_collapsible and node.id in expanded:
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.children))
    return result


class CollapsibleState:
    """Tree + expand set + cursor.

    Instances are treated as values: transitions return a new state through
    :meth:`with_expanded` / :meth:`with_cursor`. The flattened list is built
    lazily and cached per ``version``, which increments whenever the expand
    set changes; states that differ only by cursor share the cache.
    """

    def __init__(
        self,
        root: TreeNode,
        nodes: dict[str, TreeNode],
        expanded: Iterable[str],
        cursor: CursorPosition | None = None,
        version: int = 0,
    ) -> None:
        self.root = root
        self.nodes = nodes
        self.expanded: frozenset[str] = frozenset(expanded)
        self.cursor = cursor or CursorPosition(root.id, 0)
        self.version = version
        # Render caches
        self._flat: list[TreeNode] | None = None
        self._flat_index: dict[str, int] | None = None
        self._line_cache: dict[tuple, list[str]] = {}

    # -- Derived views -----------------------------------------------------

    @property
    def flattened(self) -> list[TreeNode]:
        if self._flat is None:
            self._flat = flatten(self.root, self.expanded)
            self._flat_index = None
        return self._flat

    def _index(self) -> dict[str, int]:
        if self._flat_index is None:
            self._flat_index = {n.id: i for i, n in enumerate(self.flattened)}
        return self._flat_index

    def __len__(self) -> int:
        return len(self.flattened)

    def line_index_of(self, node_id: str) -> int:
        """Line of *node_id* in the flattened list, ``-1`` if not visible."""
        return self._index().get(node_id, -1)

    def is_visible(self, node_id: str) -> bool:
        return node_id in self._index()

    def is_expanded(self, node_id: str) -> bool:
        return node_id in self.expanded

    def lookup(self, node_id: str) -> TreeNode | None:
        """Resolve an id to a node, closing markers included."""
        node = self.nodes.get(node_id)
        if node is not None:
            return node
        suffix = "." + CLOSING_SEGMENT
        if node_id.endswith(suffix):
            owner = self.nodes.get(node_id[: -len(suffix)])
            if owner is not None and owner.is_collapsible:
                return make_closing(owner)
        return None

    def cursor_node(self) -> TreeNode | None:
        flat = self.flattened
        idx = self.cursor.line_index
        if 0 <= idx < len(flat) and flat[idx].id == self.cursor.node_id:
            return flat[idx]
        return self.lookup(self.cursor.node_id)

    def collapsible_ids(self) -> frozenset[str]:
        return frozenset(n.id for n in self.nodes.values() if n.is_collapsible)

    # -- Transitions -------------------------------------------------------

    def with_expanded(self, expanded: Iterable[str]) -> CollapsibleState:
        """New state with a different expand set; the cursor is re-validated."""
        state = CollapsibleState(
            self.root, self.nodes, expanded, self.cursor, self.version + 1
        )
        return state.with_cursor(state.cursor)

    def with_cursor(self, cursor: CursorPosition) -> CollapsibleState:
        """New state with *cursor* snapped onto a visible node."""
        state = CollapsibleState(
            self.root, self.nodes, self.expanded, cursor, self.version
        )
        state._flat = self.flattened
        state._flat_index = self._index()
        state._line_cache = self._line_cache
        state.cursor = state._validated_cursor(cursor)
        return state

    def _validated_cursor(self, cursor: CursorPosition) -> CursorPosition:
        flat = self.flattened
        if not flat:
            return CursorPosition(self.root.id, 0)
        idx = self.line_index_of(cursor.node_id)
        if idx >= 0:
            return CursorPosition(cursor.node_id, idx)
        target = nearest_visible_ancestor(self, cursor.node_id)
        log.debug(f"cursor {cursor.node_id!r} hidden, moved to {target!r}")
        return CursorPosition(target, max(0, self.line_index_of(target)))

    def __repr__(self) -> str:
        return (
            f"CollapsibleState(v{self.version}, {len(self.nodes)} nodes, "
            f"{len(self.expanded)} expanded, cursor={self.cursor})"
        )


def nearest_visible_ancestor(state: CollapsibleState, node_id: str) -> str:
    """Closest node at or above *node_id* that is currently visible."""
    node = state.lookup(node_id)
    while node is not None:
        if state.is_visible(node.id):
            return node.id
        node = state.nodes.get(node.parent_id) if node.parent_id else None
    return state.root.id


def _initial_expanded(root: TreeNode, expand_depth: int | None) -> set[str]:
    expanded: set[str] = set()
    for node in iter_nodes(root):
        if not node.is_collapsible:
            continue
        if expand_depth is None or node.level < expand_depth:
            expanded.add(node.id)
    if root.is_collapsible:
        expanded.add(root.id)
    return expanded


def initialize_state(value: object, expand_depth: int | None = None) -> CollapsibleState:
    """Build a fresh state for *value*.

    *expand_depth* ``None`` expands every collapsible node; ``n`` expands
    nodes with ``level < n``. The root is always expanded so the document is
    visible, and the cursor starts on line 0.
    """
    root = build_tree(value)
    nodes = {node.id: node for node in iter_nodes(root)}
    expanded = _initial_expanded(root, expand_depth)
    log.debug(f"state built: {len(nodes)} nodes, {len(expanded)} expanded")
    return CollapsibleState(root, nodes, expanded, CursorPosition(root.id, 0))
