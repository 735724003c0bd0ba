"""Navigation: (state, action) -> new state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from textual import log

from jfold._state import CollapsibleState, CursorPosition

DEFAULT_PAGE_SIZE = 10


class ActionKind(Enum):
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    TOGGLE_NODE = "toggle_node"
    EXPAND_NODE = "expand_node"
    COLLAPSE_NODE = "collapse_node"
    EXPAND_ALL = "expand_all"
    COLLAPSE_ALL = "collapse_all"
    GOTO_TOP = "goto_top"
    GOTO_BOTTOM = "goto_bottom"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"


@dataclass(frozen=True)
class NavigationAction:
    kind: ActionKind
    count: int = 0  # page_up / page_down only

    @classmethod
    def parse(cls, name: str, count: int = 0) -> NavigationAction | None:
        """Build an action from its snake_case name; ``None`` if unknown."""
        try:
            return cls(ActionKind(name), count)
        except ValueError:
            return None


@dataclass(frozen=True)
class NavigationResult:
    state: CollapsibleState
    scroll_to_line: int | None = None


def _move_to(state: CollapsibleState, index: int) -> NavigationResult:
    flat = state.flattened
    if not flat:
        return NavigationResult(state)
    index = max(0, min(index, len(flat) - 1))
    if index == state.cursor.line_index and flat[index].id == state.cursor.node_id:
        return NavigationResult(state)
    new_state = state.with_cursor(CursorPosition(flat[index].id, index))
    return NavigationResult(new_state, index)


def _with_expanded(state: CollapsibleState, expanded: frozenset[str]) -> NavigationResult:
    if expanded == state.expanded:
        return NavigationResult(state)
    before = len(state.flattened)
    new_state = state.with_expanded(expanded)
    scroll = None
    if len(new_state.flattened) != before or (
        new_state.cursor.line_index != state.cursor.line_index
    ):
        scroll = new_state.cursor.line_index
    return NavigationResult(new_state, scroll)


def _page(action: NavigationAction) -> int:
    return action.count if action.count > 0 else DEFAULT_PAGE_SIZE


def handle_navigation(
    state: CollapsibleState, action: NavigationAction | None
) -> NavigationResult:
    """Apply *action* to *state*.

    Pure and total: unknown or no-op actions return the same state object
    with no scroll hint. ``scroll_to_line`` is the cursor's new line when the
    cursor moved or the number of visible lines changed.
    """
    if action is None or not state.flattened:
        return NavigationResult(state)

    kind = action.kind
    # re-sync line_index with the node id before relative moves
    current = state.line_index_of(state.cursor.node_id)
    if current < 0:
        current = 0

    if kind is ActionKind.MOVE_UP:
        return _move_to(state, current - 1)
    if kind is ActionKind.MOVE_DOWN:
        return _move_to(state, current + 1)
    if kind is ActionKind.PAGE_UP:
        return _move_to(state, current - _page(action))
    if kind is ActionKind.PAGE_DOWN:
        return _move_to(state, current + _page(action))
    if kind is ActionKind.GOTO_TOP:
        return _move_to(state, 0)
    if kind is ActionKind.GOTO_BOTTOM:
        return _move_to(state, len(state.flattened) - 1)

    if kind is ActionKind.EXPAND_ALL:
        return _with_expanded(state, state.collapsible_ids())
    if kind is ActionKind.COLLAPSE_ALL:
        return _with_expanded(state, frozenset())

    node = state.cursor_node()
    if node is None or not node.is_collapsible:
        return NavigationResult(state)
    is_open = node.id in state.expanded
    if kind is ActionKind.TOGGLE_NODE:
        expanded = state.expanded - {node.id} if is_open else state.expanded | {node.id}
    elif kind is ActionKind.EXPAND_NODE:
        expanded = state.expanded | {node.id}
    elif kind is ActionKind.COLLAPSE_NODE:
        expanded = state.expanded - {node.id}
    else:
        log.warning(f"unhandled navigation action {kind!r}")
        return NavigationResult(state)
    return _with_expanded(state, expanded)
