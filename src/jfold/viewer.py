"""Collapsible JSON viewer widget."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto

from rich.text import Text
from textual import events, log
from textual.message import Message
from textual.widget import Widget

from jfold._format import format_lines
from jfold._highlight import (
    DEFAULT_SCHEME,
    ColorScheme,
    SearchState,
    Token,
    apply_match_spans,
    tokenize_line,
)
from jfold._navigation import (
    ActionKind,
    NavigationAction,
    NavigationResult,
    handle_navigation,
)
from jfold._search import SearchMixin
from jfold._state import CollapsibleState, CursorPosition, initialize_state
from jfold._tree import format_path, value_type
from jfold._viewport import center_on_line, recenter_for_cursor, visible_slice
from jfold.config import DisplayConfig, ViewerConfig

NO_DATA = "No data"


class ViewerMode(Enum):
    NORMAL = auto()
    SEARCH = auto()


@dataclass(frozen=True)
class StyledLine:
    """One rendered line handed to the painter."""

    index: int
    text: str
    tokens: list[Token]
    label: str
    is_cursor: bool


def build_styled_lines(
    state: CollapsibleState,
    lines: list[str],
    scroll_offset: int,
    height: int,
    search: SearchState | None = None,
    show_line_numbers: bool = False,
    scheme: ColorScheme = DEFAULT_SCHEME,
) -> list[StyledLine]:
    """Tokenise and highlight the lines inside the scroll window.

    Indices come from ``state.flattened``; an index with no formatted line
    (the two lists disagree) is skipped. Highlighting follows the match
    columns held by *search*, so scope limits and matches spanning several
    tokens are painted exactly as found.
    """
    total = len(state.flattened)
    view = visible_slice(range(total), scroll_offset, height)
    width = len(str(total))
    current = search.current_match if search else None
    result: list[StyledLine] = []
    for idx in view.lines:
        if idx >= len(lines):
            continue
        text = lines[idx]
        tokens = tokenize_line(text, scheme)
        matches = search.matches_on(idx) if search else []
        if matches:
            span = None
            if current is not None and current.line_index == idx:
                span = (current.column_start, current.column_end)
            spans = [(m.column_start, m.column_end) for m in matches]
            tokens = apply_match_spans(tokens, spans, span, scheme)
        label = f"{idx + 1:>{width}}" if show_line_numbers else ""
        result.append(
            StyledLine(idx, text, tokens, label, idx == state.cursor.line_index)
        )
    return result


class CollapsibleJsonViewer(SearchMixin, Widget, can_focus=True):
    """A read-only, collapsible JSON viewer Textual widget.

    Supported keys:
      j k  up down     move              enter space za  toggle
      l h  right left  expand/collapse   zR zM           expand/collapse all
      gg G home end    top/bottom        PgUp PgDn ^f ^b ^u ^d  page
      / ?  n N         search            L  line numbers   T  json/tree
      q                quit
    """

    DEFAULT_CSS = """
    CollapsibleJsonViewer {
        height: 1fr;
        background: $surface;
        padding: 0 1;
    }
    """

    _MODE_STYLE = {
        ViewerMode.NORMAL: "bold white on dark_green",
        ViewerMode.SEARCH: "bold white on dark_magenta",
    }
    _CURSOR_BG = "on grey23"

    # -- Messages ----------------------------------------------------------

    @dataclass
    class Quit(Message):
        pass

    # -- Init --------------------------------------------------------------

    def __init__(
        self,
        data: object = None,
        *,
        config: ViewerConfig | None = None,
        visible_lines: int | None = None,
        scheme: ColorScheme = DEFAULT_SCHEME,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self.config: ViewerConfig = config or ViewerConfig()
        self.scheme = scheme
        self._visible_lines = visible_lines
        self._state: CollapsibleState | None = None
        self._scroll_top: int = 0
        self._mode: ViewerMode = ViewerMode.NORMAL
        self.pending: str = ""
        self.status_msg: str = ""
        # Search state
        self._search = SearchState(scope=self.config.behavior.scope)
        self._search_buffer: str = ""
        self._search_forward: bool = True  # True for /, False for ?
        self._search_history: list[str] = []
        self._search_history_idx: int = -1
        self._search_history_max: int = 50
        self.set_data(data, refresh=False)

    # -- Public API --------------------------------------------------------

    @property
    def state(self) -> CollapsibleState | None:
        """Current state snapshot; ``None`` while there is no data."""
        return self._state

    @property
    def has_data(self) -> bool:
        return self._state is not None

    @property
    def lines(self) -> list[str]:
        if self._state is None:
            return []
        display = self.config.display
        return format_lines(
            self._state, display.indent_config, display.format_options, display.style
        )

    @property
    def cursor_line(self) -> int:
        return self._state.cursor.line_index if self._state else 0

    @property
    def scroll_top(self) -> int:
        return self._scroll_top

    def cursor_details(self) -> str:
        """Path and type of the node under the cursor, e.g. ``.users[0]  object (3)``.

        A closing marker reports the container it closes.
        """
        state = self._state
        if state is None:
            return ""
        node = state.cursor_node()
        if node is None:
            return ""
        if node.is_closing:
            node = state.nodes[node.parent_id]
        kind = value_type(node)
        if node.is_container:
            kind = f"{kind} ({len(node.children)})"
        return f"{format_path(node.path.segments)}  {kind}"

    def set_data(self, data: object, *, refresh: bool = True) -> None:
        """Replace the document; cursor, scroll and search are reset."""
        if data is None:
            self._state = None
        else:
            self._state = initialize_state(data, self.config.behavior.expand_depth)
        self._scroll_top = 0
        self._search.clear()
        self.status_msg = ""
        if refresh:
            self.refresh()

    def set_display(self, display: DisplayConfig) -> None:
        self.config = ViewerConfig(display, self.config.behavior)
        self._refresh_search()
        self._ensure_cursor_visible()
        self.refresh()

    def navigate(self, action: NavigationAction | None) -> NavigationResult | None:
        """Apply a navigation action and keep the viewport on the cursor."""
        if self._state is None or action is None:
            return None
        before = self._state
        result = handle_navigation(before, action)
        self._state = result.state
        if result.state.version != before.version:
            self._refresh_search()
        if result.scroll_to_line is not None:
            self._ensure_cursor_visible()
        self.refresh()
        return result

    def styled_lines(self) -> list[StyledLine]:
        if self._state is None:
            return []
        return build_styled_lines(
            self._state,
            self.lines,
            self._scroll_top,
            self._visible_height(),
            self._search,
            self.config.display.show_line_numbers,
            self.scheme,
        )

    # -- Viewport ----------------------------------------------------------

    def _visible_height(self) -> int:
        if self._visible_lines:
            return self._visible_lines
        return max(1, self.content_region.height - 2)

    def _page_size(self, half: bool = False) -> int:
        size = self.config.behavior.page_size or self._visible_height()
        if half:
            size = size // 2 if self.config.behavior.half_page_scroll else size
        return max(1, size)

    def _ensure_cursor_visible(self) -> None:
        if self._state is None:
            return
        self._scroll_top = recenter_for_cursor(
            self.cursor_line,
            self._scroll_top,
            self._visible_height(),
            len(self._state.flattened),
            self.config.behavior.scroll_margin,
        )

    def _goto_line(self, line_index: int, center: bool = False) -> None:
        state = self._state
        if state is None:
            return
        flat = state.flattened
        line_index = max(0, min(line_index, len(flat) - 1))
        self._state = state.with_cursor(CursorPosition(flat[line_index].id, line_index))
        if center:
            self._scroll_top = center_on_line(
                line_index, self._visible_height(), len(flat), ratio=0.33
            )
        self._ensure_cursor_visible()

    # =====================================================================
    # Rendering
    # =====================================================================

    def render(self) -> Text:
        result = Text()
        result_append = Text.append
        height = self._visible_height()
        rows_used = 0

        if self._state is None:
            result_append(result, NO_DATA, style="dim italic")
            result_append(result, "\n")
            rows_used = 1
        else:
            self._ensure_cursor_visible()
            for line in self.styled_lines():
                if line.label:
                    result_append(result, f"{line.label} ", style="dim cyan")
                for token in line.tokens:
                    style = token.color
                    if line.is_cursor and not token.is_match:
                        style = f"bold {style} {self._CURSOR_BG}"
                    result_append(result, token.text, style=style)
                result_append(result, "\n")
                rows_used += 1

        while rows_used < height:
            result_append(result, "~\n", style="dim blue")
            rows_used += 1

        # status bar
        mode = self._mode
        mode_label = f" {mode.name} "
        result_append(result, mode_label, style=self._MODE_STYLE[mode])
        if self.pending:
            result_append(result, f"  {self.pending}", style="bold yellow")
        result_append(result, f"  {self.status_msg}")
        if self._state is not None:
            total = len(self._state.flattened)
            result_append(result, f"  {self.cursor_details()}", style="cyan")
            result_append(result, f"  Ln {self.cursor_line + 1}/{total} ", style="bold")

        if mode == ViewerMode.SEARCH:
            prefix = "/" if self._search_forward else "?"
            result_append(result, f"\n{prefix}{self._search_buffer}", style="bold magenta")
            result_append(result, " ", style="reverse")
        return result

    # =====================================================================
    # Key handling
    # =====================================================================

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()

        if self._mode == ViewerMode.NORMAL:
            self._handle_normal(event)
        elif self._mode == ViewerMode.SEARCH:
            self._handle_search(event)

        self.refresh()

    def _action(self, kind: ActionKind, count: int = 0) -> None:
        self.navigate(NavigationAction(kind, count))

    def _handle_normal(self, event) -> None:
        key = event.key
        char = event.character or ""

        if self.pending:
            self._handle_pending(char, key)
            return

        if char == "q":
            self.post_message(self.Quit())
            return
        if char == "/" or char == "?":
            self._mode = ViewerMode.SEARCH
            self._search_forward = char == "/"
            self._search_buffer = ""
            return
        if key == "escape":
            self._clear_search()
            return
        if char in ("g", "z"):
            self.pending = char
            return
        if char == "L":
            display = self.config.display
            self.set_display(
                replace(display, show_line_numbers=not display.show_line_numbers)
            )
            return
        if char == "T":
            display = self.config.display
            style = "tree" if display.style == "json" else "json"
            self.set_display(replace(display, style=style))
            self.status_msg = f"{style} view"
            return

        if self._state is None:
            return

        if char == "j" or key == "down":
            self._action(ActionKind.MOVE_DOWN)
        elif char == "k" or key == "up":
            self._action(ActionKind.MOVE_UP)
        elif key in ("enter", "space"):
            self._action(ActionKind.TOGGLE_NODE)
        elif char == "l" or key == "right":
            self._action(ActionKind.EXPAND_NODE)
        elif char == "h" or key == "left":
            self._action(ActionKind.COLLAPSE_NODE)
        elif char == "G" or key == "end":
            self._action(ActionKind.GOTO_BOTTOM)
        elif key == "home":
            self._action(ActionKind.GOTO_TOP)
        elif key in ("pagedown", "ctrl+f"):
            self._action(ActionKind.PAGE_DOWN, self._page_size())
        elif key in ("pageup", "ctrl+b"):
            self._action(ActionKind.PAGE_UP, self._page_size())
        elif key == "ctrl+d":
            self._action(ActionKind.PAGE_DOWN, self._page_size(half=True))
        elif key == "ctrl+u":
            self._action(ActionKind.PAGE_UP, self._page_size(half=True))
        elif char == "n":
            self._goto_next_match()
        elif char == "N":
            self._goto_prev_match()

    def _handle_pending(self, char: str, key: str) -> None:
        if key == "escape" or not char:
            self.pending = ""
            self.status_msg = ""
            return

        combo = self.pending + char
        self.pending = ""

        if combo == "gg":
            self._action(ActionKind.GOTO_TOP)
        elif combo == "za":
            self._action(ActionKind.TOGGLE_NODE)
        elif combo == "zo":
            self._action(ActionKind.EXPAND_NODE)
        elif combo == "zc":
            self._action(ActionKind.COLLAPSE_NODE)
        elif combo == "zR":
            self._action(ActionKind.EXPAND_ALL)
        elif combo == "zM":
            self._action(ActionKind.COLLAPSE_ALL)
        else:
            log.debug(f"unknown key sequence {combo!r}")
            self.status_msg = f"unknown: {combo}"
