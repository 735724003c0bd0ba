"""Search mixin for CollapsibleJsonViewer."""

from __future__ import annotations

from textual import log

from jfold._highlight import SearchScope

_SCOPE_SUFFIXES = {
    "\\k": SearchScope.KEYS,
    "\\v": SearchScope.VALUES,
    "\\a": SearchScope.ALL,
}


class SearchMixin:
    """Search-related methods for CollapsibleJsonViewer."""

    def _handle_search(self, event) -> None:
        key = event.key
        char = event.character

        if key == "escape":
            self._search_buffer = ""
            self.status_msg = ""
            self._leave_search()
            return
        if key == "enter":
            if self._search_buffer:
                self._add_to_search_history(self._search_buffer)
                self._execute_search()
            self._leave_search()
            return
        if key in ("up", "down"):
            self._recall_history(1 if key == "up" else -1)
            return

        if key == "backspace":
            if not self._search_buffer:
                self._leave_search()
                return
            self._search_buffer = self._search_buffer[:-1]
        elif char and char.isprintable():
            self._search_buffer += char
        else:
            return
        # editing the buffer detaches it from history
        self._search_history_idx = -1

    def _leave_search(self) -> None:
        from jfold.viewer import ViewerMode

        self._mode = ViewerMode.NORMAL
        self._search_history_idx = -1

    def _add_to_search_history(self, pattern: str) -> None:
        """Put *pattern* at the front of the history, most recent first."""
        history = [p for p in self._search_history if p != pattern]
        history.insert(0, pattern)
        self._search_history = history[: self._search_history_max]

    def _recall_history(self, step: int) -> None:
        """Move through history: ``1`` goes older, ``-1`` newer.

        Stepping newer than the most recent entry empties the buffer.
        """
        idx = self._search_history_idx + step
        if idx < -1 or idx >= len(self._search_history):
            return
        self._search_history_idx = idx
        self._search_buffer = self._search_history[idx] if idx >= 0 else ""

    def _parse_search_buffer(self, pattern: str) -> tuple[str, SearchScope]:
        """Split an optional ``\\k`` / ``\\v`` / ``\\a`` scope suffix off *pattern*."""
        for suffix, scope in _SCOPE_SUFFIXES.items():
            if pattern.endswith(suffix):
                return pattern[: -len(suffix)], scope
        return pattern, self.config.behavior.scope

    def _execute_search(self) -> None:
        """Run the buffered search over the current lines and jump to a match."""
        term, scope = self._parse_search_buffer(self._search_buffer)
        search = self._search
        search.term = term
        search.scope = scope
        search.current = -1
        search.execute(self.lines)

        if not search.matches:
            self.status_msg = f"Pattern not found: {term}"
            log.debug(f"search {term!r} ({scope.value}): no matches")
            return

        log.debug(f"search {term!r} ({scope.value}): {len(search.matches)} matches")
        search.current = search.nearest(self.cursor_line, self._search_forward)
        self._goto_current_match()

    def _refresh_search(self) -> None:
        """Re-run the active search after the visible lines changed."""
        if not self._search.term:
            return
        self._search.execute(self.lines)

    def _goto_current_match(self) -> None:
        match = self._search.current_match
        if match is None:
            return
        self._goto_line(match.line_index, center=True)
        total = len(self._search.matches)
        self.status_msg = (
            f"/{self._search.term}  [{self._search.current + 1}/{total}]"
        )

    def _goto_next_match(self) -> None:
        self._step_match(1 if self._search_forward else -1)

    def _goto_prev_match(self) -> None:
        self._step_match(-1 if self._search_forward else 1)

    def _step_match(self, step: int) -> None:
        if not self._search.matches:
            if self._search.term:
                self.status_msg = f"Pattern not found: {self._search.term}"
            else:
                self.status_msg = "No previous search"
            return
        self._search.advance(step)
        self._goto_current_match()

    def _clear_search(self) -> None:
        self._search.clear()
        self.status_msg = ""
