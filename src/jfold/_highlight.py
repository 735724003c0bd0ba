"""Syntax tokens and search-match overlay for formatted lines."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Token:
    text: str
    color: str
    is_match: bool = False


@dataclass(frozen=True)
class ColorScheme:
    """Rich style strings per token kind."""

    key: str = "blue"
    string: str = "green"
    number: str = "cyan"
    boolean: str = "yellow"
    null: str = "grey50"
    brace: str = "magenta"
    bracket: str = "cyan"
    default: str = "white"
    match: str = "black on dark_goldenrod"
    current_match: str = "bold black on yellow"


DEFAULT_SCHEME = ColorScheme()

_STRUCTURAL = frozenset(("{", "}", "[", "]", "},", "],"))
_NUMBER_RE = re.compile(r"-?(0|[1-9]\d*)(\.\d+)?([eE][+-]?\d+)?|-?Infinity|NaN")


def find_separator_colon(line: str) -> int:
    """Index of the key/value colon, ignoring colons inside quoted strings."""
    in_str = False
    escape = False
    for i, ch in enumerate(line):
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif ch == '"':
            in_str = not in_str
        elif ch == ":" and not in_str:
            return i
    return -1


def value_color(value: str, scheme: ColorScheme = DEFAULT_SCHEME) -> str:
    value = value.rstrip(",")
    if value.startswith("{"):
        return scheme.brace
    if value.startswith("["):
        return scheme.bracket
    if value.startswith('"'):
        return scheme.string
    if value in ("true", "false"):
        return scheme.boolean
    if value == "null":
        return scheme.null
    if _NUMBER_RE.fullmatch(value):
        return scheme.number
    return scheme.default


def _split_comma(text: str) -> tuple[str, str]:
    if text.endswith(","):
        return text[:-1], ","
    return text, ""


def tokenize_line(line: str, scheme: ColorScheme = DEFAULT_SCHEME) -> list[Token]:
    """Split a formatted line into coloured tokens.

    Joining the token texts always gives back *line*.
    """
    stripped = line.strip()
    if not stripped:
        return [Token(line, scheme.default)]

    if stripped in _STRUCTURAL:
        color = scheme.bracket if stripped[0] in "[]" else scheme.brace
        return [Token(line, color)]

    tokens: list[Token] = []
    colon = find_separator_colon(line)
    if colon >= 0:
        rest = line[colon + 1 :]
        gap = len(rest) - len(rest.lstrip())
        value, comma = _split_comma(rest[gap:])
        tokens.append(Token(line[:colon], scheme.key))
        tokens.append(Token(line[colon : colon + 1 + gap], scheme.default))
        if value:
            tokens.append(Token(value, value_color(value, scheme)))
    else:
        lead = len(line) - len(line.lstrip())
        value, comma = _split_comma(line[lead:])
        if lead:
            tokens.append(Token(line[:lead], scheme.default))
        tokens.append(Token(value, value_color(value, scheme)))
    if comma:
        tokens.append(Token(comma, scheme.default))
    return tokens


def _term_regex(term: str) -> re.Pattern[str]:
    return re.compile(re.escape(term), re.IGNORECASE)


def apply_search_highlighting(
    tokens: list[Token],
    term: str,
    is_current_match: bool = False,
    scheme: ColorScheme = DEFAULT_SCHEME,
    current_span: tuple[int, int] | None = None,
) -> list[Token]:
    """Overlay case-insensitive matches of *term* onto *tokens*.

    Returns *tokens* itself when *term* is blank. Matched substrings become
    tokens flagged ``is_match``; those inside *current_span* (or all of them
    when no span is given) use the current-match colour when
    *is_current_match* is set.
    """
    if not term.strip():
        return tokens

    regex = _term_regex(term)
    result: list[Token] = []
    offset = 0
    for token in tokens:
        text = token.text
        last = 0
        for m in regex.finditer(text):
            if m.start() > last:
                result.append(Token(text[last : m.start()], token.color))
            abs_start, abs_end = offset + m.start(), offset + m.end()
            current = is_current_match and (
                current_span is None
                or (current_span[0] <= abs_start and abs_end <= current_span[1])
            )
            color = scheme.current_match if current else scheme.match
            result.append(Token(m.group(), color, True))
            last = m.end()
        if last == 0:
            result.append(token)
        elif last < len(text):
            result.append(Token(text[last:], token.color))
        offset += len(text)
    return result


def apply_match_spans(
    tokens: list[Token],
    spans: list[tuple[int, int]],
    current_span: tuple[int, int] | None = None,
    scheme: ColorScheme = DEFAULT_SCHEME,
) -> list[Token]:
    """Paint the column ranges *spans* over *tokens*.

    Columns count from the start of the joined line, so a span that crosses
    token boundaries is painted in every token it touches. Text outside the
    spans keeps its token colour.
    """
    if not spans:
        return tokens

    result: list[Token] = []
    offset = 0
    for token in tokens:
        start, end = offset, offset + len(token.text)
        offset = end
        cuts = {0, end - start}
        for lo, hi in spans:
            if lo < end and hi > start:
                cuts.add(max(lo, start) - start)
                cuts.add(min(hi, end) - start)
        whole = any(lo <= start and end <= hi for lo, hi in spans)
        if start == end or (len(cuts) == 2 and not whole):
            result.append(token)
            continue
        bounds = sorted(cuts)
        for a, b in zip(bounds, bounds[1:]):
            col_a, col_b = start + a, start + b
            piece = token.text[a:b]
            inside = [s for s in spans if s[0] <= col_a and col_b <= s[1]]
            if not inside:
                result.append(Token(piece, token.color))
            elif current_span in inside:
                result.append(Token(piece, scheme.current_match, True))
            else:
                result.append(Token(piece, scheme.match, True))
    return result


# -- Search --------------------------------------------------------------------


class SearchScope(Enum):
    ALL = "all"
    KEYS = "keys"
    VALUES = "values"


@dataclass(frozen=True)
class SearchMatch:
    line_index: int
    column_start: int
    column_end: int
    match_text: str


def search_lines(
    lines: list[str], term: str, scope: SearchScope = SearchScope.ALL
) -> list[SearchMatch]:
    """Find every case-insensitive occurrence of *term* in *lines*.

    ``KEYS`` only looks before the separator colon and ``VALUES`` only after
    it; lines without a colon have neither part.
    """
    if not term.strip():
        return []
    regex = _term_regex(term)
    matches: list[SearchMatch] = []
    for row, line in enumerate(lines):
        if scope is SearchScope.ALL:
            start, part = 0, line
        else:
            colon = find_separator_colon(line)
            if colon < 0:
                continue
            if scope is SearchScope.KEYS:
                start, part = 0, line[:colon]
            else:
                start, part = colon + 1, line[colon + 1 :]
        for m in regex.finditer(part):
            matches.append(
                SearchMatch(row, start + m.start(), start + m.end(), m.group())
            )
    return matches


@dataclass
class SearchState:
    """The active search: term, scope, matches and the selected match."""

    term: str = ""
    scope: SearchScope = SearchScope.ALL
    matches: list[SearchMatch] = field(default_factory=list)
    current: int = -1
    _by_line: dict[int, list[SearchMatch]] = field(default_factory=dict, repr=False)

    def execute(self, lines: list[str]) -> None:
        """(Re)run the search over *lines*, keeping the selection in range."""
        self.matches = search_lines(lines, self.term, self.scope)
        self._by_line = {}
        for match in self.matches:
            self._by_line.setdefault(match.line_index, []).append(match)
        if not self.matches:
            self.current = -1
        elif not 0 <= self.current < len(self.matches):
            self.current = 0

    def clear(self) -> None:
        self.term = ""
        self.matches = []
        self._by_line = {}
        self.current = -1

    @property
    def current_match(self) -> SearchMatch | None:
        if 0 <= self.current < len(self.matches):
            return self.matches[self.current]
        return None

    def matches_on(self, line_index: int) -> list[SearchMatch]:
        return self._by_line.get(line_index, [])

    def nearest(self, line_index: int, forward: bool = True) -> int:
        """Index of the first match at/after (or at/before) *line_index*."""
        if not self.matches:
            return -1
        if forward:
            for i, m in enumerate(self.matches):
                if m.line_index >= line_index:
                    return i
            return 0
        for i in range(len(self.matches) - 1, -1, -1):
            if self.matches[i].line_index <= line_index:
                return i
        return len(self.matches) - 1

    def advance(self, step: int = 1) -> SearchMatch | None:
        """Select the next (``step=1``) or previous match, wrapping around."""
        if not self.matches:
            return None
        self.current = (self.current + step) % len(self.matches)
        return self.matches[self.current]
