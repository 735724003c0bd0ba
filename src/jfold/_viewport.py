"""Scroll window over the formatted lines."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ViewportSlice(Generic[T]):
    lines: list[T]
    offset: int
    has_more_above: bool
    has_more_below: bool


def clamp_offset(scroll_offset: int, height: int, total: int) -> int:
    return max(0, min(scroll_offset, max(0, total - max(1, height))))


def visible_slice(lines: Sequence[T], scroll_offset: int, height: int) -> ViewportSlice[T]:
    """Lines ``[offset, offset + height)`` after clamping the offset."""
    height = max(1, height)
    total = len(lines)
    offset = clamp_offset(scroll_offset, height, total)
    window = list(lines[offset : offset + height])
    return ViewportSlice(window, offset, offset > 0, offset + height < total)


def recenter_for_cursor(
    cursor_line: int,
    scroll_offset: int,
    height: int,
    total: int | None = None,
    margin: int = 0,
) -> int:
    """Smallest scroll change that puts *cursor_line* inside the window.

    *margin* keeps that many lines of context above/below the cursor when the
    window is tall enough.
    """
    height = max(1, height)
    margin = max(0, min(margin, (height - 1) // 2))
    offset = scroll_offset
    if cursor_line < offset + margin:
        offset = cursor_line - margin
    elif cursor_line >= offset + height - margin:
        offset = cursor_line - height + margin + 1
    if total is not None:
        return clamp_offset(offset, height, total)
    return max(0, offset)


def center_on_line(line: int, height: int, total: int, ratio: float = 0.5) -> int:
    """Offset that places *line* at *ratio* of the window height."""
    height = max(1, height)
    return clamp_offset(line - int(height * ratio), height, total)
