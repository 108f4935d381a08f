"""Fixed-width layout primitives.

The printer does no layout of its own, so padding, column splitting and
wrapping happen here, in characters, against the session's printable width.
Text goes through the session's encoder (``print``); padding spaces are raw
bytes (``add``).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Protocol, Sequence

from const import DEFAULT_LINE_CHAR

SPACE = b" "


class LayoutTarget(Protocol):
    """What the layout functions need from a printer session."""

    line_char: Optional[bytes]

    def get_width(self) -> int: ...

    def print(self, text: str) -> None: ...

    def add(self, data: bytes) -> None: ...

    def normalize_text(self, text: str) -> str: ...

    def new_line(self) -> None: ...

    def bold(self, enabled: bool) -> None: ...


class Align(str, Enum):
    LEFT = "LEFT"
    CENTER = "CENTER"
    RIGHT = "RIGHT"


@dataclass(frozen=True)
class TableCell:
    """One cell of a :func:`table_custom` row.

    ``width`` is a fraction (0..1] of the printable width; when omitted the
    cell gets an even share of the row.
    """

    text: str
    align: Align = Align.LEFT
    width: Optional[float] = None
    bold: bool = False


def _pad(target: LayoutTarget, count: float) -> None:
    # Matches a `for (j = 0; j < count; j++)` loop over a fractional bound.
    if count > 0:
        target.add(SPACE * math.ceil(count))


def left_right(target: LayoutTarget, left: object, right: object) -> None:
    """Print ``left`` and ``right`` at the two edges of one line."""
    left = target.normalize_text(str(left))
    right = target.normalize_text(str(right))
    target.print(left)
    _pad(target, target.get_width() - len(left) - len(right))
    target.print(right)
    target.new_line()


def table(target: LayoutTarget, cells: Sequence[object]) -> None:
    """Print cells in evenly sized columns; long text is not truncated."""
    if not cells:
        target.new_line()
        return
    cell_width = target.get_width() / len(cells)
    for cell in cells:
        text = target.normalize_text(str(cell))
        target.print(text)
        _pad(target, cell_width - len(text))
    target.new_line()


def _cell_width(width: int, cell: TableCell, count: int) -> float:
    if cell.width:
        return width * cell.width
    return width / count


def _emit_cell(target: LayoutTarget, text: str, align: Align, cell_width: float) -> None:
    spaces = cell_width - len(text)
    if align == Align.CENTER:
        # Trailing side gets one space less than the leading side.
        _pad(target, spaces / 2)
        if text:
            target.print(text)
        _pad(target, spaces / 2 - 1)
    elif align == Align.RIGHT:
        _pad(target, spaces)
        if text:
            target.print(text)
    else:
        if text:
            target.print(text)
        _pad(target, spaces)


def table_custom(target: LayoutTarget, cells: Sequence[TableCell]) -> int:
    """Print a row of aligned, optionally bold, custom-width cells.

    Text wider than its column is cut and the rest continues on extra rows
    with the same columns, the other cells left blank. An empty row prints
    a bare line feed.

    Returns:
        Number of printed rows.
    """
    if not cells:
        target.new_line()
        return 1
    width = target.get_width()
    row: List[TableCell] = []
    for cell in cells:
        if not isinstance(cell, TableCell):
            cell = TableCell(**cell)
        row.append(replace(cell, text=target.normalize_text(str(cell.text))))
    rows = 0
    while row:
        continuation: List[TableCell] = []
        overflow = False
        for cell in row:
            text = str(cell.text)
            cell_width = _cell_width(width, cell, len(row))
            rest = ""
            if cell_width < len(text):
                cut = max(1, int(cell_width - 1))
                text, rest = text[:cut], text[cut:]
                overflow = overflow or bool(rest)

            if cell.bold:
                target.bold(True)
            _emit_cell(target, text, cell.align, cell_width)
            if cell.bold:
                target.bold(False)

            continuation.append(replace(cell, text=rest))
        target.new_line()
        rows += 1
        row = continuation if overflow else []
    return rows


def draw_line(target: LayoutTarget) -> None:
    """Print a full-width horizontal rule."""
    target.add((target.line_char or DEFAULT_LINE_CHAR) * target.get_width())
    target.new_line()
