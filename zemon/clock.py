"""Seven-segment style digits for the clock tab.

Each digit is five rows tall; every row is one of a handful of segment
shapes. ``render_time`` turns a string like ``"12:34:56"`` into five rows of
cells that the dashboard paints, filled cells in the clock colour.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

CLOCK_ROWS = 5
COLON = ":"
TIME_FORMAT = "%H:%M:%S"
DATE_FORMAT = "%A, %B %d, %Y"


class Segment(Enum):
    FULL = "full"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    SIDES = "sides"
    EMPTY = "empty"


class Cell(NamedTuple):
    """A run of blank or filled terminal cells."""

    text: str
    filled: bool


_F, _L, _C, _R, _S, _E = (
    Segment.FULL,
    Segment.LEFT,
    Segment.CENTER,
    Segment.RIGHT,
    Segment.SIDES,
    Segment.EMPTY,
)

DIGITS: tuple[tuple[Segment, ...], ...] = (
    (_F, _S, _S, _S, _F),  # 0
    (_R, _R, _R, _R, _R),  # 1
    (_F, _R, _F, _L, _F),  # 2
    (_F, _R, _F, _R, _F),  # 3
    (_S, _S, _F, _R, _R),  # 4
    (_F, _L, _F, _R, _F),  # 5
    (_F, _L, _F, _S, _F),  # 6
    (_F, _R, _R, _R, _R),  # 7
    (_F, _S, _F, _S, _F),  # 8
    (_F, _S, _F, _R, _F),  # 9
)

COLON_SEGMENTS: tuple[Segment, ...] = (_E, _C, _E, _C, _E)


def _blank(width: int) -> Cell:
    return Cell(" " * width, False)


def _block(width: int) -> Cell:
    return Cell(" " * width, True)


_DIGIT_CELLS: dict[Segment, tuple[Cell, ...]] = {
    Segment.FULL: (_block(6), _blank(1)),
    Segment.LEFT: (_block(2), _blank(5)),
    Segment.CENTER: (_blank(1), _block(2), _blank(2)),
    Segment.RIGHT: (_blank(4), _block(2), _blank(1)),
    Segment.SIDES: (_block(2), _blank(2), _block(2), _blank(1)),
    Segment.EMPTY: (_blank(6),),
}

_COLON_CELLS: dict[Segment, tuple[Cell, ...]] = {
    Segment.CENTER: (_blank(2), _block(2), _blank(2)),
    Segment.EMPTY: (_blank(6),),
}


def _digit_value(symbol: int | str | None) -> int | None:
    if isinstance(symbol, bool):
        return None
    if isinstance(symbol, int):
        return symbol if 0 <= symbol <= 9 else None
    if isinstance(symbol, str) and len(symbol) == 1 and symbol in "0123456789":
        return int(symbol)
    return None


def segment_for(symbol: int | str | None, row: int) -> Segment:
    """Segment shape of ``symbol`` on ``row``; unknown symbols are empty."""
    if not 0 <= row < CLOCK_ROWS:
        raise ValueError(f"row must be in 0..{CLOCK_ROWS - 1}, got {row}")
    digit = _digit_value(symbol)
    if digit is not None:
        return DIGITS[digit][row]
    if symbol == COLON:
        return COLON_SEGMENTS[row]
    return Segment.EMPTY


def render_character(symbol: int | str | None, row: int) -> list[Cell]:
    """Cells making up one row of one clock character.

    ``symbol`` is a digit (``7`` or ``"7"``), ``":"`` or anything else, which
    renders as blank.
    """
    segment = segment_for(symbol, row)
    if _digit_value(symbol) is not None:
        return list(_DIGIT_CELLS[segment])
    if symbol == COLON:
        return list(_COLON_CELLS[segment])
    return [_blank(6)]


def render_time(text: str) -> list[list[Cell]]:
    """All five rows of the clock face for ``text``, character by character."""
    rows: list[list[Cell]] = []
    for row in range(CLOCK_ROWS):
        cells: list[Cell] = []
        for ch in text:
            cells.extend(render_character(ch, row))
        rows.append(cells)
    return rows


def row_width(cells: list[Cell]) -> int:
    return sum(len(cell.text) for cell in cells)


# ── Colours ────────────────────────────────────────────────────────────────


class ClockColor(NamedTuple):
    name: str
    code: int  # terminal colour number; 8-15 are the bright variants


CLOCK_COLORS: tuple[ClockColor, ...] = (
    ClockColor("black", 0),
    ClockColor("red", 1),
    ClockColor("green", 2),
    ClockColor("yellow", 3),
    ClockColor("blue", 4),
    ClockColor("magenta", 5),
    ClockColor("cyan", 6),
    ClockColor("white", 15),
    ClockColor("dark gray", 8),
    ClockColor("light red", 9),
    ClockColor("light green", 10),
    ClockColor("light yellow", 11),
    ClockColor("light blue", 12),
    ClockColor("light magenta", 13),
    ClockColor("light cyan", 14),
    ClockColor("gray", 7),
)

DEFAULT_CLOCK_COLOR = len(CLOCK_COLORS) - 1


class ClockColorSelection:
    """Index into ``CLOCK_COLORS``.

    ``next`` wraps past the last colour back to the first; ``previous`` stops
    at the first colour.
    """

    def __init__(self, index: int = DEFAULT_CLOCK_COLOR) -> None:
        if not 0 <= index < len(CLOCK_COLORS):
            raise ValueError(f"clock colour index out of range: {index}")
        self.index = index

    @property
    def color(self) -> ClockColor:
        return CLOCK_COLORS[self.index]

    def next(self) -> None:
        self.index = (self.index + 1) % len(CLOCK_COLORS)

    def previous(self) -> None:
        self.index = max(self.index - 1, 0)
