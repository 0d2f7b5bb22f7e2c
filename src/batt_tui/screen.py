"""Character grid shared between the renderer and the Textual display."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Sequence

from rich.style import Style
from rich.text import Text

COLOR_NAMES = ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")


@dataclass(slots=True, frozen=True)
class ColorPair:
    foreground: str
    background: str = "black"


def register_color_pairs() -> dict[str, ColorPair]:
    """Return one pair per basic terminal color, each drawn on black."""

    return {name: ColorPair(foreground=name) for name in COLOR_NAMES}


COLOR_PAIRS = register_color_pairs()


@dataclass(slots=True, frozen=True)
class CellStyle:
    """Attributes applied to a painted cell."""

    pair: str = "white"
    bold: bool = False
    reverse: bool = False

    def to_rich(self) -> Style:
        pair = COLOR_PAIRS[self.pair]
        return Style(
            color=pair.foreground,
            bgcolor=pair.background,
            bold=self.bold,
            reverse=self.reverse,
        )


PLAIN = CellStyle()


@dataclass(slots=True, frozen=True)
class Cell:
    glyph: str = " "
    style: CellStyle = PLAIN


BLANK = Cell()

Snapshot = tuple[tuple[Cell, ...], ...]


class ScreenBuffer:
    """Fixed-height grid of cells; columns are added as cells are painted.

    Paints outside the row range are ignored, the same way a terminal
    refuses writes past its edge.
    """

    __slots__ = ("height", "_rows", "_cursor", "_lock")

    def __init__(self, height: int) -> None:
        if height < 1:
            raise ValueError("screen height must be positive")
        self.height = height
        self._rows: list[list[Cell]] = [[] for _ in range(height)]
        self._cursor = (0, 0)
        self._lock = Lock()

    @property
    def width(self) -> int:
        return max((len(row) for row in self._rows), default=0)

    @property
    def cursor(self) -> tuple[int, int]:
        return self._cursor

    def put(self, row: int, column: int, glyph: str, style: CellStyle = PLAIN) -> bool:
        """Paint a single cell, returning ``False`` if it lies off screen."""

        if not 0 <= row < self.height or column < 0:
            return False
        with self._lock:
            cells = self._rows[row]
            if column >= len(cells):
                cells.extend([BLANK] * (column + 1 - len(cells)))
            cells[column] = Cell(glyph=glyph, style=style)
        return True

    def write(self, row: int, column: int, text: str, style: CellStyle = PLAIN) -> None:
        """Paint *text* left to right starting at (*row*, *column*)."""

        for offset, glyph in enumerate(text):
            self.put(row, column + offset, glyph, style)

    def move_cursor(self, row: int, column: int) -> None:
        self._cursor = (row, column)

    def cell(self, row: int, column: int) -> Cell:
        cells = self._rows[row]
        if column < len(cells):
            return cells[column]
        return BLANK

    def line(self, row: int) -> str:
        """Return the glyphs of *row* as plain text."""
        return "".join(cell.glyph for cell in self._rows[row])

    def snapshot(self) -> Snapshot:
        """Return an immutable copy of the grid for another thread to display."""

        with self._lock:
            return tuple(tuple(row) for row in self._rows)


def render_snapshot(snapshot: Sequence[Sequence[Cell]]) -> Text:
    """Convert *snapshot* into Rich text, merging runs of equally styled cells."""

    text = Text(no_wrap=True, overflow="crop")
    for index, row in enumerate(snapshot):
        if index:
            text.append("\n")
        run: list[str] = []
        run_style: CellStyle | None = None
        for cell in row:
            if cell.style != run_style and run:
                text.append("".join(run), style=_style_for(run_style))
                run = []
            run_style = cell.style
            run.append(cell.glyph)
        if run:
            text.append("".join(run), style=_style_for(run_style))
    return text


def _style_for(style: CellStyle | None) -> Style | None:
    if style is None or style == PLAIN:
        return None
    return style.to_rich()


__all__ = [
    "BLANK",
    "COLOR_PAIRS",
    "Cell",
    "CellStyle",
    "ColorPair",
    "ScreenBuffer",
    "render_snapshot",
]
