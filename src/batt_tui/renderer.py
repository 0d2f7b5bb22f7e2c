"""Bar chart painting on top of :class:`~batt_tui.screen.ScreenBuffer`."""

from __future__ import annotations

from typing import MutableSequence

from .config import MonitorConfig
from .geometry import Geometry
from .screen import PLAIN, CellStyle, ScreenBuffer

LEGEND_STYLE = CellStyle(pair="cyan")
CAPTION_STYLE = CellStyle(pair="cyan", bold=True)
BAR_STYLE = CellStyle(pair="white", reverse=True)

LEGEND_WIDTH = 6


class BarRenderer:
    """Paints the voltage legend and per-battery bars into a screen buffer.

    The renderer only mutates the buffer; presenting it is the caller's job.
    """

    __slots__ = ("config", "geometry", "screen")

    def __init__(self, config: MonitorConfig, screen: ScreenBuffer) -> None:
        self.config = config
        self.geometry = Geometry(config)
        self.screen = screen

    def move_cursor_to_status_row(self) -> None:
        self.screen.move_cursor(self.geometry.status_row, 0)

    def draw_left_panel(self) -> None:
        """Draw the voltage axis with a label on every second level."""

        config = self.config
        geometry = self.geometry
        column = config.offset_left - LEGEND_WIDTH
        self.screen.write(0, column, "Volts:", CAPTION_STYLE)
        for level in range(0, geometry.top_level + 1, 2):
            volts = (config.volts_min + level * config.volts_step) / 10.0
            self.screen.write(geometry.row_for(level), column, f"{volts:5.2f}", LEGEND_STYLE)
        self.screen.write(geometry.label_row, 1, "Battery:", CAPTION_STYLE)
        self.move_cursor_to_status_row()

    def draw_battery_labels(self, battery_count: int) -> None:
        for index in range(battery_count):
            self.screen.write(
                self.geometry.label_row,
                self.geometry.column_for(index, 0),
                f"{index + 1:2d}",
                LEGEND_STYLE,
            )

    def draw_static_panels(self, battery_count: int) -> None:
        self.draw_left_panel()
        self.draw_battery_labels(battery_count)
        self.move_cursor_to_status_row()

    def draw_frame(self, readings: MutableSequence[int]) -> None:
        """Paint one bar per reading, clamping *readings* in place.

        Every level of every bar is repainted, so a bar that shrank since the
        previous frame is erased without tracking earlier frames.
        """

        geometry = self.geometry
        width = self.config.bar_width
        for index, value in enumerate(readings):
            readings[index] = geometry.clamp(value)
            height = geometry.bar_height_for(readings[index])
            for level in range(geometry.top_level + 1):
                style = BAR_STYLE if level <= height else PLAIN
                row = geometry.row_for(level)
                for sub_column in range(width):
                    self.screen.put(row, geometry.column_for(index, sub_column), " ", style)
        self.move_cursor_to_status_row()


__all__ = ["BAR_STYLE", "BarRenderer", "CAPTION_STYLE", "LEGEND_STYLE"]
