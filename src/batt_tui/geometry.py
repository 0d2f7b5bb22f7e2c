"""Screen geometry for the voltage bar chart."""

from __future__ import annotations

from dataclasses import dataclass

from .config import MonitorConfig


def round_half_away_from_zero(value: float) -> int:
    """Round *value* to the nearest integer, pushing ties away from zero."""

    if value > 0:
        return int(value + 0.5)
    return int(value - 0.5)


@dataclass(slots=True, frozen=True)
class Geometry:
    """Maps bar levels and battery indices onto screen cells."""

    config: MonitorConfig

    @property
    def top_level(self) -> int:
        return self.config.levels

    @property
    def label_row(self) -> int:
        """Row holding the battery index legend."""
        return self.row_for(-1)

    @property
    def status_row(self) -> int:
        """Row where the cursor rests between frames."""
        return self.row_for(-2)

    def row_for(self, levels_above_baseline: int) -> int:
        # Negative levels address the legend rows below the baseline.
        return self.config.screen_height - self.config.offset_bottom - levels_above_baseline

    def column_for(self, battery_index: int, sub_column: int) -> int:
        config = self.config
        return (
            1
            + config.offset_left
            + (config.space_between_bars + config.bar_width) * battery_index
            + sub_column
        )

    def clamp(self, voltage: int) -> int:
        return min(max(voltage, self.config.volts_min), self.config.volts_max)

    def bar_height_for(self, voltage: int) -> int:
        """Return the highest filled level for *voltage*; level 0 is always filled."""

        clamped = self.clamp(voltage)
        return round_half_away_from_zero((clamped - self.config.volts_min) / self.config.volts_step)


__all__ = ["Geometry", "round_half_away_from_zero"]
