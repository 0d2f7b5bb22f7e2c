"""Configuration helpers for batt-tui."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

DEFAULT_CONFIG_DIR = Path("~/.config/batt_tui").expanduser()
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"

# Keys accepted in the YAML file and on the command line, in user-facing units
# (whole volts, milliseconds).
OPTION_KEYS = (
    "screen_height",
    "bar_width",
    "space_between_bars",
    "volts_min",
    "volts_max",
    "max_line_length",
    "frame_interval",
    "output_file",
    "follow",
    "poll_interval",
)


class ConfigurationError(ValueError):
    """Raised when option values cannot produce a usable configuration."""


@dataclass(slots=True, frozen=True)
class MonitorConfig:
    """Immutable settings shared by the parser, renderer and reader.

    Voltages are stored in tenths of a volt and ``frame_interval`` in
    milliseconds, matching the units of the telemetry records.
    """

    source: Path
    screen_height: int = 24
    bar_width: int = 3
    space_between_bars: int = 3
    volts_min: int = 80
    volts_max: int = 150
    max_line_length: int = 512
    frame_interval: int = 0
    output_file: Path | None = None
    offset_left: int = 10
    offset_bottom: int = 3
    follow: bool = True
    poll_interval: float = 0.1

    def __post_init__(self) -> None:
        if self.offset_top <= self.offset_bottom:
            raise ConfigurationError(
                f"screen height {self.screen_height} leaves no room for bars "
                f"(needs more than {self.offset_bottom + 1} lines)"
            )
        if self.volts_max <= self.volts_min:
            raise ConfigurationError(
                f"volts-max ({self.volts_max / 10:g}) must be greater than "
                f"volts-min ({self.volts_min / 10:g})"
            )
        if self.bar_width < 1:
            raise ConfigurationError("bar width must be at least 1")
        if self.space_between_bars < 0:
            raise ConfigurationError("space between bars cannot be negative")
        if self.max_line_length < 2:
            raise ConfigurationError("max line length must be at least 2 bytes")
        if self.frame_interval < 0:
            raise ConfigurationError("frame interval cannot be negative")
        if self.poll_interval < 0:
            raise ConfigurationError("poll interval cannot be negative")

    @property
    def offset_top(self) -> int:
        return self.screen_height - 1

    @property
    def levels(self) -> int:
        """Number of bar levels above the baseline."""
        return self.offset_top - self.offset_bottom

    @property
    def volts_step(self) -> float:
        """Voltage (tenths) represented by one screen row."""
        return (self.volts_max - self.volts_min) / self.levels

    @property
    def frame_delay(self) -> float:
        """Inter-frame delay in seconds."""
        return self.frame_interval / 1000.0

    @classmethod
    def from_options(cls, source: Path | str, options: Mapping[str, Any]) -> "MonitorConfig":
        """Build a config from user-facing *options* (whole volts, milliseconds)."""

        unknown = sorted(set(options) - set(OPTION_KEYS))
        if unknown:
            raise ConfigurationError(f"unknown option(s): {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        for key in ("screen_height", "bar_width", "space_between_bars", "max_line_length", "frame_interval"):
            if options.get(key) is not None:
                kwargs[key] = _int_option(key, options[key])
        for key in ("volts_min", "volts_max"):
            if options.get(key) is not None:
                kwargs[key] = 10 * _int_option(key, options[key])
        if options.get("poll_interval") is not None:
            kwargs["poll_interval"] = _float_option("poll_interval", options["poll_interval"])
        if options.get("output_file"):
            kwargs["output_file"] = Path(options["output_file"]).expanduser()
        if options.get("follow") is not None:
            if not isinstance(options["follow"], bool):
                raise ConfigurationError(f"follow must be true or false, got {options['follow']!r}")
            kwargs["follow"] = options["follow"]
        return cls(source=Path(source), **kwargs)

    def to_options(self) -> dict[str, Any]:
        """Return the user-facing option mapping for this config."""
        return {
            "screen_height": self.screen_height,
            "bar_width": self.bar_width,
            "space_between_bars": self.space_between_bars,
            "volts_min": self.volts_min // 10,
            "volts_max": self.volts_max // 10,
            "max_line_length": self.max_line_length,
            "frame_interval": self.frame_interval,
            "output_file": str(self.output_file) if self.output_file else None,
            "follow": self.follow,
            "poll_interval": self.poll_interval,
        }


def _int_option(key: str, value: Any) -> int:
    # bool is an int subclass and floats would truncate silently.
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ConfigurationError(f"{key} must be a whole number, got {value!r}")
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a whole number, got {value!r}") from exc


def _float_option(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ConfigurationError(f"{key} must be a number, got {value!r}")
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number, got {value!r}") from exc


def load_options(path: Path | None = None) -> dict[str, Any]:
    """Load option defaults from *path* or the default location.

    A missing file yields an empty mapping so built-in defaults apply.
    """
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        return {}

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"cannot read config file {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {config_path} must contain a mapping")
    return data


def save_options(config: MonitorConfig, path: Path | None = None) -> None:
    """Persist *config* as YAML option defaults to *path*."""
    config_path = path or DEFAULT_CONFIG_PATH
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(config.to_options(), handle, sort_keys=False)


__all__ = [
    "ConfigurationError",
    "DEFAULT_CONFIG_PATH",
    "MonitorConfig",
    "OPTION_KEYS",
    "load_options",
    "save_options",
]
