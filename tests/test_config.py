from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from batt_tui.config import ConfigurationError, MonitorConfig, load_options, save_options


def test_defaults_derive_offsets_and_step() -> None:
    config = MonitorConfig(source=Path("telemetry.txt"))
    assert config.offset_top == 23
    assert config.levels == 20
    assert config.volts_step == pytest.approx(3.5)
    assert config.frame_delay == 0.0
    assert config.output_file is None
    assert config.follow is True


def test_config_is_immutable() -> None:
    config = MonitorConfig(source=Path("telemetry.txt"))
    with pytest.raises(FrozenInstanceError):
        config.screen_height = 30  # type: ignore[misc]


def test_from_options_converts_user_units(tmp_path: Path) -> None:
    config = MonitorConfig.from_options(
        "telemetry.txt",
        {
            "volts_min": 9,
            "volts_max": 14,
            "frame_interval": 250,
            "output_file": str(tmp_path / "mirror.txt"),
            "follow": False,
        },
    )
    assert config.source == Path("telemetry.txt")
    assert config.volts_min == 90
    assert config.volts_max == 140
    assert config.frame_delay == pytest.approx(0.25)
    assert config.output_file == tmp_path / "mirror.txt"
    assert config.follow is False


def test_screen_too_short_for_bars_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="screen height"):
        MonitorConfig(source=Path("telemetry.txt"), screen_height=4)
    assert MonitorConfig(source=Path("telemetry.txt"), screen_height=5).levels == 1


@pytest.mark.parametrize(
    "options",
    [
        {"volts_min": 12, "volts_max": 12},
        {"bar_width": 0},
        {"space_between_bars": -1},
        {"max_line_length": 1},
        {"frame_interval": -5},
        {"poll_interval": -0.1},
        {"screen_height": "tall"},
        {"colour": "red"},
    ],
)
def test_invalid_options_are_rejected(options: dict) -> None:
    with pytest.raises(ConfigurationError):
        MonitorConfig.from_options("telemetry.txt", options)


def test_load_options_missing_file_is_empty(tmp_path: Path) -> None:
    assert load_options(tmp_path / "missing.yaml") == {}


def test_save_and_load_options_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.yaml"
    config = MonitorConfig.from_options("telemetry.txt", {"screen_height": 30, "volts_max": 16})
    save_options(config, path)

    options = load_options(path)
    assert options["screen_height"] == 30
    assert options["volts_max"] == 16
    assert MonitorConfig.from_options("telemetry.txt", options) == config


def test_load_options_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="mapping"):
        load_options(path)


@pytest.mark.parametrize(
    ("options", "message"),
    [
        ({"follow": "no"}, "follow must be true or false"),
        ({"follow": 0}, "follow must be true or false"),
        ({"volts_min": 8.7}, "volts_min must be a whole number"),
        ({"screen_height": True}, "screen_height must be a whole number"),
        ({"poll_interval": False}, "poll_interval must be a number"),
    ],
)
def test_option_values_of_the_wrong_type_are_rejected(options: dict, message: str) -> None:
    with pytest.raises(ConfigurationError, match=message):
        MonitorConfig.from_options("telemetry.txt", options)


def test_yaml_no_is_a_boolean_follow(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("follow: no\npoll_interval: 1\n", encoding="utf-8")

    config = MonitorConfig.from_options("telemetry.txt", load_options(path))

    assert config.follow is False
    assert config.poll_interval == 1.0
