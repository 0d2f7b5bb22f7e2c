from pathlib import Path

from batt_tui.app import BatteryMonitorApp, status_markup
from batt_tui.config import MonitorConfig
from batt_tui.tail import ReaderStats


class _CallRecorder:
    """Stand-in for ``App.call_from_thread`` that records instead of dispatching."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple]] = []

    def __call__(self, callback, *args):
        self.calls.append((callback.__name__, args))

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


def _app(tmp_path: Path, **overrides) -> tuple[BatteryMonitorApp, _CallRecorder]:
    config = MonitorConfig(source=tmp_path / "telemetry.txt", poll_interval=0.0, **overrides)
    app = BatteryMonitorApp(config)
    recorder = _CallRecorder()
    app.call_from_thread = recorder  # type: ignore[method-assign]
    return app, recorder


def test_reader_presents_each_frame_then_finishes(tmp_path: Path) -> None:
    app, recorder = _app(tmp_path, follow=False)
    app.monitor_config.source.write_text("B,100,120\nbad\nB,90\n", encoding="ascii")

    app._reader_worker()

    assert recorder.names() == ["_present_frame", "_present_frame", "_present_frame", "_end_of_input"]
    snapshot = recorder.calls[-2][1][0]
    assert len(snapshot) == app.monitor_config.screen_height
    assert app.failure is None


def test_reader_failure_is_handed_to_ui(tmp_path: Path) -> None:
    app, recorder = _app(tmp_path)

    app._reader_worker()

    name, args = recorder.calls[-1]
    assert name == "_reader_failed"
    assert "Failed to open" in args[0]


def test_no_frames_are_presented_after_stop(tmp_path: Path) -> None:
    app, recorder = _app(tmp_path)
    app._tail_reader.stop()

    app._flush_display()

    assert recorder.calls == []


def test_oversized_digit_run_does_not_stop_the_reader(tmp_path: Path) -> None:
    app, recorder = _app(tmp_path, follow=False, max_line_length=10000)
    app.monitor_config.source.write_text("B," + "1" * 5000 + ",H\nB,100\n", encoding="ascii")

    app._reader_worker()

    assert recorder.names() == ["_present_frame", "_present_frame", "_present_frame", "_end_of_input"]
    assert app._tail_reader.stats.frames == 2
    assert app.failure is None


def test_unexpected_reader_error_is_handed_to_ui(tmp_path: Path, monkeypatch) -> None:
    app, recorder = _app(tmp_path)

    def crash() -> None:
        raise ZeroDivisionError("boom")

    monkeypatch.setattr(app._tail_reader, "run", crash)

    app._reader_worker()

    name, args = recorder.calls[-1]
    assert name == "_reader_failed"
    assert "boom" in args[0]


def test_status_reports_held_back_line() -> None:
    stats = ReaderStats(frames=4, partial_pending=True)

    markup = status_markup("[live].txt", stats)

    assert "[b]Frames[/b] 4" in markup
    assert "Partial line pending" in markup
    assert "\\[live].txt" in markup
    assert "Partial line pending" not in status_markup("t.txt", ReaderStats())
