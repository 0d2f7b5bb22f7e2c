"""Textual entry point for batt-tui."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.events import Key
from textual.widgets import Footer, Static

from .config import MonitorConfig
from .mirror import MirrorError
from .renderer import BarRenderer
from .screen import ScreenBuffer, Snapshot, render_snapshot
from .tail import ReaderStats, TailError, TailingReader

LOGGER = logging.getLogger(__name__)


class VoltagePanel(Static):
    """Character grid holding the legend and the battery bars."""

    DEFAULT_CSS = """
    VoltagePanel {
        height: auto;
        width: 1fr;
    }
    """

    def show(self, snapshot: Snapshot) -> None:
        self.update(render_snapshot(snapshot))


def status_markup(source: str, stats: ReaderStats, *, notice: str | None = None) -> str:
    parts = [
        f"[b]Source[/b] {escape(source)}",
        f"[b]Frames[/b] {stats.frames}",
        f"[b]Skipped[/b] {stats.skipped}",
        f"[b]Reopens[/b] {stats.reopens}",
    ]
    if stats.partial_pending:
        parts.append("[dim]Partial line pending[/dim]")
    if notice:
        parts.append(notice)
    return "  ".join(parts)


class StatusBar(Static):
    """One-line summary of what the reader has consumed."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        padding: 0 1;
        background: $boost;
    }
    """

    def update_status(self, source: str, stats: ReaderStats, *, notice: str | None = None) -> None:
        self.update(status_markup(source, stats, notice=notice))


class BatteryMonitorApp(App[None]):
    """batt-tui Textual application shell."""

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("ctrl+c", "quit", "Quit", show=False),
    ]

    def __init__(self, config: MonitorConfig) -> None:
        super().__init__()
        self.monitor_config = config
        self.failure: str | None = None
        self._input_finished = False
        self._grid = ScreenBuffer(config.screen_height)
        self._bar_renderer = BarRenderer(config, self._grid)
        self._tail_reader = TailingReader(config, self._bar_renderer, flush=self._flush_display)
        self._tail_thread: threading.Thread | None = None

    def compose(self) -> ComposeResult:
        yield VoltagePanel(id="voltage-panel")
        yield StatusBar(id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        self._refresh_status()
        self._tail_thread = threading.Thread(
            target=self._reader_worker,
            name="batt-tui-reader",
            daemon=True,
        )
        self._tail_thread.start()

    def on_unmount(self) -> None:
        self._tail_reader.stop()
        if self._tail_thread is not None and self._tail_thread.is_alive():
            self._tail_thread.join(timeout=0.5)

    def on_key(self, event: Key) -> None:
        if self._input_finished:
            event.stop()
            self.exit()

    def _reader_worker(self) -> None:
        try:
            self._tail_reader.run()
        except (TailError, MirrorError) as exc:
            LOGGER.error("Reader stopped: %s", exc)
            self._call_ui(self._reader_failed, str(exc))
        except Exception as exc:
            LOGGER.exception("Reader crashed")
            self._call_ui(self._reader_failed, f"Reader crashed: {exc!r}")
        else:
            if not self._tail_reader.stopped:
                self._call_ui(self._end_of_input)

    def _call_ui(self, callback: Callable[..., Any], *args: Any) -> None:
        try:
            self.call_from_thread(callback, *args)
        except RuntimeError as exc:
            # The event loop is gone; the app is shutting down.
            LOGGER.debug("Dropped UI update %s: %s", getattr(callback, "__name__", callback), exc)

    def _flush_display(self) -> None:
        if self._tail_reader.stopped:
            return
        self._call_ui(self._present_frame, self._grid.snapshot())

    def _present_frame(self, snapshot: Snapshot) -> None:
        self.query_one(VoltagePanel).show(snapshot)
        self._refresh_status()

    def _refresh_status(self, notice: str | None = None) -> None:
        self.query_one(StatusBar).update_status(
            str(self.monitor_config.source),
            self._tail_reader.stats,
            notice=notice,
        )

    def _end_of_input(self) -> None:
        self._input_finished = True
        self._refresh_status("[yellow]End of input, press any key to exit[/yellow]")
        self.log("End of input reached")

    def _reader_failed(self, message: str) -> None:
        self.failure = message
        self.log.error(message)
        self.exit(return_code=1)


def run(config: MonitorConfig) -> BatteryMonitorApp:
    """Run the app until it exits and return it for inspection."""

    app = BatteryMonitorApp(config)
    app.run()
    return app


__all__ = ["BatteryMonitorApp", "StatusBar", "VoltagePanel", "run", "status_markup"]
