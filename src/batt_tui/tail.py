"""Follow-mode reader that turns appended telemetry lines into frames."""

from __future__ import annotations

import logging
import os
import threading
from contextlib import ExitStack
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .config import MonitorConfig
from .mirror import MirrorWriter, open_mirror
from .records import extract_readings, validate_and_normalize
from .renderer import BarRenderer

LOGGER = logging.getLogger(__name__)

FlushCallback = Callable[[], None]
WaitCallback = Callable[[float], bool]


class TailError(RuntimeError):
    """Raised when the source file cannot be opened or read."""


class ReaderState(Enum):
    OPENING = "opening"
    READING = "reading"
    END_OF_FILE = "end-of-file"
    TERMINATED = "terminated"


@dataclass(slots=True)
class ReaderStats:
    """Counters describing what the reader has consumed so far."""

    records: int = 0
    frames: int = 0
    skipped: int = 0
    reopens: int = 0
    partial_pending: bool = False


class TailingReader:
    """Read records from the source file forever, rendering one frame each.

    At end of file the source is closed and reopened at the byte offset
    already consumed, so appended records are picked up without replaying
    earlier ones. *flush* is called after every frame to present the screen
    buffer; *wait* blocks for the given number of seconds and returns
    ``True`` when the reader should stop.
    """

    def __init__(
        self,
        config: MonitorConfig,
        renderer: BarRenderer,
        *,
        flush: FlushCallback,
        mirror: MirrorWriter | None = None,
        wait: WaitCallback | None = None,
    ) -> None:
        self.config = config
        self.renderer = renderer
        self.state = ReaderState.OPENING
        self.stats = ReaderStats()
        self._flush = flush
        self._mirror = mirror
        self._stop_event = threading.Event()
        self._wait = wait or self._stop_event.wait
        self._offset = 0
        self._identity: tuple[int, int] | None = None

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    @property
    def offset(self) -> int:
        """Number of source bytes consumed so far."""
        return self._offset

    def stop(self) -> None:
        """Ask the loop to finish; a pending frame or poll wait returns early."""
        self._stop_event.set()

    def run(self) -> ReaderStats:
        """Run until stopped, until end of input when not following, or until a fatal error."""

        try:
            with ExitStack() as stack:
                if self._mirror is None and self.config.output_file is not None:
                    self._mirror = stack.enter_context(open_mirror(self.config.output_file))
                self.renderer.draw_left_panel()
                self._flush()
                while not self.stopped:
                    records_read = self._read_pass()
                    if self.stopped or not self.config.follow:
                        break
                    if records_read == 0 and self._wait(self.config.poll_interval):
                        break
                    self.stats.reopens += 1
        finally:
            self.state = ReaderState.TERMINATED
        return self.stats

    def process_record(self, raw: str) -> bool:
        """Render *raw* as one frame; malformed records are skipped and return ``False``."""

        self.stats.records += 1
        normalized = validate_and_normalize(raw)
        if normalized is None:
            self.stats.skipped += 1
            LOGGER.debug("Skipping malformed record %r", raw)
            return False
        if self._mirror is not None:
            self._mirror.write_record(raw.rstrip("\r\n"))
        readings = extract_readings(normalized)
        self.renderer.draw_battery_labels(len(readings))
        self.renderer.draw_frame(readings)
        self._flush()
        self.stats.frames += 1
        if self.config.frame_interval > 0:
            self._wait(self.config.frame_delay)
        return True

    def _read_pass(self) -> int:
        """Open the source, consume complete records up to end of file, close it."""

        self.state = ReaderState.OPENING
        path = self.config.source
        try:
            handle = path.open("rb")
        except OSError as exc:
            self.state = ReaderState.TERMINATED
            raise TailError(f"Failed to open {path}: {exc}") from exc

        records_read = 0
        with handle:
            self._resume_position(handle)
            self.state = ReaderState.READING
            while not self.stopped:
                try:
                    chunk = handle.readline(self.config.max_line_length)
                except OSError as exc:
                    self.state = ReaderState.TERMINATED
                    raise TailError(f"Failed to read {path}: {exc}") from exc
                if not chunk:
                    break
                if self._is_partial(chunk):
                    self._mark_partial_pending()
                    break
                self._offset += len(chunk)
                self.stats.partial_pending = False
                records_read += 1
                self.process_record(chunk.decode("ascii", errors="replace"))
        self.state = ReaderState.END_OF_FILE
        return records_read

    def _resume_position(self, handle) -> None:
        status = os.fstat(handle.fileno())
        identity = (status.st_dev, status.st_ino)
        if self._identity is not None and identity != self._identity:
            LOGGER.info("%s was replaced; reading from the start", self.config.source)
            self._offset = 0
        elif status.st_size < self._offset:
            LOGGER.info(
                "%s shrank from %d to %d bytes; reading from the start",
                self.config.source,
                self._offset,
                status.st_size,
            )
            self._offset = 0
        self._identity = identity
        handle.seek(self._offset)

    def _mark_partial_pending(self) -> None:
        # Present once so the display can report the held-back line.
        if self.stats.partial_pending:
            return
        self.stats.partial_pending = True
        LOGGER.debug("Holding back unterminated line at offset %d", self._offset)
        self._flush()

    def _is_partial(self, chunk: bytes) -> bool:
        # An unterminated short line at end of file is still being written.
        if not self.config.follow:
            return False
        return not chunk.endswith(b"\n") and len(chunk) < self.config.max_line_length


__all__ = ["ReaderState", "ReaderStats", "TailError", "TailingReader"]
