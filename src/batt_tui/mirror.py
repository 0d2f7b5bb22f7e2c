"""Mirror output for accepted telemetry records."""

from __future__ import annotations

from pathlib import Path
from typing import TextIO


class MirrorError(RuntimeError):
    """Raised when the mirror file cannot be opened or written."""


class MirrorWriter:
    """Context manager that appends accepted records to a text file."""

    __slots__ = ("_handle", "path")

    def __init__(self, handle: TextIO, path: Path) -> None:
        self._handle = handle
        self.path = path

    def __enter__(self) -> "MirrorWriter":
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close()

    def write_record(self, record: str) -> None:
        """Append *record* followed by a newline."""

        try:
            self._handle.write(record)
            self._handle.write("\n")
            self._handle.flush()
        except (OSError, ValueError) as exc:
            raise MirrorError(f"Failed to write to {self.path}: {exc}") from exc

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def close(self) -> None:
        """Close the underlying file handle."""

        if not self._handle.closed:
            self._handle.flush()
            self._handle.close()


def open_mirror(path: Path) -> MirrorWriter:
    """Open *path* for appending records, creating parent directories."""

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handle = path.open("a", encoding="ascii", errors="replace", newline="\n")
    except OSError as exc:
        raise MirrorError(f"Failed to open {path}: {exc}") from exc
    return MirrorWriter(handle, path)


__all__ = ["MirrorError", "MirrorWriter", "open_mirror"]
