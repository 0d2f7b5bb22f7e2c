"""Telemetry record validation and voltage extraction."""

from __future__ import annotations

import re

ALLOWED_CHARS = frozenset("0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ,")
DELIMITER = ","
ZONE_START = "B"
ZONE_END = "H"

_LEADING_DIGITS = re.compile(r"[0-9]+")

# Largest value a C int holds; longer digit runs saturate to it.
INT_MAX = 2**31 - 1
_INT_MAX_DIGITS = len(str(INT_MAX))


def validate_and_normalize(raw: str) -> str | None:
    """Return *raw* with all whitespace removed, or ``None`` if it is not a record.

    A record is rejected when nothing but whitespace remains or when any
    remaining character falls outside ``0-9``, ``A-Z`` and the delimiter.
    """

    normalized = "".join(raw.split())
    if not normalized:
        return None
    if any(char not in ALLOWED_CHARS for char in normalized):
        return None
    return normalized


def lenient_int(token: str) -> int:
    """Parse the leading digit run of *token*; tokens without one parse as 0.

    Values beyond :data:`INT_MAX` saturate, however long the digit run is.
    """

    match = _LEADING_DIGITS.match(token)
    if match is None:
        return 0
    digits = match.group().lstrip("0")
    if len(digits) > _INT_MAX_DIGITS:
        return INT_MAX
    return min(int(digits or "0"), INT_MAX)


def extract_readings(normalized: str) -> list[int]:
    """Return the voltage readings between a ``B`` field and the next ``H`` field.

    Empty fields are skipped. The marker fields themselves are never
    extracted, and a record without a ``B`` field yields an empty list.
    """

    readings: list[int] = []
    in_zone = False
    for token in normalized.split(DELIMITER):
        if not token:
            continue
        if token.startswith(ZONE_END):
            in_zone = False
        if in_zone:
            readings.append(lenient_int(token))
        if token.startswith(ZONE_START):
            in_zone = True
    return readings


def parse_record(raw: str) -> list[int] | None:
    """Validate *raw* and extract its readings in one step."""

    normalized = validate_and_normalize(raw)
    if normalized is None:
        return None
    return extract_readings(normalized)


__all__ = [
    "ALLOWED_CHARS",
    "INT_MAX",
    "extract_readings",
    "lenient_int",
    "parse_record",
    "validate_and_normalize",
]
