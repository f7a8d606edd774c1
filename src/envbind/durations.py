"""Go-style duration strings for ``datetime.timedelta``.

Durations are written as a sequence of decimal numbers with unit
suffixes, e.g. ``"300ms"``, ``"1.5h"`` or ``"2h45m"``. Valid units are
``ns``, ``us`` (or ``µs``), ``ms``, ``s``, ``m`` and ``h``. Resolution is
one microsecond: finer fractions are truncated.
"""

from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal

from .errors import ConversionError

_UNITS_NS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # micro sign
    "μs": 1_000,  # greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_COMPONENT = re.compile(r"([0-9]*)(?:\.([0-9]*))?(ns|us|µs|μs|ms|s|m|h)")

_US_PER_MS = 1_000
_US_PER_SECOND = 1_000_000
_US_PER_MINUTE = 60 * _US_PER_SECOND
_US_PER_HOUR = 60 * _US_PER_MINUTE


def parse_duration(text: str) -> timedelta:
    """Parse a duration string such as ``"1h2m3.5s"``."""
    original = text
    if not text:
        raise ConversionError(f"invalid duration {original!r}", value=original)

    negative = False
    if text[0] in "+-":
        negative = text[0] == "-"
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise ConversionError(f"invalid duration {original!r}", value=original)

    total_ns = Decimal(0)
    pos = 0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        if match is None:
            raise ConversionError(f"invalid duration {original!r}", value=original)
        whole, frac, unit = match.group(1), match.group(2), match.group(3)
        if not whole and not frac:
            raise ConversionError(f"invalid duration {original!r}", value=original)
        number = Decimal(f"{whole or '0'}.{frac or '0'}")
        total_ns += number * _UNITS_NS[unit]
        pos = match.end()

    microseconds = int(total_ns / 1000)
    if negative:
        microseconds = -microseconds
    try:
        return timedelta(microseconds=microseconds)
    except OverflowError as exc:
        raise ConversionError(f"duration out of range {original!r}", value=original) from exc


def format_duration(value: timedelta) -> str:
    """Format ``value`` the way Go's ``time.Duration.String`` does."""
    total = (value.days * 86400 + value.seconds) * _US_PER_SECOND + value.microseconds
    if total == 0:
        return "0s"

    sign = "-" if total < 0 else ""
    total = abs(total)

    if total < _US_PER_MS:
        return f"{sign}{total}µs"
    if total < _US_PER_SECOND:
        return f"{sign}{_decimal(total, _US_PER_MS)}ms"

    hours, rest = divmod(total, _US_PER_HOUR)
    minutes, rest = divmod(rest, _US_PER_MINUTE)
    seconds = _decimal(rest, _US_PER_SECOND)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def _decimal(value: int, scale: int) -> str:
    whole, frac = divmod(value, scale)
    if not frac:
        return str(whole)
    width = len(str(scale)) - 1
    return f"{whole}.{str(frac).rjust(width, '0').rstrip('0')}"


__all__ = ["format_duration", "parse_duration"]
