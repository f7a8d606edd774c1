"""Conversion between strings and field values.

A :class:`ConversionTable` maps a field type to a :class:`ConversionEntry`
holding a parser and a formatter. Lookup happens in two tiers:

1. types registered explicitly (URLs, durations, datetimes, anything the
   caller registers) and :class:`TextCodec` subclasses;
2. the generic kind of the type: ``bool``, ``str``, ``int`` and ``float``,
   including the sized markers (:class:`Int8`, :class:`Uint16`,
   :class:`Float32`, ...) and subclasses such as ``IntEnum``.

The first tier always wins, so a ``TextCodec`` that is also a dataclass is
converted with its codec and never walked field by field.
"""

from __future__ import annotations

import math
import re
import struct
import types
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, Optional
from urllib.parse import ParseResult, SplitResult, urlparse, urlsplit

from .durations import format_duration, parse_duration
from .errors import ConversionError

Parser = Callable[[str], Any]
Formatter = Callable[[Any], str]
ZeroCheck = Callable[[Any], bool]


def _never_zero(_: Any) -> bool:
    return False


@dataclass(frozen=True)
class ConversionEntry:
    """Parser/formatter pair for one type."""

    parse: Parser
    format: Formatter
    is_zero: ZeroCheck = _never_zero


class TextCodec(ABC):
    """Capability for types that convert themselves to and from text.

    Subclass it and implement both methods; envbind then uses them in
    preference to any other conversion, including walking a dataclass.
    Exceptions raised by either method reach the caller unchanged.
    """

    @abstractmethod
    def marshal_text(self) -> str:
        """Return the textual form of this value."""

    @classmethod
    @abstractmethod
    def unmarshal_text(cls, text: str) -> Any:
        """Build a value from its textual form."""


# ----------------------------------------------------------------------
# Sized numeric markers
# ----------------------------------------------------------------------
class SizedInt(int):
    """Base for integer types with a fixed width."""

    bits: int = 64
    signed: bool = True


class Int8(SizedInt):
    bits = 8


class Int16(SizedInt):
    bits = 16


class Int32(SizedInt):
    bits = 32


class Int64(SizedInt):
    bits = 64


class Uint(SizedInt):
    bits = 64
    signed = False


class Uint8(SizedInt):
    bits = 8
    signed = False


class Uint16(SizedInt):
    bits = 16
    signed = False


class Uint32(SizedInt):
    bits = 32
    signed = False


class Uint64(SizedInt):
    bits = 64
    signed = False


class Float32(float):
    """Single-precision float marker."""


class Float64(float):
    """Double-precision float marker (same as ``float``)."""


# ----------------------------------------------------------------------
# Scalar parsers and formatters
# ----------------------------------------------------------------------
_BOOLS = {
    "1": True,
    "t": True,
    "T": True,
    "true": True,
    "True": True,
    "TRUE": True,
    "0": False,
    "f": False,
    "F": False,
    "false": False,
    "False": False,
    "FALSE": False,
}

_DECIMAL_INT = re.compile(r"[+-]?[0-9]+")


def parse_bool(text: str) -> bool:
    try:
        return _BOOLS[text]
    except KeyError:
        raise ConversionError(f"invalid boolean {text!r}", value=text) from None


def format_bool(value: Any) -> str:
    return "true" if value else "false"


def parse_float(text: str) -> float:
    if text != text.strip() or "_" in text:
        raise ConversionError(f"invalid number {text!r}", value=text)
    try:
        return float(text)
    except ValueError:
        raise ConversionError(f"invalid number {text!r}", value=text) from None


def parse_int(text: str, *, bits: int | None = None, signed: bool = True) -> int:
    """Parse a decimal integer, falling back to a truncated float.

    ``"3.5"`` parses as ``3``. ``bits`` bounds the result to a fixed width
    and ``signed=False`` rejects negative values.
    """
    if _DECIMAL_INT.fullmatch(text):
        try:
            number = int(text)
        except ValueError as exc:
            # longer than sys.get_int_max_str_digits()
            raise ConversionError(f"invalid integer: {exc}", value=text) from exc
    else:
        try:
            real = parse_float(text)
        except ConversionError:
            raise ConversionError(f"invalid integer {text!r}", value=text) from None
        if not math.isfinite(real):
            raise ConversionError(f"invalid integer {text!r}", value=text)
        if not signed and real < 0:
            raise ConversionError(f"less than zero: {text!r}", value=text)
        number = int(real)

    if not signed and number < 0:
        raise ConversionError(f"less than zero: {text!r}", value=text)
    if bits is not None:
        if signed:
            low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        else:
            low, high = 0, (1 << bits) - 1
        if not low <= number <= high:
            raise ConversionError(f"value {text!r} out of range for {bits}-bit integer", value=text)
    return number


def _round32(value: float) -> float:
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def parse_float32(text: str) -> float:
    value = parse_float(text)
    rounded = _round32(value)
    if math.isinf(rounded) and not math.isinf(value):
        raise ConversionError(f"value {text!r} out of range for 32-bit float", value=text)
    return rounded


def format_float(value: Any, bits: int = 64) -> str:
    """Format ``value`` as the shortest decimal that parses back to it."""
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if bits == 32:
        value = _round32(value)
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"

    if bits == 32:
        text = repr(value)
        for precision in range(1, 10):
            candidate = f"{value:.{precision}g}"
            if _round32(float(candidate)) == value:
                text = candidate
                break
    else:
        text = repr(value)

    positional = format(Decimal(text), "f")
    if "." in positional:
        positional = positional.rstrip("0").rstrip(".")
    return positional


def _float_is_zero(value: Any) -> bool:
    return value == 0 and math.copysign(1.0, value) > 0


def _parse_url(text: str) -> ParseResult:
    try:
        return urlparse(text)
    except ValueError as exc:
        raise ConversionError(f"invalid URL {text!r}: {exc}", value=text) from exc


def _parse_split_url(text: str) -> SplitResult:
    try:
        return urlsplit(text)
    except ValueError as exc:
        raise ConversionError(f"invalid URL {text!r}: {exc}", value=text) from exc


def _parse_datetime(text: str) -> datetime:
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise ConversionError(f"invalid timestamp {text!r}", value=text) from exc


def _marshal(value: TextCodec) -> str:
    data = value.marshal_text()
    if isinstance(data, bytes):
        return data.decode("utf-8")
    return data


# ----------------------------------------------------------------------
# Kind entries
# ----------------------------------------------------------------------
_BOOL_ENTRY = ConversionEntry(parse_bool, format_bool, lambda value: not value)


def _int_entry(tp: type) -> ConversionEntry:
    bits = getattr(tp, "bits", None) if issubclass(tp, SizedInt) else None
    signed = getattr(tp, "signed", True)

    def parse(text: str) -> Any:
        number = parse_int(text, bits=bits, signed=signed)
        if tp is int:
            return number
        try:
            return tp(number)
        except ValueError as exc:
            raise ConversionError(f"invalid {tp.__name__} {text!r}", value=text) from exc

    return ConversionEntry(parse, lambda value: str(int(value)), lambda value: value == 0)


def _float_entry(tp: type) -> ConversionEntry:
    bits = 32 if issubclass(tp, Float32) else 64
    base_parse = parse_float32 if bits == 32 else parse_float

    def parse(text: str) -> Any:
        number = base_parse(text)
        if tp is float:
            return number
        return tp(number)

    return ConversionEntry(parse, lambda value: format_float(value, bits), _float_is_zero)


def _str_entry(tp: type) -> ConversionEntry:
    def parse(text: str) -> Any:
        if tp is str:
            return text
        try:
            return tp(text)
        except ValueError as exc:
            raise ConversionError(f"invalid {tp.__name__} {text!r}", value=text) from exc

    return ConversionEntry(parse, str.__str__, lambda value: value == "")


def _kind_entry(tp: type) -> Optional[ConversionEntry]:
    if tp is bool:
        return _BOOL_ENTRY
    if issubclass(tp, int):
        return _int_entry(tp)
    if issubclass(tp, float):
        return _float_entry(tp)
    if issubclass(tp, str):
        return _str_entry(tp)
    return None


class ConversionTable:
    """Registry of conversions, keyed by exact type, with kind fallback."""

    def __init__(self) -> None:
        self._types: Dict[type, ConversionEntry] = {}
        # field descriptors per dataclass, filled by envbind.fields.describe
        self.descriptors: Dict[type, Any] = {}

    @classmethod
    def with_defaults(cls) -> "ConversionTable":
        table = cls()
        table.register(timedelta, parse_duration, format_duration, is_zero=lambda value: value == timedelta(0))
        table.register(ParseResult, _parse_url, lambda value: value.geturl(), is_zero=lambda value: value.geturl() == "")
        table.register(SplitResult, _parse_split_url, lambda value: value.geturl(), is_zero=lambda value: value.geturl() == "")
        table.register(datetime, _parse_datetime, lambda value: value.isoformat(), is_zero=lambda value: value == datetime.min)
        return table

    def register(
        self,
        tp: type,
        parse: Parser,
        format: Formatter,
        *,
        is_zero: ZeroCheck | None = None,
    ) -> None:
        """Register a conversion for exactly ``tp``, replacing any existing one."""
        self._types[tp] = ConversionEntry(parse, format, is_zero or _never_zero)
        self.descriptors.clear()

    def unregister(self, tp: type) -> None:
        self._types.pop(tp, None)
        self.descriptors.clear()

    def lookup(self, tp: Any) -> Optional[ConversionEntry]:
        """Return the conversion for ``tp``, or None if it has none."""
        # list[int] passes isinstance(..., type) on 3.10
        if not isinstance(tp, type) or isinstance(tp, types.GenericAlias):
            return None
        entry = self._types.get(tp)
        if entry is not None:
            return entry
        if issubclass(tp, TextCodec):
            return ConversionEntry(tp.unmarshal_text, _marshal)
        return _kind_entry(tp)

    def __contains__(self, tp: Any) -> bool:
        return self.lookup(tp) is not None


default_table = ConversionTable.with_defaults()


__all__ = [
    "ConversionEntry",
    "ConversionTable",
    "Float32",
    "Float64",
    "Int16",
    "Int32",
    "Int64",
    "Int8",
    "SizedInt",
    "TextCodec",
    "Uint",
    "Uint16",
    "Uint32",
    "Uint64",
    "Uint8",
    "default_table",
    "format_bool",
    "format_float",
    "parse_bool",
    "parse_float",
    "parse_float32",
    "parse_int",
]
