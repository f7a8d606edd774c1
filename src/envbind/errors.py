"""Exceptions raised by envbind."""

from __future__ import annotations

from typing import Any


class EnvbindError(Exception):
    """Base class for all envbind errors."""


class NotAStruct(EnvbindError, TypeError):
    """Raised when dump() is given something other than a dataclass instance."""

    def __init__(self, value: Any) -> None:
        super().__init__(f"need dataclass instance, not {type(value).__name__}: {value!r}")
        self.value = value


class NotAPointerToStruct(EnvbindError, TypeError):
    """Raised when bind() is given something it cannot populate in place."""

    def __init__(self, value: Any, reason: str | None = None) -> None:
        message = reason or f"need mutable dataclass instance, not {type(value).__name__}"
        super().__init__(message)
        self.value = value


class UnsupportedType(EnvbindError, TypeError):
    """Raised when bind() meets a field type it has no way to convert."""

    def __init__(self, type_name: str, key: str | None = None) -> None:
        message = f"unsupported type: {type_name}"
        if key:
            message = f"{message} (variable {key})"
        super().__init__(message)
        self.type_name = type_name
        self.key = key


class ConversionError(EnvbindError, ValueError):
    """Raised when a string cannot be parsed into a field's type."""

    def __init__(self, message: str, *, key: str | None = None, value: str | None = None) -> None:
        if key:
            message = f"{key}: {message}"
        super().__init__(message)
        self.key = key
        self.value = value


__all__ = [
    "ConversionError",
    "EnvbindError",
    "NotAPointerToStruct",
    "NotAStruct",
    "UnsupportedType",
]
