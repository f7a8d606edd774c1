"""Key/value sources that ``bind`` reads from.

A source is anything with a ``lookup(key)`` method returning a
``(value, present)`` pair. ``present`` is False for unset keys; a key can
be present with an empty value, which ``bind`` also treats as unset.
"""

from __future__ import annotations

import argparse
import logging
import os
from datetime import date
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional, Protocol, Tuple, runtime_checkable

import yaml
from dotenv import dotenv_values

from .errors import EnvbindError

logger = logging.getLogger("envbind.sources")


class SourceError(EnvbindError):
    """Raised when a source file cannot be read or has the wrong shape."""


@runtime_checkable
class Source(Protocol):
    def lookup(self, key: str) -> Tuple[str, bool]:
        ...


class EnvironSource:
    """Reads the process environment on every lookup."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self._environ = environ

    def lookup(self, key: str) -> Tuple[str, bool]:
        environ = os.environ if self._environ is None else self._environ
        value = environ.get(key)
        if value is None:
            return "", False
        return value, True

    def __repr__(self) -> str:
        return "EnvironSource()"


class MappingSource:
    """In-memory source. Keys mapped to None count as unset."""

    def __init__(self, data: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        self._data: dict[str, str] = {}
        for key, value in {**(data or {}), **kwargs}.items():
            if value is not None:
                self._data[str(key)] = stringify(value)

    def lookup(self, key: str) -> Tuple[str, bool]:
        if key in self._data:
            return self._data[key], True
        return "", False

    def as_dict(self) -> dict[str, str]:
        return dict(self._data)

    def __repr__(self) -> str:
        return f"MappingSource({len(self._data)} keys)"


class DotenvSource(MappingSource):
    """Values from a ``.env`` file, parsed with python-dotenv.

    Keys declared without a value (a bare ``KEY`` line) count as unset.
    """

    def __init__(self, path: Path | str, *, interpolate: bool = True, encoding: str = "utf-8") -> None:
        self.path = Path(path)
        if not self.path.is_file():
            raise FileNotFoundError(self.path)
        values = dotenv_values(dotenv_path=self.path, interpolate=interpolate, encoding=encoding)
        super().__init__(values)
        logger.debug(f"Loaded {len(self.as_dict())} variables from {self.path}")

    def __repr__(self) -> str:
        return f"DotenvSource({str(self.path)!r})"


class YamlSource(MappingSource):
    """Values from a flat YAML mapping.

    Scalars are converted to the text ``bind`` expects: booleans become
    ``true``/``false``, dates use ISO format and lists are joined with
    commas. Nested mappings are rejected.
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None, *, origin: str = "<mapping>") -> None:
        self.origin = origin
        data = data or {}
        for key, value in data.items():
            if isinstance(value, Mapping):
                raise SourceError(f"{origin}: value for {key!r} must be a scalar or a list, not a mapping")
        super().__init__(data)

    @classmethod
    def from_text(cls, text: str, *, origin: str = "<string>") -> "YamlSource":
        try:
            raw = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise SourceError(f"Failed to parse {origin}: {exc}") from exc
        if not isinstance(raw, Mapping):
            raise SourceError(f"{origin}: root must be a mapping")
        return cls(raw, origin=origin)

    @classmethod
    def from_file(cls, path: Path | str) -> "YamlSource":
        candidate = Path(path)
        if not candidate.exists():
            raise FileNotFoundError(candidate)
        if not candidate.is_file():
            raise SourceError(f"Path {candidate} is not a file")
        source = cls.from_text(candidate.read_text(encoding="utf-8"), origin=str(candidate))
        logger.debug(f"Loaded {len(source.as_dict())} variables from {candidate}")
        return source

    def __repr__(self) -> str:
        return f"YamlSource({self.origin!r})"


class NamespaceSource:
    """Reads attributes of an ``argparse.Namespace``.

    Variable names are translated to attribute names by lower-casing, so
    ``CACHE_PATH`` reads ``namespace.cache_path`` (i.e. ``--cache-path``).
    Attributes that are missing or None count as unset.
    """

    def __init__(self, namespace: argparse.Namespace) -> None:
        self._namespace = namespace

    def lookup(self, key: str) -> Tuple[str, bool]:
        value = getattr(self._namespace, key.lower(), None)
        if value is None:
            return "", False
        return stringify(value), True

    def __repr__(self) -> str:
        return f"NamespaceSource({self._namespace!r})"


class ChainSource:
    """Tries several sources in turn; the first one that has a key wins."""

    def __init__(self, *sources: Any) -> None:
        self.sources = [as_source(source) for source in sources]

    def lookup(self, key: str) -> Tuple[str, bool]:
        for source in self.sources:
            value, present = source.lookup(key)
            if present:
                return value, True
        return "", False

    def __repr__(self) -> str:
        return f"ChainSource({', '.join(repr(source) for source in self.sources)})"


def stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else stringify(item) for item in value)
    return str(value)


def as_source(source: Any) -> Any:
    """Coerce ``source`` into an object with a ``lookup`` method.

    None means the process environment; mappings and argparse namespaces
    are wrapped.
    """
    if source is None:
        return EnvironSource()
    if isinstance(source, argparse.Namespace):
        return NamespaceSource(source)
    if isinstance(source, Source):
        return source
    if isinstance(source, Mapping):
        return MappingSource(source)
    raise TypeError(f"not a key/value source: {type(source).__name__}")


def write_environ(values: Mapping[str, str], environ: Optional[MutableMapping[str, str]] = None) -> None:
    target = os.environ if environ is None else environ
    for key, value in values.items():
        target[key] = value


__all__ = [
    "ChainSource",
    "DotenvSource",
    "EnvironSource",
    "MappingSource",
    "NamespaceSource",
    "Source",
    "SourceError",
    "YamlSource",
    "as_source",
    "stringify",
]
