"""Populate dataclasses from environment variables or another source."""

from __future__ import annotations

import dataclasses
import functools
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from .conversions import ConversionEntry, ConversionTable, default_table
from .errors import ConversionError, NotAPointerToStruct, UnsupportedType
from .fields import FieldDescriptor, FieldKind, TypeInfo, describe, is_record
from .naming import derive_name
from .sources import as_source

logger = logging.getLogger("envbind.bind")


class Binder:
    """Walks a dataclass and assigns values found in a source.

    Unset and empty variables leave their field untouched. Nested
    dataclasses are always walked, so they can be partially populated.
    Fields are processed in declaration order and the first error aborts
    the walk; fields assigned before it keep their new values. Frozen
    nested dataclasses are replaced rather than modified.
    """

    def __init__(
        self,
        source: Any = None,
        *,
        name_func: Callable[[str], str] = derive_name,
        table: ConversionTable = default_table,
    ) -> None:
        self.source = as_source(source)
        self.name_func = name_func
        self.table = table
        # record types on the current descent path
        self._walking: List[type] = []

    def bind(self, record: Any) -> bool:
        """Populate ``record``. Return True if any field was assigned."""
        _check_mutable(record)
        return self._walk(record, functools.partial(setattr, record))

    def _walk(self, record: Any, assign: Callable[[str, Any], None]) -> bool:
        cls = type(record)
        self._walking.append(cls)
        try:
            changed = False
            for fd in describe(cls, self.table):
                if not fd.visible:
                    continue
                key = fd.key(self.name_func)
                info = fd.info
                target = info.inner if info.kind is FieldKind.OPTIONAL else info

                if target.kind is FieldKind.RECORD:
                    changed = self._descend(record, fd, target, assign) or changed
                    continue

                text, present = self.source.lookup(key)
                if not present or text == "":
                    continue

                if target.kind is FieldKind.SCALAR:
                    value = self._parse(target.entry, text, key)
                elif target.kind is FieldKind.SEQUENCE:
                    value = self._split(target, text, key)
                else:
                    raise UnsupportedType(info.type_name, key)

                assign(fd.name, value)
                changed = True
                logger.debug(f"Bound {key} to {cls.__qualname__}.{fd.name}")
            return changed
        finally:
            self._walking.pop()

    def _descend(
        self,
        record: Any,
        fd: FieldDescriptor,
        target: TypeInfo,
        assign: Callable[[str, Any], None],
    ) -> bool:
        current = getattr(record, fd.name)
        if is_record(current):
            value, changed = self._rebind(current)
            if value is not current:
                assign(fd.name, value)
            return changed
        if current is not None:
            return False

        # a record type already being walked would be allocated forever
        if target.annotation in self._walking:
            return False
        fresh = _construct(target.annotation)
        if fresh is None:
            logger.debug(f"Not binding {fd.name}: {target.type_name} has fields without defaults")
            return False
        value, changed = self._rebind(fresh)
        if changed:
            assign(fd.name, value)
        return changed

    def _rebind(self, current: Any) -> Tuple[Any, bool]:
        """Bind nested record ``current``; return the value to store and whether it changed.

        Frozen records are rebuilt with ``dataclasses.replace`` once all
        their fields have been read.
        """
        if not _is_frozen(current):
            return current, self._walk(current, functools.partial(setattr, current))
        updates: Dict[str, Any] = {}
        self._walk(current, updates.__setitem__)
        if not updates:
            return current, False
        return dataclasses.replace(current, **updates), True

    def _split(self, info: TypeInfo, text: str, key: str) -> Any:
        element = info.inner
        optional = element.kind is FieldKind.OPTIONAL
        entry = element.inner.entry if optional else element.entry
        items = []
        for item in text.split(","):
            if optional and item == "":
                items.append(None)
            else:
                items.append(self._parse(entry, item, key))
        return info.container(items)

    @staticmethod
    def _parse(entry: ConversionEntry, text: str, key: str) -> Any:
        try:
            return entry.parse(text)
        except ConversionError as exc:
            raise ConversionError(str(exc), key=key, value=text) from exc


def _is_frozen(record: Any) -> bool:
    return record.__dataclass_params__.frozen


def _check_mutable(record: Any) -> None:
    if not is_record(record):
        raise NotAPointerToStruct(record)
    if _is_frozen(record):
        raise NotAPointerToStruct(
            record, f"cannot bind frozen dataclass {type(record).__qualname__} in place"
        )


def _construct(cls: type) -> Optional[Any]:
    """Return ``cls()`` if every init field of the dataclass has a default."""
    for fld in dataclasses.fields(cls):
        if not fld.init:
            continue
        if fld.default is dataclasses.MISSING and fld.default_factory is dataclasses.MISSING:
            return None
    return cls()


def bind(
    record: Any,
    source: Any = None,
    *,
    name_func: Callable[[str], str] = derive_name,
    table: ConversionTable = default_table,
) -> Any:
    """Populate dataclass instance ``record`` in place and return it.

    Args:
        record: mutable dataclass instance
        source: where to read values from. Defaults to the process
            environment; also accepts any object with a ``lookup`` method,
            a plain mapping or an ``argparse.Namespace``.
        name_func: replaces :func:`derive_name` for untagged fields
        table: conversion table to use

    Raises:
        NotAPointerToStruct: ``record`` is not a mutable dataclass instance
        UnsupportedType: a variable is set for a field that cannot be converted
        ConversionError: a value could not be parsed
    """
    binder = Binder(source, name_func=name_func, table=table)
    binder.bind(record)
    logger.debug(f"Bound {type(record).__qualname__} from {binder.source!r}")
    return record


__all__ = ["Binder", "bind"]
