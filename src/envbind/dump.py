"""Serialize dataclasses to flat ``{VARIABLE: text}`` mappings."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, MutableMapping, Optional

from dotenv import set_key

from .conversions import ConversionTable, default_table
from .errors import NotAStruct
from .fields import FieldKind, TypeInfo, describe, is_record, is_zero
from .naming import derive_name
from .sources import write_environ

logger = logging.getLogger("envbind.dump")


class Dumper:
    """Walks a dataclass and formats its fields.

    Nested dataclasses without a conversion of their own are flattened
    into the same mapping, so their variables carry no prefix. When two
    fields map to the same variable, the one visited later wins.
    """

    def __init__(
        self,
        *,
        ignore_zero_values: bool = False,
        name_func: Callable[[str], str] = derive_name,
        table: ConversionTable = default_table,
    ) -> None:
        self.ignore_zero_values = ignore_zero_values
        self.name_func = name_func
        self.table = table

    def dump(self, record: Any) -> Dict[str, str]:
        if not is_record(record):
            raise NotAStruct(record)

        values: Dict[str, str] = {}
        for fd in describe(type(record), self.table):
            if not fd.visible:
                continue

            value = getattr(record, fd.name)
            info = fd.info
            if self.ignore_zero_values and is_zero(value, info, self.table):
                continue

            key = fd.key(self.name_func)
            if info.kind is FieldKind.UNSUPPORTED:
                logger.debug(f"Omitting {fd.name}: unsupported type {info.type_name}")
                continue
            if value is None:
                values[key] = ""
                continue

            if info.kind is FieldKind.OPTIONAL:
                info = info.inner

            if info.kind is FieldKind.SCALAR:
                values[key] = info.entry.format(value)
            elif info.kind is FieldKind.SEQUENCE:
                values[key] = self._join(value, info.inner)
            elif info.kind is FieldKind.RECORD and is_record(value):
                values.update(self.dump(value))

        return values

    @staticmethod
    def _join(items: Any, element: TypeInfo) -> str:
        if element.kind is FieldKind.OPTIONAL:
            element = element.inner
        return ",".join("" if item is None else element.entry.format(item) for item in items)


def dump(
    record: Any,
    *,
    ignore_zero_values: bool = False,
    name_func: Callable[[str], str] = derive_name,
    table: ConversionTable = default_table,
) -> Dict[str, str]:
    """Return the fields of dataclass instance ``record`` as variables.

    Args:
        record: dataclass instance to serialize
        ignore_zero_values: leave out fields holding their type's zero value
            (None, 0, "", False, empty sequences, all-zero dataclasses, ...)
        name_func: replaces :func:`derive_name` for untagged fields
        table: conversion table to use

    Raises:
        NotAStruct: ``record`` is not a dataclass instance
    """
    dumper = Dumper(ignore_zero_values=ignore_zero_values, name_func=name_func, table=table)
    values = dumper.dump(record)
    logger.debug(f"Dumped {len(values)} variables from {type(record).__qualname__}")
    return values


def export(
    record: Any,
    *,
    environ: Optional[MutableMapping[str, str]] = None,
    **options: Any,
) -> Dict[str, str]:
    """Dump ``record`` and write the variables to the environment.

    ``environ`` defaults to ``os.environ``. Accepts the same options as
    :func:`dump` and returns the exported variables.
    """
    values = dump(record, **options)
    write_environ(values, environ)
    logger.debug(f"Exported {len(values)} variables from {type(record).__qualname__}")
    return values


def dump_dotenv(record: Any, path: Path | str, **options: Any) -> Dict[str, str]:
    """Dump ``record`` into the ``.env`` file at ``path``.

    Existing keys in the file are updated in place, others are appended.
    """
    values = dump(record, **options)
    target = Path(path)
    target.touch(exist_ok=True)
    for key, value in values.items():
        set_key(str(target), key, value, quote_mode="always")
    logger.debug(f"Wrote {len(values)} variables to {target}")
    return values


__all__ = ["Dumper", "dump", "dump_dotenv", "export"]
