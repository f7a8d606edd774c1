"""Field descriptors for dataclasses.

Each dataclass is scanned once per conversion table; the result is cached
on the table and shared by ``bind`` and ``dump``.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import inspect
import logging
import sys
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

from .conversions import ConversionEntry, ConversionTable, default_table

logger = logging.getLogger("envbind.fields")

TAG = "env"
SKIP = "-"

_SEQUENCE_ORIGINS = (
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
)


class FieldKind(Enum):
    SCALAR = "scalar"
    OPTIONAL = "optional"
    SEQUENCE = "sequence"
    RECORD = "record"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class TypeInfo:
    """How values of one annotation are converted."""

    kind: FieldKind
    annotation: Any
    entry: Optional[ConversionEntry] = None
    # element type of a sequence, wrapped type of an optional
    inner: Optional["TypeInfo"] = None
    container: type = list

    @property
    def type_name(self) -> str:
        return type_name(self.annotation)


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    tag: Optional[str]
    info: TypeInfo

    @property
    def exported(self) -> bool:
        return not self.name.startswith("_")

    @property
    def skipped(self) -> bool:
        return self.tag == SKIP

    @property
    def visible(self) -> bool:
        return self.exported and not self.skipped

    def key(self, name_func: Callable[[str], str]) -> str:
        """Return the tag if set, otherwise ``name_func(name)``."""
        if self.tag:
            return self.tag
        return name_func(self.name)


def var(key: str, **kwargs: Any) -> Any:
    """Declare a dataclass field bound to variable ``key`` (``"-"`` to skip).

    Accepts the same keyword arguments as :func:`dataclasses.field`.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[TAG] = key
    return dataclasses.field(metadata=metadata, **kwargs)


def type_name(annotation: Any) -> str:
    if isinstance(annotation, type):
        return annotation.__qualname__
    return repr(annotation).replace("typing.", "")


def is_record(value: Any) -> bool:
    """Return True for dataclass instances (not dataclass types)."""
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def classify(annotation: Any, table: ConversionTable = default_table) -> TypeInfo:
    """Work out how ``annotation`` is converted."""
    entry = table.lookup(annotation)
    if entry is not None:
        return TypeInfo(FieldKind.SCALAR, annotation, entry=entry)

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is typing.Annotated:
        return classify(args[0], table)

    if origin is Union or origin is types.UnionType:
        members = [arg for arg in args if arg is not type(None)]
        if len(members) == 1 and len(members) < len(args):
            inner = classify(members[0], table)
            if inner.kind in (FieldKind.UNSUPPORTED, FieldKind.OPTIONAL):
                return TypeInfo(FieldKind.UNSUPPORTED, annotation)
            return TypeInfo(FieldKind.OPTIONAL, annotation, inner=inner)
        return TypeInfo(FieldKind.UNSUPPORTED, annotation)

    element, container = _sequence_element(origin, args)
    if element is not None:
        inner = classify(element, table)
        if inner.kind is FieldKind.SCALAR or (
            inner.kind is FieldKind.OPTIONAL and inner.inner.kind is FieldKind.SCALAR
        ):
            return TypeInfo(FieldKind.SEQUENCE, annotation, inner=inner, container=container)
        return TypeInfo(FieldKind.UNSUPPORTED, annotation)

    if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
        return TypeInfo(FieldKind.RECORD, annotation)

    return TypeInfo(FieldKind.UNSUPPORTED, annotation)


def _sequence_element(origin: Any, args: Tuple[Any, ...]) -> Tuple[Any, type]:
    if origin in _SEQUENCE_ORIGINS and len(args) == 1:
        return args[0], list
    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        return args[0], tuple
    return None, list


def describe(cls: type, table: ConversionTable = default_table) -> Tuple[FieldDescriptor, ...]:
    """Return the descriptors of every field of dataclass ``cls``, in order."""
    cached = table.descriptors.get(cls)
    if cached is not None:
        return cached

    hints = _resolve_hints(cls)
    descriptors = []
    for fld in dataclasses.fields(cls):
        annotation = hints.get(fld.name, fld.type)
        tag = fld.metadata.get(TAG) or None
        descriptors.append(FieldDescriptor(fld.name, tag, classify(annotation, table)))

    result = tuple(descriptors)
    table.descriptors[cls] = result
    logger.debug(f"Described {cls.__qualname__} ({len(result)} fields)")
    return result


def _resolve_hints(cls: type) -> Dict[str, Any]:
    """Return the evaluated annotations of ``cls``.

    If the class as a whole cannot be resolved (typically a string
    annotation naming a type local to a function), each field is evaluated
    on its own so only the unresolvable ones are left as strings.
    """
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as exc:
        logger.debug(f"Resolving {cls.__qualname__} field by field: {exc}")

    hints: Dict[str, Any] = {}
    for base in reversed(cls.__mro__):
        annotations = inspect.get_annotations(base)
        module = sys.modules.get(base.__module__)
        globalns = dict(vars(module)) if module is not None else {}
        localns = dict(vars(base))
        for name, annotation in annotations.items():
            if not isinstance(annotation, str):
                hints[name] = annotation
                continue
            try:
                hints[name] = eval(annotation, globalns, localns)
            except Exception as exc:
                logger.warning(f"Could not resolve {cls.__qualname__}.{name}: {annotation!r} ({exc})")
                hints[name] = annotation
    return hints


def is_zero(value: Any, info: TypeInfo, table: ConversionTable = default_table) -> bool:
    """Return True if ``value`` is the zero value of its declared type."""
    if value is None:
        return True
    if info.kind is FieldKind.SCALAR:
        return info.entry.is_zero(value)
    if info.kind is FieldKind.OPTIONAL:
        return False
    if info.kind is FieldKind.SEQUENCE:
        return len(value) == 0
    if info.kind is FieldKind.RECORD and is_record(value):
        return all(
            is_zero(getattr(value, fd.name), fd.info, table)
            for fd in describe(type(value), table)
        )
    return not value


__all__ = [
    "FieldDescriptor",
    "FieldKind",
    "SKIP",
    "TAG",
    "TypeInfo",
    "classify",
    "describe",
    "is_record",
    "is_zero",
    "type_name",
    "var",
]
