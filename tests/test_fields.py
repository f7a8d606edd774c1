from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import pytest

from envbind import UnsupportedType, bind, dump
from envbind.conversions import ConversionTable
from envbind.fields import FieldKind, describe


@dataclass
class Server:
    host: str = ""
    port: int = 0
    tags: List[str] = field(default_factory=list)
    backup: Optional[Server] = None


def test_describe_resolves_string_annotations():
    kinds = {fd.name: fd.info.kind for fd in describe(Server, ConversionTable.with_defaults())}
    assert kinds == {
        "host": FieldKind.SCALAR,
        "port": FieldKind.SCALAR,
        "tags": FieldKind.SEQUENCE,
        "backup": FieldKind.OPTIONAL,
    }


def test_local_nested_type_only_affects_its_own_field():
    @dataclass
    class Inner:
        host: str = ""

    @dataclass
    class Outer:
        name: str = ""
        port: int = 0
        inner: Inner = field(default_factory=Inner)

    table = ConversionTable.with_defaults()
    kinds = {fd.name: fd.info.kind for fd in describe(Outer, table)}
    assert kinds["name"] is FieldKind.SCALAR
    assert kinds["port"] is FieldKind.SCALAR
    # "Inner" only exists inside this function
    assert kinds["inner"] is FieldKind.UNSUPPORTED

    assert dump(Outer(name="x"), table=table) == {"NAME": "x", "PORT": "0"}

    record = bind(Outer(), {"NAME": "y", "PORT": "8", "HOST": "ignored"}, table=table)
    assert (record.name, record.port, record.inner) == ("y", 8, Inner())

    with pytest.raises(UnsupportedType):
        bind(Outer(), {"INNER": "x"}, table=table)


def test_describe_caches_per_table():
    table = ConversionTable.with_defaults()
    assert describe(Server, table) is describe(Server, table)
    table.register(bytes, bytes.fromhex, bytes.hex)
    assert Server not in table.descriptors
