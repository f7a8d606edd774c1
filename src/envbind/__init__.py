"""Bind environment variables to dataclasses, and dump dataclasses back.

    @dataclass
    class Options:
        host_name: str = var("HOSTNAME", default="localhost")  # not HOST_NAME
        port: int = 8080                                       # PORT
        ping_interval: timedelta = timedelta(minutes=1)       # PING_INTERVAL
        online: bool = var("-", default=False)                # ignored

    options = bind(Options())
    variables = dump(options)

envbind logs through stdlib loggers under ``envbind`` and stays silent
until an application calls :func:`configure_logging`, which reads its
level and format from ``ENVBIND_LOG_LEVEL`` and ``ENVBIND_LOG_FORMAT``
(see :func:`load_settings`).
"""

from .bind import Binder, bind
from .conversions import (
    ConversionEntry,
    ConversionTable,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    TextCodec,
    Uint,
    Uint8,
    Uint16,
    Uint32,
    Uint64,
    default_table,
)
from .dump import Dumper, dump, dump_dotenv, export
from .errors import ConversionError, EnvbindError, NotAPointerToStruct, NotAStruct, UnsupportedType
from .fields import var
from .log import configure_logging
from .naming import derive_name
from .settings import Settings, SettingsError, load_settings
from .sources import (
    ChainSource,
    DotenvSource,
    EnvironSource,
    MappingSource,
    NamespaceSource,
    Source,
    SourceError,
    YamlSource,
)
from .version import get_envbind_version

__version__ = get_envbind_version()

__all__ = [
    "Binder",
    "ChainSource",
    "ConversionEntry",
    "ConversionError",
    "ConversionTable",
    "DotenvSource",
    "Dumper",
    "EnvbindError",
    "EnvironSource",
    "Float32",
    "Float64",
    "Int16",
    "Int32",
    "Int64",
    "Int8",
    "MappingSource",
    "NamespaceSource",
    "NotAPointerToStruct",
    "NotAStruct",
    "Settings",
    "SettingsError",
    "Source",
    "SourceError",
    "TextCodec",
    "Uint",
    "Uint16",
    "Uint32",
    "Uint64",
    "Uint8",
    "UnsupportedType",
    "YamlSource",
    "bind",
    "configure_logging",
    "default_table",
    "derive_name",
    "dump",
    "dump_dotenv",
    "export",
    "load_settings",
    "var",
]
