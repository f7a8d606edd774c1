"""Installed versions of envbind and the libraries it loads files with."""

import importlib.metadata
from typing import Dict

# distribution name -> key reported by get_version_info()
DEPENDENCIES = {
    "structlog": "structlog",
    "python-dotenv": "python-dotenv",
    "PyYAML": "pyyaml",
}


def get_envbind_version() -> str:
    try:
        return importlib.metadata.version("envbind")
    except importlib.metadata.PackageNotFoundError:
        # running from a source checkout
        return "0.1.0-dev"


def get_dependency_version(distribution: str) -> str:
    try:
        return importlib.metadata.version(distribution)
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def get_version_info() -> Dict[str, str]:
    """Return ``{"envbind": ..., "structlog": ..., ...}``."""
    info = {"envbind": get_envbind_version()}
    for distribution, key in DEPENDENCIES.items():
        info[key] = get_dependency_version(distribution)
    return info
