from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

import pytest


@pytest.fixture
def config_env(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    def apply(**env: Any) -> None:
        for key, value in env.items():
            if value is None:
                monkeypatch.delenv(key, raising=False)
            else:
                monkeypatch.setenv(key, str(value))

    return apply


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Unset variables so tests don't depend on the developer's environment."""

    def apply(*keys: str) -> None:
        for key in keys:
            monkeypatch.delenv(key, raising=False)

    return apply


@pytest.fixture
def reset_structlog() -> Iterable[None]:
    import structlog

    structlog.reset_defaults()
    envbind_logger = logging.getLogger("envbind")
    handlers = envbind_logger.handlers[:]
    level = envbind_logger.level
    propagate = envbind_logger.propagate
    yield
    structlog.reset_defaults()
    for handler in envbind_logger.handlers[:]:
        envbind_logger.removeHandler(handler)
    for handler in handlers:
        envbind_logger.addHandler(handler)
    envbind_logger.setLevel(level)
    envbind_logger.propagate = propagate
