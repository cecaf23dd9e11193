from __future__ import annotations

import logging
from pathlib import Path

import pytest

from livequery.sources.memory import InMemoryConnection
from livequery_validation.stubs import CallbackLog, build_connection, build_user


@pytest.fixture(scope="session")
def repo_root() -> Path:
    return Path(__file__).resolve().parent.parent


@pytest.fixture(scope="session")
def demo_dir(repo_root: Path) -> Path:
    return repo_root / "data" / "demo"


@pytest.fixture()
def connection() -> InMemoryConnection:
    return build_connection(
        build_user(1, isActive=True),
        build_user(2, isActive=False),
        build_user(3, isActive=True, role="admin"),
    )


@pytest.fixture()
def log() -> CallbackLog:
    return CallbackLog()


@pytest.fixture(autouse=True)
def no_trace_from_env(monkeypatch: pytest.MonkeyPatch):
    # A developer's .env must not change what views record during tests.
    from livequery.config import settings

    monkeypatch.setattr(settings, "LIVEQUERY_TRACE_VIEWS", False)


@pytest.fixture(autouse=True)
def reset_package_logger():
    # CLI tests attach a handler bound to CliRunner's (later closed) stderr.
    yield
    logger = logging.getLogger("livequery")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
