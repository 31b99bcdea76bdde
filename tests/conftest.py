"""Pytest configuration for test isolation.

Every test gets a clean environment: no inherited ``DATABASE_URL`` or
``CNAB_IMPORTER_*`` settings, no cached engines pointing at a previous test's
SQLite file, and package logging restored to its unconfigured state (the CLI
configures it once per process, which would otherwise disable propagation for
``caplog`` in later tests).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from cnab_importer import logging_setup
from db.client import dispose_engines


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (
        "DATABASE_URL",
        "CNAB_IMPORTER_LOG_LEVEL",
        "CNAB_IMPORTER_WRITE_CHUNK_SIZE",
        "CNAB_IMPORTER_ENCODING",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def _reset_engines_and_logging() -> Iterator[None]:
    yield
    dispose_engines()
    pkg_logger = logging.getLogger("cnab_importer")
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
    pkg_logger.propagate = True
    pkg_logger.setLevel(logging.NOTSET)
    logging_setup._CONFIGURED = False
