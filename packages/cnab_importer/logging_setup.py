"""Package logging for ``cnab_importer``.

Every module logs through ``get_logger("cnab_importer.<module>")`` and never
adds handlers of its own. Until a process entrypoint calls
:func:`configure_logging` the package logger only carries a ``NullHandler``,
so hosts that embed the importer (a web worker, a test run) see nothing unless
they wire up logging themselves.

The CLI calls :func:`configure_logging` once per process. The threshold comes
from ``--log-level`` or, failing that, from ``CNAB_IMPORTER_LOG_LEVEL``.
"""

from __future__ import annotations

import logging
import os
import sys

PACKAGE_LOGGER = "cnab_importer"
LOG_LEVEL_ENV = "CNAB_IMPORTER_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_CONFIGURED = False


def resolve_log_level(level: str | None = None) -> int:
    """Turn ``level`` (or ``CNAB_IMPORTER_LOG_LEVEL``) into a logging level.

    Accepts level names in any case and numeric strings; anything else means
    INFO.
    """

    name = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").strip().upper()
    if name.isdigit():
        return int(name)
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def configure_logging(level: str | None = None) -> None:
    """Send ``cnab_importer`` records to stderr. Later calls are no-ops."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    for h in list(pkg_logger.handlers):
        if isinstance(h, logging.NullHandler):
            pkg_logger.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(resolve_log_level(level))
    # Records stop here; the root logger would print them a second time.
    pkg_logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "resolve_log_level"]
