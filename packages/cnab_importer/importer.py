"""Import orchestration: file checks → decode → atomic write → audit.

:func:`import_transactions` is the single entry point used by hosts (CLI,
HTTP handlers). It walks a small state machine::

    IDLE → VALIDATING_FILE → DECODING → WRITING → COMMITTED
                 │               │          │
                 └───────────────┴──────────┴──→ ABORTED

and always returns an :class:`~cnab_importer.models.ImportOutcome`. Malformed
input and storage failures are reported in ``outcome.errors``; they never
escape as exceptions.
"""

from __future__ import annotations

import datetime as dt
import os
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import IO, Self

from db.client import get_session, session_scope
from db.models.cnab import CnabTransaction

from .audit import record_upload
from .catalog import TypeCatalog, load_type_catalog
from .collector import collect_batch
from .logging_setup import get_logger
from .models import (
    CONTEXT_FINISH_READING,
    CONTEXT_LOADING_TYPES,
    CONTEXT_READING_FILE,
    CONTEXT_SAVING,
    CONTEXT_UPLOAD,
    ImportIssue,
    ImportOutcome,
    ImportState,
)
from .writer import BatchWriteError, write_batch

logger = get_logger("cnab_importer.importer")

# user_name is stamped into updated_by on every row.
MAX_USER_NAME_LENGTH: int = CnabTransaction.__table__.c.updated_by.type.length


@dataclass(frozen=True, slots=True)
class UploadedFile:
    """An uploaded CNAB file as handed over by the host.

    ``size`` is the declared length and is only used to reject empty uploads;
    ``name`` only appears in the audit message.
    """

    name: str
    size: int
    stream: IO[bytes] | IO[str]

    @classmethod
    def from_path(cls, path: str | PathLike[str]) -> UploadedFile:
        p = Path(path)
        return cls(name=p.name, size=p.stat().st_size, stream=p.open("rb"))

    def close(self) -> None:
        self.stream.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


_TRANSITIONS: dict[ImportState, frozenset[ImportState]] = {
    ImportState.IDLE: frozenset({ImportState.VALIDATING_FILE}),
    ImportState.VALIDATING_FILE: frozenset({ImportState.DECODING, ImportState.ABORTED}),
    ImportState.DECODING: frozenset({ImportState.WRITING, ImportState.ABORTED}),
    ImportState.WRITING: frozenset({ImportState.COMMITTED, ImportState.ABORTED}),
    ImportState.COMMITTED: frozenset(),
    ImportState.ABORTED: frozenset(),
}


class _ImportRun:
    """Mutable bookkeeping for one import call."""

    def __init__(self, file_name: str | None) -> None:
        self.file_name = file_name
        self.state = ImportState.IDLE
        self.errors: list[ImportIssue] = []
        self.total_lines = 0
        self.skipped_lines = 0

    def advance(self, new_state: ImportState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"illegal import transition {self.state} -> {new_state}")
        logger.debug("Import of %s: %s -> %s", self.file_name, self.state, new_state)
        self.state = new_state

    def abort(self, context: str, message: str, *, detail: str | None = None) -> ImportOutcome:
        self.errors.append(ImportIssue(context=context, message=message, detail=detail))
        self.advance(ImportState.ABORTED)
        logger.info("Import of %s aborted: %s", self.file_name, message)
        return self.outcome(success=False)

    def outcome(self, *, success: bool, records_written: int = 0) -> ImportOutcome:
        return ImportOutcome(
            success=success,
            state=self.state,
            records_written=records_written,
            total_lines=self.total_lines,
            skipped_lines=self.skipped_lines,
            errors=list(self.errors),
        )


def _load_catalog(database_url: str | None) -> TypeCatalog:
    with session_scope(database_url=database_url) as session:
        return load_type_catalog(session)


def import_transactions(
    upload: UploadedFile | None,
    *,
    user_id: int,
    user_name: str,
    database_url: str | None = None,
    chunk_size: int | None = None,
    encoding: str | None = None,
) -> ImportOutcome:
    """Import one CNAB file for ``user_id`` and report the outcome.

    Parameters
    ----------
    upload:
        The uploaded file; ``None`` or a zero declared size aborts with
        ``"File empty."``.
    user_id, user_name:
        Identity of the importing user, supplied by the host's auth layer.
        ``user_name`` is stamped into ``updated_by`` on every row; names longer
        than the column abort the import before anything is read.
    database_url:
        Override ``DATABASE_URL``.
    chunk_size:
        Rows per flush inside the single write transaction.
    encoding:
        Text encoding for binary streams (defaults to
        ``CNAB_IMPORTER_ENCODING`` or UTF-8).
    """

    run = _ImportRun(upload.name if upload is not None else None)
    run.advance(ImportState.VALIDATING_FILE)

    if upload is None or upload.size <= 0:
        return run.abort(CONTEXT_UPLOAD, "File empty.")
    if len(user_name) > MAX_USER_NAME_LENGTH:
        return run.abort(
            CONTEXT_UPLOAD,
            f"User name longer than {MAX_USER_NAME_LENGTH} characters.",
        )

    try:
        catalog = _load_catalog(database_url)
    except Exception as exc:
        logger.exception("Could not load the transaction type catalog")
        return run.abort(
            CONTEXT_LOADING_TYPES,
            "Error loading transaction types.",
            detail=f"{type(exc).__name__}: {exc}",
        )

    run.advance(ImportState.DECODING)
    batch = collect_batch(
        upload.stream,
        catalog,
        user_id=user_id,
        user_name=user_name,
        imported_at=dt.datetime.now(dt.UTC),
        encoding=encoding,
    )
    run.errors.extend(batch.errors)
    run.total_lines = batch.total_lines
    run.skipped_lines = batch.skipped_lines

    if not batch.readable:
        return run.abort(CONTEXT_READING_FILE, "File could not be read.")
    if batch.is_empty:
        return run.abort(CONTEXT_FINISH_READING, "No transactions read.")

    run.advance(ImportState.WRITING)
    session = get_session(database_url=database_url)
    try:
        written = write_batch(session, batch.records, chunk_size=chunk_size)
    except BatchWriteError as exc:
        return run.abort(
            CONTEXT_SAVING, str(exc), detail=f"{type(exc.cause).__name__}: {exc.cause}"
        )
    finally:
        session.close()

    run.advance(ImportState.COMMITTED)
    record_upload(user_id=user_id, file_name=upload.name, database_url=database_url)
    logger.info(
        "Import of %s committed: %d transactions, %d line errors",
        upload.name,
        written,
        len(run.errors),
    )
    return run.outcome(success=True, records_written=written)


def import_file(
    path: str | PathLike[str],
    *,
    user_id: int,
    user_name: str,
    database_url: str | None = None,
) -> ImportOutcome:
    """Convenience wrapper: import a CNAB file from disk."""

    p = Path(path)
    if not p.is_file():
        run = _ImportRun(os.fspath(p))
        run.advance(ImportState.VALIDATING_FILE)
        return run.abort(CONTEXT_UPLOAD, "File empty.")
    try:
        upload = UploadedFile.from_path(p)
    except OSError as exc:
        logger.exception("Could not open %s", p)
        run = _ImportRun(os.fspath(p))
        run.advance(ImportState.VALIDATING_FILE)
        return run.abort(
            CONTEXT_READING_FILE,
            "File could not be read.",
            detail=f"{type(exc).__name__}: {exc}",
        )
    with upload:
        return import_transactions(
            upload, user_id=user_id, user_name=user_name, database_url=database_url
        )


__all__ = ["UploadedFile", "import_file", "import_transactions"]
