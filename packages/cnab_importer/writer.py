"""Persist a decoded batch as one all-or-nothing database transaction.

Rows are inserted straight into ``cnab_transactions`` (no staging table).
The transaction is opened explicitly with ``session.begin()`` so that every
exit path either commits the whole batch or rolls all of it back; a failure on
row N leaves none of rows 1..N-1 visible to other sessions.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from itertools import batched

from db.models.cnab import CnabTransaction
from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import TransactionRecord

logger = get_logger("cnab_importer.writer")

DEFAULT_CHUNK_SIZE = 500


class BatchWriteError(RuntimeError):
    """Raised when a batch could not be committed; nothing was persisted."""

    def __init__(self, message: str, *, cause: BaseException, attempted: int) -> None:
        super().__init__(message)
        self.cause = cause
        self.attempted = attempted


def resolve_chunk_size(chunk_size: int | None = None) -> int:
    """Resolve rows-per-flush, honoring ``CNAB_IMPORTER_WRITE_CHUNK_SIZE``."""

    if chunk_size is None:
        env_val = os.getenv("CNAB_IMPORTER_WRITE_CHUNK_SIZE")
        try:
            chunk_size = int(env_val) if env_val else DEFAULT_CHUNK_SIZE
        except ValueError:
            logger.warning("Ignoring non-integer CNAB_IMPORTER_WRITE_CHUNK_SIZE=%r", env_val)
            chunk_size = DEFAULT_CHUNK_SIZE
    return max(1, chunk_size)


def _to_row(record: TransactionRecord) -> CnabTransaction:
    return CnabTransaction(
        date=record.date,
        time=record.time,
        amount=record.amount,
        cpf=record.cpf,
        card=record.card,
        owner=record.owner,
        store=record.store,
        transaction_type_id=record.transaction_type_id,
        user_id=record.user_id,
        created_at=record.imported_at,
        updated_at=record.imported_at,
        updated_by=record.user_name,
    )


def write_batch(
    session: Session,
    records: Sequence[TransactionRecord],
    *,
    chunk_size: int | None = None,
) -> int:
    """Insert ``records`` in a single transaction and return the count written.

    ``session`` must not have a transaction in progress. Rows are flushed in
    chunks of ``chunk_size`` to bound memory, but only one COMMIT is issued.
    Any exception rolls back the whole transaction and is re-raised as
    :class:`BatchWriteError` with the original exception chained.
    """

    if not records:
        raise ValueError("write_batch() requires at least one record")

    size = resolve_chunk_size(chunk_size)
    logger.info("Saving %d transactions to the database.", len(records))
    try:
        with session.begin():
            for chunk in batched(records, size):
                session.add_all(_to_row(r) for r in chunk)
                session.flush()
    except Exception as exc:
        # session.begin() has already rolled back at this point.
        logger.exception("Error saving transactions; batch of %d rolled back", len(records))
        raise BatchWriteError(
            "Error saving transactions.", cause=exc, attempted=len(records)
        ) from exc

    logger.info("Transactions saved successfully.")
    return len(records)


__all__ = ["BatchWriteError", "DEFAULT_CHUNK_SIZE", "resolve_chunk_size", "write_batch"]
