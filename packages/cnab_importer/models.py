"""Data models for ``cnab_importer``.

Two families live here:

- Immutable domain values produced by the decoder (``TransactionRecord`` and
  the tagged decode results ``DecodedLine`` / ``LineError`` / ``SkippedLine``).
  These are frozen dataclasses; they never touch the database.
- Outward DTOs returned to callers (``ImportIssue`` and ``ImportOutcome``).
  These are pydantic models so hosts (CLI, HTTP layers) can serialize them
  directly.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

# ---------------------------------------------------------------------------
# Issue contexts (stable strings surfaced to callers)
# ---------------------------------------------------------------------------

CONTEXT_UPLOAD = "UploadFileWithTransactions"
CONTEXT_READING_FILE = "UploadFileWithTransactions - reading file"
CONTEXT_READING_TYPE = "UploadFileWithTransactions - reading type"
CONTEXT_READING_LINE = "UploadFileWithTransactions - reading line"
CONTEXT_LOADING_TYPES = "UploadFileWithTransactions - loading transaction types"
CONTEXT_FINISH_READING = "UploadFileWithTransactions - finish reading lines"
CONTEXT_SAVING = "UploadFileWithTransactions - saving transactions"


# ---------------------------------------------------------------------------
# Outward DTOs
# ---------------------------------------------------------------------------


class ImportIssue(BaseModel):
    """One reported problem: a rejected line or a batch-level failure.

    ``context`` and ``message`` are the client-visible pair. ``detail`` keeps
    the original exception text for diagnostics and is not meant for end users.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    context: str
    message: str
    line_number: int | None = None
    detail: str | None = None

    @field_validator("context", "message")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("context and message must be non-empty")
        return v


class ImportState(StrEnum):
    IDLE = "idle"
    VALIDATING_FILE = "validating_file"
    DECODING = "decoding"
    WRITING = "writing"
    COMMITTED = "committed"
    ABORTED = "aborted"


class ImportOutcome(BaseModel):
    """Aggregate result of one import call."""

    model_config = ConfigDict(extra="forbid")

    success: bool
    state: ImportState
    records_written: int = 0
    total_lines: int = 0
    skipped_lines: int = 0
    errors: list[ImportIssue] = []

    @field_validator("state")
    @classmethod
    def _terminal_state(cls, v: ImportState) -> ImportState:
        if v not in (ImportState.COMMITTED, ImportState.ABORTED):
            raise ValueError("an outcome can only carry a terminal state")
        return v


# ---------------------------------------------------------------------------
# Decoded records and tagged decode results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """One decoded CNAB line, ready to be written.

    ``transaction_type_id`` is the catalog's durable id (already resolved),
    not the business code printed in the file.
    """

    date: dt.date
    time: dt.time
    amount: Decimal
    cpf: str
    card: str
    owner: str
    store: str
    transaction_type_id: int
    imported_at: dt.datetime
    user_id: int
    user_name: str
    line_number: int


@dataclass(frozen=True, slots=True)
class DecodedLine:
    record: TransactionRecord


@dataclass(frozen=True, slots=True)
class LineError:
    issue: ImportIssue


@dataclass(frozen=True, slots=True)
class SkippedLine:
    line_number: int
    reason: str


type DecodeResult = DecodedLine | LineError | SkippedLine


__all__ = [
    "CONTEXT_FINISH_READING",
    "CONTEXT_LOADING_TYPES",
    "CONTEXT_READING_FILE",
    "CONTEXT_READING_LINE",
    "CONTEXT_READING_TYPE",
    "CONTEXT_SAVING",
    "CONTEXT_UPLOAD",
    "DecodeResult",
    "DecodedLine",
    "ImportIssue",
    "ImportOutcome",
    "ImportState",
    "LineError",
    "SkippedLine",
    "TransactionRecord",
]
