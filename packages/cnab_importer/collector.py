"""Drive the decoder over a whole uploaded file.

The collector reads the stream sequentially, decodes each line, and keeps
valid records and line errors in file order. It never touches the database;
persisting the collected batch is the writer's job.
"""

from __future__ import annotations

import datetime as dt
import io
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import IO

from .catalog import TypeCatalog
from .decoder import decode_line
from .logging_setup import get_logger
from .models import DecodedLine, ImportIssue, LineError, SkippedLine, TransactionRecord

logger = get_logger("cnab_importer.collector")

DEFAULT_ENCODING = "utf-8-sig"
BYTE_ORDER_MARK = "\ufeff"


@dataclass(slots=True)
class CollectedBatch:
    records: list[TransactionRecord] = field(default_factory=list)
    errors: list[ImportIssue] = field(default_factory=list)
    total_lines: int = 0
    skipped_lines: int = 0
    readable: bool = True

    @property
    def is_empty(self) -> bool:
        return not self.records


def resolve_encoding(encoding: str | None = None) -> str:
    """Return ``encoding`` or ``CNAB_IMPORTER_ENCODING`` or BOM-aware UTF-8."""

    return encoding or os.getenv("CNAB_IMPORTER_ENCODING") or DEFAULT_ENCODING


def _strip_lines(lines: Iterable[str]) -> Iterator[str]:
    for idx, ln in enumerate(lines):
        ln = ln.rstrip("\r\n")
        # Text streams opened as plain UTF-8 keep the BOM on the first line.
        yield ln.removeprefix(BYTE_ORDER_MARK) if idx == 0 else ln


def _iter_lines(stream: IO[str] | IO[bytes], encoding: str) -> Iterator[str]:
    if isinstance(stream, io.TextIOBase):
        yield from _strip_lines(stream)
        return

    # Wrap without taking ownership: the caller closes the underlying stream.
    # Undecodable bytes become U+FFFD so only the affected line fails to parse.
    text = io.TextIOWrapper(
        stream,  # type: ignore[arg-type]
        encoding=encoding,
        errors="replace",
        newline=None,
    )
    try:
        yield from _strip_lines(text)
    finally:
        if not stream.closed:
            text.detach()


def collect_batch(
    stream: IO[str] | IO[bytes],
    catalog: TypeCatalog,
    *,
    user_id: int,
    user_name: str,
    imported_at: dt.datetime | None = None,
    encoding: str | None = None,
) -> CollectedBatch:
    """Decode every line of ``stream`` and return the collected batch.

    Undecodable bytes are replaced with U+FFFD, so they only reject the line
    they occur on. When the stream itself cannot be read (an I/O error, or a
    closed or non-readable stream), the batch is returned with no records and
    ``readable=False``; line errors found before the failure are kept.
    """

    stamp = imported_at or dt.datetime.now(dt.UTC)
    batch = CollectedBatch()

    logger.info("Starting to read the file with transactions.")
    try:
        for line_number, line in enumerate(_iter_lines(stream, resolve_encoding(encoding)), 1):
            batch.total_lines = line_number
            result = decode_line(
                line,
                catalog,
                line_number=line_number,
                imported_at=stamp,
                user_id=user_id,
                user_name=user_name,
            )
            match result:
                case DecodedLine(record=record):
                    batch.records.append(record)
                case LineError(issue=issue):
                    batch.errors.append(issue)
                case SkippedLine():
                    batch.skipped_lines += 1
    # Closed streams raise ValueError; an unknown encoding raises LookupError.
    except (OSError, ValueError, LookupError):
        logger.exception("Failed to read the uploaded file after %d lines", batch.total_lines)
        return CollectedBatch(
            errors=list(batch.errors),
            total_lines=batch.total_lines,
            skipped_lines=batch.skipped_lines,
            readable=False,
        )

    logger.info(
        "Finished reading %d lines: %d decoded, %d rejected, %d skipped",
        batch.total_lines,
        len(batch.records),
        len(batch.errors),
        batch.skipped_lines,
    )
    return batch


__all__ = ["CollectedBatch", "collect_batch", "resolve_encoding"]
