"""Decoder for one fixed-width CNAB line.

Line layout (0-based offsets, 81 characters):

=========  ======  ======  ==========================================
Field      Offset  Length  Format
=========  ======  ======  ==========================================
type       0       1       business code, integer
date       1       8       ``YYYYMMDD``
amount     9       10      integer cents (divided by 100)
cpf        19      11      payer id, trimmed
card       30      12      card fragment, trimmed
time       42      6       ``HHMMSS``
owner      48      14      trimmed
store      62      19      trimmed
=========  ======  ======  ==========================================

:func:`decode_line` never raises for bad input. It returns a tagged result:
``SkippedLine`` for blank/short lines, ``LineError`` for lines that cannot be
decoded, ``DecodedLine`` otherwise.
"""

from __future__ import annotations

import datetime as dt
import re
from decimal import Decimal
from typing import NamedTuple

from .catalog import TypeCatalog
from .logging_setup import get_logger
from .models import (
    CONTEXT_READING_LINE,
    CONTEXT_READING_TYPE,
    DecodedLine,
    DecodeResult,
    ImportIssue,
    LineError,
    SkippedLine,
    TransactionRecord,
)

logger = get_logger("cnab_importer.decoder")


class _Field(NamedTuple):
    offset: int
    length: int

    def slice(self, line: str) -> str:
        return line[self.offset : self.offset + self.length]


TYPE = _Field(0, 1)
DATE = _Field(1, 8)
AMOUNT = _Field(9, 10)
CPF = _Field(19, 11)
CARD = _Field(30, 12)
TIME = _Field(42, 6)
OWNER = _Field(48, 14)
STORE = _Field(62, 19)

LINE_LENGTH = STORE.offset + STORE.length  # 81

_DIGITS = re.compile(r"[0-9]+")


def _digits(raw: str, *, name: str, length: int) -> str:
    if len(raw) != length or not _DIGITS.fullmatch(raw):
        raise ValueError(f"{name} must be {length} digits, got {raw!r}")
    return raw


def parse_type_code(raw: str) -> int:
    return int(_digits(raw, name="type", length=TYPE.length))


def parse_date(raw: str) -> dt.date:
    s = _digits(raw, name="date", length=DATE.length)
    return dt.date(int(s[0:4]), int(s[4:6]), int(s[6:8]))


def parse_time(raw: str) -> dt.time:
    s = _digits(raw, name="time", length=TIME.length)
    return dt.time(int(s[0:2]), int(s[2:4]), int(s[4:6]))


def parse_amount(raw: str) -> Decimal:
    """Return the amount in currency units with two decimal places.

    Only unsigned digits are accepted; signs and blanks are rejected rather
    than interpreted. Ten digits cap the value at 99,999,999.99.
    """

    s = _digits(raw, name="amount", length=AMOUNT.length)
    return Decimal(s).scaleb(-2)


def decode_line(
    line: str,
    catalog: TypeCatalog,
    *,
    line_number: int,
    imported_at: dt.datetime,
    user_id: int,
    user_name: str,
) -> DecodeResult:
    """Decode ``line`` into a transaction record or a tagged failure."""

    if not line.strip() or len(line) < LINE_LENGTH:
        logger.warning("Skipping invalid or empty line %d: %r", line_number, line)
        return SkippedLine(line_number=line_number, reason="blank or shorter than 81 chars")

    logger.debug("Processing line %d: %s", line_number, line)

    try:
        code = parse_type_code(TYPE.slice(line))
    except ValueError as exc:
        return _parse_error(line, line_number, exc)

    type_id = catalog.resolve(code)
    if type_id is None:
        message = f"Invalid transaction type '{code}' in line: {line}"
        logger.error(message)
        return LineError(
            ImportIssue(context=CONTEXT_READING_TYPE, message=message, line_number=line_number)
        )

    try:
        date = parse_date(DATE.slice(line))
        time = parse_time(TIME.slice(line))
        amount = parse_amount(AMOUNT.slice(line))
    except ValueError as exc:
        return _parse_error(line, line_number, exc)

    record = TransactionRecord(
        date=date,
        time=time,
        amount=amount,
        cpf=CPF.slice(line).strip(),
        card=CARD.slice(line).strip(),
        owner=OWNER.slice(line).strip(),
        store=STORE.slice(line).strip(),
        transaction_type_id=type_id,
        imported_at=imported_at,
        user_id=user_id,
        user_name=user_name,
        line_number=line_number,
    )
    return DecodedLine(record)


def _parse_error(line: str, line_number: int, exc: ValueError) -> LineError:
    message = f"Error parsing line: {line}"
    logger.error("%s (%s)", message, exc)
    return LineError(
        ImportIssue(
            context=CONTEXT_READING_LINE,
            message=message,
            line_number=line_number,
            detail=str(exc),
        )
    )


__all__ = [
    "LINE_LENGTH",
    "decode_line",
    "parse_amount",
    "parse_date",
    "parse_time",
    "parse_type_code",
]
