from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest

from cnab_importer.catalog import TypeCatalog
from cnab_importer.decoder import (
    LINE_LENGTH,
    decode_line,
    parse_amount,
    parse_date,
    parse_time,
)
from cnab_importer.models import DecodedLine, LineError, SkippedLine

from tests.helpers.cnab import cnab_line

STAMP = dt.datetime(2026, 10, 16, 12, 0, tzinfo=dt.UTC)
# durable id -> business code; ids deliberately differ from codes
CATALOG = TypeCatalog.from_rows([(11, 1), (12, 2), (13, 3)])


def _decode(line: str, catalog: TypeCatalog = CATALOG, line_number: int = 1):
    return decode_line(
        line,
        catalog,
        line_number=line_number,
        imported_at=STAMP,
        user_id=7,
        user_name="alice",
    )


def test_line_length_covers_every_field():
    assert LINE_LENGTH == 81


def test_decodes_reference_line():
    line = (
        "1" + "20230101" + "0000000100" + "01234567890" + "123456789012" + "093000"
        + "OWNER NAME    " + "STORE NAME         "
    )
    result = _decode(line, line_number=4)

    assert isinstance(result, DecodedLine)
    rec = result.record
    assert rec.date == dt.date(2023, 1, 1)
    assert rec.time == dt.time(9, 30, 0)
    assert rec.amount == Decimal("1.00")
    assert rec.cpf == "01234567890"
    assert rec.card == "123456789012"
    assert rec.owner == "OWNER NAME"
    assert rec.store == "STORE NAME"
    assert rec.transaction_type_id == 11
    assert rec.imported_at == STAMP
    assert rec.user_id == 7
    assert rec.user_name == "alice"
    assert rec.line_number == 4


def test_fields_equal_trimmed_offset_slices():
    line = cnab_line(
        type_code="3",
        date="20190301",
        amount="0000014200",
        cpf="09620676017",
        card="4753****3153",
        time="153453",
        owner="JOAO MACEDO",
        store="BAR DO JOAO",
    )
    rec = _decode(line).record

    assert rec.transaction_type_id == 13
    assert rec.amount == Decimal("142.00")
    assert rec.cpf == line[19:30].strip()
    assert rec.card == line[30:42].strip() == "4753****3153"
    assert rec.owner == line[48:62].strip()
    assert rec.store == line[62:81].strip()
    assert rec.time == dt.time(15, 34, 53)


def test_extra_trailing_characters_are_ignored():
    line = cnab_line() + "   trailing"
    assert isinstance(_decode(line), DecodedLine)


@pytest.mark.parametrize("line", ["", "   ", "\t", cnab_line()[:80], "1" * 40])
def test_blank_or_short_lines_are_skipped(line: str):
    result = _decode(line, line_number=9)

    assert isinstance(result, SkippedLine)
    assert result.line_number == 9


def test_whitespace_only_line_of_full_length_is_skipped():
    assert isinstance(_decode(" " * 90), SkippedLine)


def test_unknown_type_code_reports_code_and_line():
    line = cnab_line(type_code="9")
    result = _decode(line, line_number=3)

    assert isinstance(result, LineError)
    issue = result.issue
    assert issue.context == "UploadFileWithTransactions - reading type"
    assert issue.message == f"Invalid transaction type '9' in line: {line}"
    assert issue.line_number == 3


def test_inactive_rows_are_not_in_catalog_so_code_is_unknown():
    result = _decode(cnab_line(type_code="1"), catalog=TypeCatalog.from_rows([]))
    assert isinstance(result, LineError)
    assert "Invalid transaction type '1'" in result.issue.message


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"type_code": "X"}, "type"),
        ({"type_code": " "}, "type"),
        ({"date": "20230230"}, "day"),
        ({"date": "2023O101"}, "date"),
        ({"time": "250000"}, "hour"),
        ({"time": "09:300"}, "time"),
        ({"amount": "00000001A0"}, "amount"),
        ({"amount": "-000000100"}, "amount"),
        ({"amount": "       100"}, "amount"),
    ],
)
def test_malformed_fields_produce_parse_error(overrides: dict[str, str], field: str):
    line = cnab_line(**overrides)
    result = _decode(line, line_number=5)

    assert isinstance(result, LineError)
    issue = result.issue
    assert issue.context == "UploadFileWithTransactions - reading line"
    assert issue.message == f"Error parsing line: {line}"
    assert issue.line_number == 5
    assert issue.detail is not None and field in issue.detail


def test_parse_amount_keeps_two_places():
    assert parse_amount("0000000000") == Decimal("0.00")
    assert parse_amount("0000000005") == Decimal("0.05")
    assert parse_amount("9999999999") == Decimal("99999999.99")
    assert str(parse_amount("0000012345")) == "123.45"


def test_parse_date_and_time_reject_non_ascii_digits():
    with pytest.raises(ValueError):
        parse_date("２０２３0101")
    with pytest.raises(ValueError):
        parse_time("0930")


def test_leap_day_is_valid():
    assert parse_date("20240229") == dt.date(2024, 2, 29)
