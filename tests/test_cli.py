from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cnab_importer.cli import app, cmd_import_file

from tests.helpers.cnab import cnab_file, cnab_line
from tests.helpers.db import bootstrap_sqlite_db, count_transactions, seed_standard_types

runner = CliRunner()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    url = bootstrap_sqlite_db(tmp_path / "cli.db")
    seed_standard_types(database_url=url)
    return url


def _write(tmp_path: Path, lines: list[str]) -> Path:
    path = tmp_path / "cnab.txt"
    path.write_text(cnab_file(lines), encoding="utf-8")
    return path


def test_import_file_command_succeeds(db_url: str, tmp_path: Path):
    path = _write(tmp_path, [cnab_line(), cnab_line(type_code="5")])

    result = runner.invoke(
        app,
        [
            "import-file",
            str(path),
            "--user-id",
            "7",
            "--user-name",
            "alice",
            "--database-url",
            db_url,
        ],
    )

    assert result.exit_code == 0, result.output
    assert "2 transactions imported from cnab.txt" in result.stdout
    assert count_transactions(db_url) == 2


def test_import_file_command_json_output(db_url: str, tmp_path: Path):
    path = _write(tmp_path, [cnab_line(type_code="0")])

    result = runner.invoke(
        app,
        [
            "import-file",
            str(path),
            "--user-id",
            "7",
            "--user-name",
            "alice",
            "--database-url",
            db_url,
            "--json",
        ],
    )

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["success"] is False
    assert payload["errors"][-1]["message"] == "No transactions read."


def test_cmd_import_file_prints_issues_to_stderr(
    db_url: str, tmp_path: Path, capsys: pytest.CaptureFixture[str]
):
    path = _write(tmp_path, [cnab_line(), cnab_line(type_code="0")])

    code = cmd_import_file(str(path), user_id=1, user_name="bob", database_url=db_url)

    out, err = capsys.readouterr()
    assert code == 0
    assert "1 transactions imported" in out
    assert "UploadFileWithTransactions - reading type (line 2): Invalid transaction type '0'" in err


def test_cmd_import_file_missing_file(db_url: str, tmp_path: Path, capsys):
    code = cmd_import_file(
        str(tmp_path / "missing.txt"), user_id=1, user_name="bob", database_url=db_url
    )

    assert code == 1
    assert "UploadFileWithTransactions: File empty." in capsys.readouterr().err


def test_seed_types_command(tmp_path: Path):
    url = bootstrap_sqlite_db(tmp_path / "seed.db")

    result = runner.invoke(app, ["seed-types", "--database-url", url])

    assert result.exit_code == 0, result.output
    assert "9 inserted, 0 updated" in result.stdout


def test_no_subcommand_exits_nonzero():
    result = runner.invoke(app, [])
    assert result.exit_code == 1
