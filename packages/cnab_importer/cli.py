# ruff: noqa: I001
"""CLI for the ``cnab_importer`` package.

This module exposes callable command handlers (``cmd_import_file``,
``cmd_seed_types``) and a Typer-based console interface. Environment
variables (notably ``DATABASE_URL``) are loaded from a local ``.env`` using
``python-dotenv`` before delegating to command logic. Business logic lives in
``cnab_importer.importer`` and related modules.
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from dotenv import load_dotenv
from typer.models import ArgumentInfo

from .logging_setup import configure_logging


def cmd_import_file(
    path: str,
    *,
    user_id: int,
    user_name: str,
    database_url: str | None = None,
    as_json: bool = False,
) -> int:
    """Import a CNAB file and report the outcome.

    Behavior
    --------
    - Reads ``path`` from disk and runs the full import pipeline.
    - On success prints ``"<n> transactions imported from <file>"`` to stdout.
    - Every reported issue is written to stderr as ``"<context>: <message>"``
      (line errors are reported even when the import succeeds).
    - With ``as_json`` the whole outcome is printed to stdout as JSON instead.

    Returns ``0`` when the batch was committed, ``1`` otherwise.
    """

    # Local import to keep CLI startup fast
    from .importer import import_file

    outcome = import_file(path, user_id=user_id, user_name=user_name, database_url=database_url)

    if as_json:
        print(outcome.model_dump_json(indent=2))
    else:
        for issue in outcome.errors:
            where = f" (line {issue.line_number})" if issue.line_number is not None else ""
            print(f"{issue.context}{where}: {issue.message}", file=sys.stderr)
        if outcome.success:
            print(f"{outcome.records_written} transactions imported from {Path(path).name}")

    return 0 if outcome.success else 1


def cmd_seed_types(*, database_url: str | None = None) -> int:
    """Upsert the standard transaction types; returns a process exit code."""

    from .ingest.seed_transaction_types import reseed_transaction_types

    try:
        inserted, updated = reseed_transaction_types(database_url=database_url)
    except Exception as e:
        print(f"Error: failed to seed transaction types: {e}", file=sys.stderr)
        return 1
    print(f"transaction types: {inserted} inserted, {updated} updated")
    return 0


# ---- Typer application --------------------------------------------------------

app = typer.Typer(help="CNAB fixed-width transaction importer")

# Module-level argument object to satisfy ruff B008 (no calls in parameter
# defaults). Typer will inspect this when used as a default value below.
CNAB_PATH_ARGUMENT: ArgumentInfo = typer.Argument(
    ...,
    help="Path to a CNAB flat file",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the pipeline reports "File empty."
)


@app.command("import-file")
def _import_file_cmd(
    path: Path = CNAB_PATH_ARGUMENT,
    *,
    user_id: int = typer.Option(..., help="Id of the importing user."),
    user_name: str = typer.Option(..., help="Display name of the importing user."),
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the full outcome as JSON."),
) -> None:
    code = cmd_import_file(
        str(path),
        user_id=user_id,
        user_name=user_name,
        database_url=database_url,
        as_json=as_json,
    )
    raise typer.Exit(code)


@app.command("seed-types")
def _seed_types_cmd(
    *,
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
) -> None:
    raise typer.Exit(cmd_seed_types(database_url=database_url))


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    log_level: str | None = typer.Option(
        None, help="Log level (falls back to CNAB_IMPORTER_LOG_LEVEL, then INFO)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging(log_level)

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover - `python -m cnab_importer.cli`
    app()
