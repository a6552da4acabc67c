"""
CLI: ``simpledb`` -- run statements and reconcile schemas from the shell.

Connection settings come from ``SIMPLEDB_*`` environment variables (see
:class:`~simpledb.settings.SimpleDbSettings`); ``--database`` points a SQLite
session at a file instead.
"""

from __future__ import annotations

import importlib
import json
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from simpledb.errors import SimpleDbError
from simpledb.logging import configure_logging
from simpledb.session import SimpleDb
from simpledb.settings import SimpleDbSettings

app = typer.Typer(
    name="simpledb",
    help="simpledb -- raw SQL sessions and record/table reconciliation.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


# ── Session helper ───────────────────────────────────────────────────────


def open_session(database: str | None = None, *, dev: bool = False) -> SimpleDb:
    """Build a session from settings, optionally forcing a SQLite file."""
    overrides: dict[str, Any] = {}
    if database:
        overrides.update(db_type="sqlite", path=database)
    if dev:
        overrides["dev_mode"] = True
    settings = SimpleDbSettings(**overrides)
    configure_logging(
        level="INFO" if settings.dev_mode else settings.log_level,
        json_format=False,
        cache_loggers=False,
    )
    return SimpleDb.from_settings(settings)


def _load_record(target: str) -> type:
    module_name, _, attr = target.partition(":")
    if not attr:
        raise typer.BadParameter("expected 'module:ClassName'", param_hint="RECORD")
    try:
        return getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as e:
        raise typer.BadParameter(str(e), param_hint="RECORD") from e


# ── Output helpers ───────────────────────────────────────────────────────


def _print_rows(rows: list[dict[str, Any]], *, as_json: bool, title: str | None = None) -> None:
    if as_json:
        typer.echo(json.dumps(rows, default=str, ensure_ascii=False))
        return
    if not rows:
        console.print("[dim](no rows)[/dim]")
        return
    table = Table(title=title)
    for column in rows[0]:
        table.add_column(str(column))
    for row in rows:
        table.add_row(*("NULL" if v is None else escape(str(v)) for v in row.values()))
    console.print(table)


def _fail(error: SimpleDbError) -> None:
    err_console.print(f"[red]{error.__class__.__name__}:[/red] {escape(str(error))}")
    raise typer.Exit(code=1)


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def run(
    sql: str = typer.Argument(..., help="Statement with ? placeholders"),
    params: list[str] = typer.Argument(None, help="Values bound to the placeholders"),
    database: str | None = typer.Option(None, "--database", "-d", help="SQLite database file"),
    dev: bool = typer.Option(False, "--dev", help="Log every statement"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Execute one statement and print its result."""
    with open_session(database, dev=dev) as db:
        try:
            result = db.run(sql, *(params or []))
        except SimpleDbError as e:
            _fail(e)
    if isinstance(result, list):
        _print_rows(result, as_json=json_out)
    elif json_out:
        typer.echo(json.dumps({"result": result}))
    else:
        console.print(result)


@app.command()
def describe(
    table: str = typer.Argument(..., help="Table name"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show the columns of a table."""
    with open_session(database) as db:
        try:
            columns = db.describe(table)
        except SimpleDbError as e:
            _fail(e)
    rows = [
        {
            "name": c.name,
            "type": c.type,
            "nullable": c.nullable,
            "primary_key": c.primary_key,
            "default": c.default,
        }
        for c in columns
    ]
    _print_rows(rows, as_json=json_out, title=table)


@app.command()
def tables(
    database: str | None = typer.Option(None, "--database", "-d"),
) -> None:
    """List user tables."""
    with open_session(database) as db:
        try:
            names = db.list_tables()
        except SimpleDbError as e:
            _fail(e)
    for name in names:
        typer.echo(name)


@app.command()
def reconcile(
    record: str = typer.Argument(..., help="Dataclass record as module:ClassName"),
    policy: str = typer.Option("validate", "--policy", "-p", help="none|validate|update|create|create-drop"),
    table: str | None = typer.Option(None, "--table", "-t", help="Table name override"),
    database: str | None = typer.Option(None, "--database", "-d"),
    dev: bool = typer.Option(False, "--dev"),
) -> None:
    """Bring a table into line with a dataclass record."""
    record_type = _load_record(record)
    with open_session(database, dev=dev) as db:
        try:
            db.set_reconciliation_policy(policy)
            statements = db.reconcile(record_type, table)
        except SimpleDbError as e:
            _fail(e)
    if not statements:
        console.print("[green]No schema changes[/green]")
    for statement in statements:
        console.print(statement + ";")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
