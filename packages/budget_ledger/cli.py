"""CLI for the ``budget_ledger`` package.

Command handlers (``cmd_*``) return a process exit code and print errors as
``Error: ...`` on stderr; the Typer commands below are thin wrappers. The root
callback loads a local ``.env`` with ``python-dotenv`` (existing environment
variables win) and configures logging before any command runs.
"""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from sqlalchemy.exc import SQLAlchemyError

from .config import load_settings
from .errors import EmptyResultError, StructuralError
from .logging_setup import configure_logging
from .models import ImportResult, Report
from .pivot import severity
from .reports import PERIODS


def _err(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _read_file(path: Path) -> bytes:
    with open(path, "rb") as f:
        return f.read()


# ---- Output formatting -------------------------------------------------------


def _print_import(result: ImportResult) -> None:
    for tx in result.transactions:
        category = tx.category_name or tx.category_id or "-"
        flag = " [review date]" if tx.needs_review else ""
        print(f"{tx.date}  {tx.amount:>12.2f} {tx.currency}  {category:<18}  {tx.description}{flag}")
    print(
        f"{len(result.transactions)} transactions, {result.categorized} categorized, "
        f"{result.skipped} rows skipped"
    )


_SEVERITY_STYLE = {
    "critical": ("!!", "bold red"),
    "high": ("!", "yellow"),
    "normal": ("", ""),
    "below-average": ("-", "green"),
    "none": ("", "dim"),
}


def _print_report(report: Report) -> None:
    console = Console(highlight=False)
    s = report.summary
    console.print(f"[bold]Period:[/bold] {report.period}")
    console.print(f"Expenses: {s.total_expenses:.2f}  Income: {s.total_income:.2f}  Balance: {s.balance:.2f}")
    st = report.stats
    console.print(
        f"All-time balance: {st.total_balance:.2f}  This month: +{st.monthly_income:.2f} / "
        f"-{st.monthly_expenses:.2f}  Transactions: {st.transaction_count}"
    )
    pivot = report.pivot
    if not pivot.rows:
        console.print("[yellow]No expenses in this period.[/yellow]")
        return

    table = Table(show_edge=False)
    table.add_column("Category", no_wrap=True)
    for m in pivot.months:
        table.add_column(m, justify="right")
    table.add_column("Total", justify="right", style="bold")
    table.add_column("Avg", justify="right")
    for row in pivot.rows:
        cells = []
        for m in pivot.months:
            cell = row.months[m]
            mark, style = _SEVERITY_STYLE[severity(cell.amount, row.average).value]
            cells.append(Text(f"{cell.amount:.2f}{mark}", style=style))
        label = Text(f"{row.category_icon} {row.category_name}")
        table.add_row(label, *cells, f"{row.total:.2f}", f"{row.average:.2f}")
    console.print(table)

    if report.top_increases:
        console.print("\n[bold]Biggest increases:[/bold]")
        for row in report.top_increases:
            mc = row.max_increase
            console.print(f"  {escape(row.category_name)}: [red]+{mc.change_pct:.0f}%[/red] in {mc.month}")
    if report.top_decreases:
        console.print("\n[bold]Biggest decreases:[/bold]")
        for row in report.top_decreases:
            mc = row.max_decrease
            console.print(f"  {escape(row.category_name)}: [green]{mc.change_pct:.0f}%[/green] in {mc.month}")


# ---- Command handlers --------------------------------------------------------


def cmd_import_file(
    file: Path,
    *,
    user_id: str,
    bank_id: str | None = None,
    database_url: str | None = None,
    dry_run: bool = False,
) -> int:
    """Import one statement; with ``dry_run`` nothing touches the database."""

    try:
        data = _read_file(file)
    except FileNotFoundError:
        return _err(f"File not found: {file}")
    except PermissionError:
        return _err(f"Permission denied: {file}")

    try:
        settings = load_settings()
        if dry_run:
            from .api import ingest_file
            from .classify import Classifier
            from .ingest.rows import ParseOptions
            from .stores import InMemoryCategoryStore, InMemoryKeywordStore

            result = ingest_file(
                data,
                file.name,
                user_id=user_id,
                classifier=Classifier(
                    InMemoryKeywordStore(), InMemoryCategoryStore.with_system_categories(user_id)
                ),
                options=ParseOptions.from_settings(settings),
            )
        else:
            from .api import import_file

            result = import_file(
                data,
                file.name,
                user_id=user_id,
                bank_id=bank_id,
                database_url=database_url,
                settings=settings,
            )
    except StructuralError as e:
        return _err(f"Failed to read {file.name}: {e}")
    except EmptyResultError as e:
        return _err(f"{file.name}: {e}")
    except (OSError, ValueError, RuntimeError, SQLAlchemyError) as e:
        return _err(str(e))

    _print_import(result)
    return 0


def cmd_report(
    *,
    user_id: str,
    period: str = "all",
    as_json: bool = False,
    database_url: str | None = None,
    today: date | None = None,
) -> int:
    from .api import report_for_user

    if period not in PERIODS:
        return _err(f"Unknown period {period!r}; expected one of: {', '.join(PERIODS)}")
    try:
        report = report_for_user(user_id, period=period, database_url=database_url, today=today)
    except (ValueError, RuntimeError, SQLAlchemyError) as e:
        return _err(str(e))

    if as_json:
        print(report.model_dump_json(indent=2))
    else:
        _print_report(report)
    return 0


def cmd_suggest_keyword(
    description: str,
    *,
    user_id: str | None = None,
    category: str | None = None,
    save: bool = False,
    assume_yes: bool = False,
    database_url: str | None = None,
) -> int:
    """Print a keyword suggestion and optionally save it as a user override."""

    from .classify import suggest_keyword

    keyword = suggest_keyword(description)
    if not keyword:
        return _err(f"No keyword could be derived from {description!r}")
    print(keyword)
    if not save:
        return 0
    if not user_id or not category:
        return _err("--save requires --user-id and --category")

    from db.client import session_scope

    from .stores import SqlCategoryStore, save_user_keyword

    try:
        with session_scope(database_url=database_url or load_settings().database_url) as session:
            category_id = SqlCategoryStore(session).resolve_category_id(user_id, category)
            if category_id is None:
                return _err(f"Unknown category {category!r} for user {user_id}")
            if not assume_yes and not typer.confirm(f"Save '{keyword}' for {category}?", default=True):
                print("Not saved.")
                return 0
            save_user_keyword(session, user_id=user_id, keyword=keyword, category_id=category_id)
    except (ValueError, RuntimeError, SQLAlchemyError) as e:
        return _err(str(e))
    print(f"Saved '{keyword}' -> {category}")
    return 0


def cmd_seed_categories(*, user_id: str, database_url: str | None = None) -> int:
    from db.client import session_scope

    from .stores import seed_system_categories

    try:
        with session_scope(database_url=database_url or load_settings().database_url) as session:
            created = seed_system_categories(session, user_id=user_id)
    except (ValueError, RuntimeError, SQLAlchemyError) as e:
        return _err(str(e))
    print(f"Created {len(created)} categories for {user_id}")
    return 0


def cmd_add_bank(*, user_id: str, name: str, color: str | None = None, database_url: str | None = None) -> int:
    from db.client import session_scope

    from .persistence import create_bank

    if not name.strip():
        return _err("Bank name must not be empty")
    try:
        with session_scope(database_url=database_url or load_settings().database_url) as session:
            bank = create_bank(session, user_id=user_id, name=name, color=color)
            bank_id = bank.id
    except (ValueError, RuntimeError, SQLAlchemyError) as e:
        return _err(str(e))
    print(bank_id)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Import bank statements (CSV/XLSX), categorize them, and report spending by month.",
)

DatabaseUrlOption = Annotated[
    str | None, typer.Option("--database-url", help="Override DATABASE_URL (falls back to env var).")
]
UserIdOption = Annotated[str, typer.Option("--user-id", help="Owner of the ledger data.")]


@app.command("import-file")
def import_file_cmd(
    file: Annotated[Path, typer.Option("--file", help="CSV or XLSX statement to import.", dir_okay=False)],
    user_id: UserIdOption,
    bank_id: Annotated[str | None, typer.Option("--bank-id", help="Bank the statement belongs to.")] = None,
    database_url: DatabaseUrlOption = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Parse and categorize without saving.")] = False,
) -> None:
    """Parse, categorize and store a statement."""

    raise typer.Exit(
        cmd_import_file(file, user_id=user_id, bank_id=bank_id, database_url=database_url, dry_run=dry_run)
    )


@app.command("report")
def report_cmd(
    user_id: UserIdOption,
    period: Annotated[str, typer.Option("--period", help=f"One of: {', '.join(PERIODS)}.")] = "all",
    as_json: Annotated[bool, typer.Option("--json", help="Print the report as JSON.")] = False,
    database_url: DatabaseUrlOption = None,
) -> None:
    """Show spending by category and month."""

    raise typer.Exit(cmd_report(user_id=user_id, period=period, as_json=as_json, database_url=database_url))


@app.command("suggest-keyword")
def suggest_keyword_cmd(
    description: Annotated[str, typer.Option("--description", help="Transaction description.")],
    user_id: Annotated[str | None, typer.Option("--user-id")] = None,
    category: Annotated[str | None, typer.Option("--category", help="Category name to save the keyword for.")] = None,
    save: Annotated[bool, typer.Option("--save", help="Save the suggestion as a personal keyword.")] = False,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
    database_url: DatabaseUrlOption = None,
) -> None:
    """Suggest a reusable keyword from a description."""

    raise typer.Exit(
        cmd_suggest_keyword(
            description,
            user_id=user_id,
            category=category,
            save=save,
            assume_yes=yes,
            database_url=database_url,
        )
    )


@app.command("seed-categories")
def seed_categories_cmd(user_id: UserIdOption, database_url: DatabaseUrlOption = None) -> None:
    """Create the built-in categories for a user (idempotent)."""

    raise typer.Exit(cmd_seed_categories(user_id=user_id, database_url=database_url))


@app.command("add-bank")
def add_bank_cmd(
    user_id: UserIdOption,
    name: Annotated[str, typer.Option("--name")],
    color: Annotated[str | None, typer.Option("--color")] = None,
    database_url: DatabaseUrlOption = None,
) -> None:
    """Register a bank account and print its id."""

    raise typer.Exit(cmd_add_bank(user_id=user_id, name=name, color=color, database_url=database_url))


@app.callback()
def _root(
    log_level: Annotated[str | None, typer.Option("--log-level", help="Overrides LEDGER_LOG_LEVEL.")] = None,
) -> None:
    """Load ``.env`` (existing variables win) and set up logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level, force=True)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
