# ruff: noqa: I001
"""CLI for the ``cashbook`` package.

A Typer-based console interface over the ledger engine. Environment variables
(``DATABASE_URL``, ``CASHBOOK_USER_ID``, ``OPENAI_API_KEY``) are loaded from a
local ``.env`` using ``python-dotenv`` before any command runs. Business logic
lives in ``cashbook.ledger``, ``cashbook.reconcile`` and related modules; the
handlers here only translate options into state transitions and print results.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import typer
from dotenv import load_dotenv

from .categories import (
    ALL,
    ALL_CATEGORIES,
    ALL_PAYMENT_MODES,
    PRINTER_OPTIONS,
    is_category,
    is_payment_mode,
)
from .errors import CashbookError, EntryValidationError
from .ledger import LedgerSession
from .logging_setup import configure_logging
from .models import FilterState
from .report import build_report, render_report_text, render_rows_text, render_totals_text
from .storage import SqlEntryStore


# ---- Small module-level helpers used by CLI commands -------------------------


def _resolve_user(user: str | None) -> str | None:
    return user or os.getenv("CASHBOOK_USER_ID") or None


def _fail(message: str) -> typer.Exit:
    print(f"Error: {message}", file=sys.stderr)
    return typer.Exit(1)


def _open_session(
    database_url: str | None, user: str | None, *, require_user: bool = True
) -> LedgerSession:
    """Subscribe to the user's entries; storage failures end the command.

    ``add`` passes ``require_user=False`` so the submit gates report a missing
    user in their usual order.
    """

    user_id = _resolve_user(user)
    if require_user and not user_id:
        raise _fail("A signed-in user is required.")
    session = LedgerSession(SqlEntryStore(database_url=database_url), user_id=user_id)
    try:
        session.start()
    except Exception as e:
        raise _fail(f"failed to load transactions: {e}") from e
    return session


def _filters(
    search: str, entry_type: str, category: str, status: str, start_date: str, end_date: str
) -> FilterState:
    return FilterState(
        text=search,
        type=entry_type,
        category=category,
        due_status=status,
        start_date=start_date,
        end_date=end_date,
    )


def _apply_entry_options(
    session: LedgerSession,
    *,
    entry_type: str | None,
    amount: str | None,
    category: str | None,
    payment_mode: str | None,
    pages: str | None,
    printer: str | None,
    due: bool | None,
    due_amount: str | None,
    contact: str | None,
    remark: str | None,
) -> None:
    """Apply the supplied options to the form; ``None`` leaves a field as is."""

    # Type first: switching type resets coupled fields.
    if entry_type is not None:
        session.set_field("type", entry_type)
    if due is not None:
        session.set_field("is_due", due)
    for name, value in (
        ("amount", amount),
        ("category", category),
        ("payment_mode", payment_mode),
        ("pages", pages),
        ("printer_name", printer),
        ("due_amount", due_amount),
        ("contact", contact),
        ("remark", remark),
    ):
        if value is not None:
            session.set_field(name, value)


def _prompt_entry(session: LedgerSession) -> None:
    """Interactively fill the form, pre-filled with the current values."""

    from .term_ui import prompt_text, select_choice

    form = session.form_state.form
    session.set_field("type", select_choice(["in", "out"], default=form.type, message="Type: "))
    session.set_field("amount", prompt_text("Amount: ", default=form.amount))
    form = session.form_state.form
    session.set_field(
        "category", select_choice(ALL_CATEGORIES, default=form.category, message="Category: ")
    )
    session.set_field(
        "payment_mode",
        select_choice(ALL_PAYMENT_MODES, default=form.payment_mode, message="Payment mode: "),
    )
    if form.type == "in":
        session.set_field(
            "printer_name",
            select_choice(PRINTER_OPTIONS, default=form.printer_name, message="Printer: "),
        )
        session.set_field("pages", prompt_text("Pages: ", default=form.pages))
    due_answer = prompt_text("Due? [y/N]: ", default="y" if form.is_due else "")
    session.set_field("is_due", due_answer.lower() in {"y", "yes"})
    if session.form_state.form.is_due:
        session.set_field("due_amount", prompt_text("Due amount: ", default=form.due_amount))
    session.set_field("contact", prompt_text("Contact: ", default=form.contact))
    session.set_field("remark", prompt_text("Remark: ", default=form.remark))


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Record cash in/out entries, browse the filtered history and print summary "
        "reports. Loads DATABASE_URL and CASHBOOK_USER_ID from a local .env."
    ),
)

DATABASE_URL_OPTION = typer.Option(None, help="Override DATABASE_URL (falls back to env var).")
USER_OPTION = typer.Option(None, "--user", help="User id (falls back to CASHBOOK_USER_ID).")


@app.command("init-db")
def init_db_cmd(database_url: str | None = DATABASE_URL_OPTION) -> None:
    """Create the cashbook tables when missing."""

    from cashbook_db.client import create_schema

    try:
        create_schema(database_url=database_url)
    except Exception as e:
        raise _fail(f"failed to create schema: {e}") from e
    print("Database schema is ready.")


@app.command("add")
def add_cmd(
    entry_type: str | None = typer.Option(None, "--type", help="'in' or 'out'."),
    amount: str | None = typer.Option(None, help="Total amount of the entry."),
    category: str | None = typer.Option(None, help=f"One of: {', '.join(ALL_CATEGORIES)}."),
    payment_mode: str | None = typer.Option(
        None, help=f"One of: {', '.join(ALL_PAYMENT_MODES)}."
    ),
    pages: str | None = typer.Option(None, help="Printed pages (required for 'in')."),
    printer: str | None = typer.Option(None, help=f"One of: {', '.join(PRINTER_OPTIONS)}."),
    due: bool | None = typer.Option(None, "--due/--no-due", help="Mark as outstanding credit."),
    due_amount: str | None = typer.Option(None, help="Owed amount (required with --due)."),
    contact: str | None = typer.Option(None, help="Contact name."),
    remark: str | None = typer.Option(None, help="Free-text remark."),
    interactive: bool = typer.Option(False, help="Prompt for each field."),
    suggest: bool = typer.Option(False, help="Pre-fill category/payment mode via OpenAI."),
    database_url: str | None = DATABASE_URL_OPTION,
    user: str | None = USER_OPTION,
) -> None:
    """Record a new entry stamped with the current date and time."""

    session = _open_session(database_url, user, require_user=False)
    try:
        _apply_entry_options(
            session,
            entry_type=entry_type,
            amount=amount,
            category=category,
            payment_mode=payment_mode,
            pages=pages,
            printer=printer,
            due=due,
            due_amount=due_amount,
            contact=contact,
            remark=remark,
        )
        if suggest:
            from .suggest import suggest_fields

            try:
                session.request_suggestion(suggest_fields)
            except EntryValidationError as e:
                # Suggestions are optional; the entry is still saved.
                print(f"Warning: {e}", file=sys.stderr)
        if interactive:
            _prompt_entry(session)
        session.submit()
    except CashbookError as e:
        raise _fail(str(e)) from e
    finally:
        session.close()
    print("Transaction added successfully.")


@app.command("edit")
def edit_cmd(
    entry_id: str = typer.Argument(..., help="Id of the entry to edit."),
    entry_type: str | None = typer.Option(None, "--type", help="'in' or 'out'."),
    amount: str | None = typer.Option(None, help="Total amount of the entry."),
    category: str | None = typer.Option(None, help="New category."),
    payment_mode: str | None = typer.Option(None, help="New payment mode."),
    pages: str | None = typer.Option(None, help="Printed pages."),
    printer: str | None = typer.Option(None, help="Printer name."),
    due: bool | None = typer.Option(None, "--due/--no-due", help="Outstanding credit flag."),
    due_amount: str | None = typer.Option(None, help="Owed amount."),
    contact: str | None = typer.Option(None, help="Contact name."),
    remark: str | None = typer.Option(None, help="Free-text remark."),
    database_url: str | None = DATABASE_URL_OPTION,
    user: str | None = USER_OPTION,
) -> None:
    """Edit a stored entry; its date and time are kept."""

    session = _open_session(database_url, user)
    try:
        session.start_edit(entry_id)
        _apply_entry_options(
            session,
            entry_type=entry_type,
            amount=amount,
            category=category,
            payment_mode=payment_mode,
            pages=pages,
            printer=printer,
            due=due,
            due_amount=due_amount,
            contact=contact,
            remark=remark,
        )
        session.submit()
    except LookupError as e:
        raise _fail(str(e)) from e
    except CashbookError as e:
        raise _fail(str(e)) from e
    finally:
        session.close()
    print("Transaction updated successfully.")


@app.command("delete")
def delete_cmd(
    entry_id: str = typer.Argument(..., help="Id of the entry to delete."),
    database_url: str | None = DATABASE_URL_OPTION,
    user: str | None = USER_OPTION,
) -> None:
    """Delete a stored entry."""

    session = _open_session(database_url, user)
    try:
        session.delete(entry_id)
    except CashbookError as e:
        raise _fail(str(e)) from e
    finally:
        session.close()
    print("Transaction deleted successfully.")


@app.command("list")
def list_cmd(
    search: str = typer.Option("", help="Search contact/remark/category/printer/amount."),
    entry_type: str = typer.Option(ALL, "--type", help="all, in or out."),
    category: str = typer.Option(ALL, help="all or a category."),
    status: str = typer.Option(ALL, help="all, due or paid."),
    start_date: str = typer.Option("", "--from", help="Start date (YYYY-MM-DD)."),
    end_date: str = typer.Option("", "--to", help="End date, inclusive (YYYY-MM-DD)."),
    show_ids: bool = typer.Option(False, help="Print entry ids before each row."),
    database_url: str | None = DATABASE_URL_OPTION,
    user: str | None = USER_OPTION,
) -> None:
    """Show dashboard totals and the filtered history, newest first."""

    with _open_session(database_url, user) as session:
        session.filters = _filters(search, entry_type, category, status, start_date, end_date)
        view = session.view()

    for line in render_totals_text(view.totals):
        print(line)
    print()
    if show_ids:
        for r in view.records:
            print(f"{r.id}\t{r.date or ''} {r.time or ''}\t{r.type}\t{r.amount}")
    else:
        for line in render_rows_text(view.records):
            print(line)
    print(f"\nShowing {len(view.records)} of {view.total_count} transactions.")


@app.command("report")
def report_cmd(
    search: str = typer.Option("", help="Search contact/remark/category/printer/amount."),
    entry_type: str = typer.Option(ALL, "--type", help="all, in or out."),
    category: str = typer.Option(ALL, help="all or a category."),
    status: str = typer.Option(ALL, help="all, due or paid."),
    start_date: str = typer.Option("", "--from", help="Start date (YYYY-MM-DD)."),
    end_date: str = typer.Option("", "--to", help="End date, inclusive (YYYY-MM-DD)."),
    as_json: bool = typer.Option(False, "--json", help="Emit the report as JSON."),
    output: Path | None = typer.Option(None, help="Write to a file instead of stdout."),
    database_url: str | None = DATABASE_URL_OPTION,
    user: str | None = USER_OPTION,
) -> None:
    """Build the printable summary report for the current filters."""

    with _open_session(database_url, user) as session:
        report = build_report(
            session.ledger.records,
            _filters(search, entry_type, category, status, start_date, end_date),
        )

    text = report.model_dump_json(indent=2) if as_json else render_report_text(report)
    if output is None:
        print(text)
        return
    try:
        output.write_text(text + "\n", encoding="utf-8")
    except OSError as e:
        raise _fail(f"could not write report to {output}: {e}") from e
    print(f"Report written to {output}")


@app.command("suggest")
def suggest_cmd(
    entry_type: str = typer.Option("in", "--type", help="'in' or 'out'."),
    contact: str = typer.Option("", help="Contact name."),
    remark: str = typer.Option("", help="Free-text remark."),
    amount: str = typer.Option("", help="Amount, if known."),
) -> None:
    """Print a suggested category and payment mode for an entry."""

    from .models import SuggestionContext
    from .suggest import suggest_fields

    if not os.getenv("OPENAI_API_KEY"):
        raise _fail("OPENAI_API_KEY is not set in the environment.")
    try:
        suggestion = suggest_fields(
            SuggestionContext(type=entry_type, contact=contact, remark=remark, amount=amount)
        )
    except EntryValidationError as e:
        raise _fail(str(e)) from e
    if suggestion is None:
        print("No suggestion available.")
        return
    # Values outside the fixed sets are never applied; show them as "-".
    category = suggestion.suggested_category if is_category(suggestion.suggested_category) else "-"
    mode = (
        suggestion.suggested_payment_mode
        if is_payment_mode(suggestion.suggested_payment_mode)
        else "-"
    )
    print(f"{category}\t{mode}")


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
