"""Command-line interface for libraryloans.

Built with Typer for commands and Rich for output.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .catalog import BookCreate, CatalogManager, ingest_books_csv
from .config import get_config
from .db import get_db
from .errors import LibraryError
from .ledger import LoanLedger, LoanStatus
from .membership import MembershipManager, UserCreate

# Create the main app
app = typer.Typer(
    name="libraryloans",
    help="Track library books, members and loans.",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse an ISO date option, exiting on bad input."""
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        print_error(f"Invalid date: {value} (expected YYYY-MM-DD)")
        raise typer.Exit(1)


def status_badge(status: str) -> str:
    if status == LoanStatus.RETURNED.value:
        return "[dim]returned[/dim]"
    if status == LoanStatus.OVERDUE.value:
        return "[bold red]overdue[/bold red]"
    return "[green]borrowed[/green]"


def get_ledger() -> LoanLedger:
    return LoanLedger(get_db())


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at INFO level"),
) -> None:
    """Track library books, members and loans."""
    config = get_config()
    level = logging.INFO if verbose else getattr(logging, config.log_level, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# ============================================================================
# Setup Commands
# ============================================================================


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"libraryloans version {__version__}")


@app.command()
def init() -> None:
    """Create the database and tables."""
    config = get_config()
    errors = config.validate()
    if errors:
        for error in errors:
            print_error(error)
        raise typer.Exit(1)

    db = get_db()
    print_success(f"Database ready at {db.db_path}")
    console.print(f"[dim]Tables: {', '.join(db.table_names())}[/dim]")


# ============================================================================
# Catalog Commands
# ============================================================================


@app.command("add-book")
def add_book(
    isbn: str = typer.Option(..., "--isbn", "-i", help="ISBN (book id)"),
    title: str = typer.Option(..., "--title", "-t", help="Book title"),
    author: str = typer.Option(..., "--author", "-a", help="Author name"),
    genre: Optional[str] = typer.Option(None, "--genre", "-g", help="Genre"),
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year published"),
    copies: int = typer.Option(1, "--copies", "-c", help="Copies available"),
) -> None:
    """Add a title to the catalog."""
    try:
        data = BookCreate(
            id=isbn,
            title=title,
            author=author,
            genre=genre,
            published_year=year,
            available=copies,
        )
        book = CatalogManager(get_db()).add_book(data)
    except ValidationError as e:
        print_error(f"Invalid book: {e.errors()[0]['msg']}")
        raise typer.Exit(1)
    except LibraryError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"Added: {book.title} by {book.author} ({book.available} copies)")


@app.command()
def books(
    genre: Optional[str] = typer.Option(None, "--genre", "-g", help="Filter by genre"),
) -> None:
    """List catalog titles with available copies."""
    results = CatalogManager(get_db()).list_books(genre=genre)

    if not results:
        console.print("[dim]No books found[/dim]")
        return

    table = Table(title="Catalog", show_header=True, header_style="bold magenta")
    table.add_column("ISBN", style="dim", no_wrap=True)
    table.add_column("Title", style="cyan", max_width=40)
    table.add_column("Author", style="green", max_width=25)
    table.add_column("Genre")
    table.add_column("Year", justify="right")
    table.add_column("Available", justify="right")

    for book in results:
        available = str(book.available) if book.available else "[red]0[/red]"
        table.add_row(
            book.id,
            book.title,
            book.author,
            book.genre or "-",
            str(book.published_year) if book.published_year else "-",
            available,
        )

    console.print(table)


@app.command()
def ingest(
    file: Path = typer.Argument(..., help="CSV file with catalog rows"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Hide progress bar"),
) -> None:
    """Bulk load books from a CSV file."""
    try:
        result = ingest_books_csv(file, db=get_db(), show_progress=not quiet)
    except LibraryError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"Imported {result.imported} books, skipped {result.skipped}")
    for line_no, message in result.errors:
        print_warning(f"Line {line_no}: {message}")


# ============================================================================
# Membership Commands
# ============================================================================


@app.command("add-user")
def add_user(
    name: str = typer.Option(..., "--name", "-n", help="Full name"),
    email: str = typer.Option(..., "--email", "-e", help="Email address"),
    joined: Optional[str] = typer.Option(None, "--joined", "-j", help="Membership date (YYYY-MM-DD)"),
) -> None:
    """Register a library member."""
    joined_date = parse_date(joined)
    try:
        user = MembershipManager(get_db()).register_user(
            UserCreate(name=name, email=email, joined=joined_date)
        )
    except ValidationError as e:
        print_error(f"Invalid user: {e.errors()[0]['msg']}")
        raise typer.Exit(1)
    except LibraryError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"Registered {user.name} with user id {user.id}")


@app.command()
def users() -> None:
    """List library members."""
    members = MembershipManager(get_db()).list_users()

    if not members:
        console.print("[dim]No users found[/dim]")
        return

    table = Table(title="Members", show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Email", no_wrap=True)
    table.add_column("Joined")

    for user in members:
        table.add_row(str(user.id), user.name, user.email, user.joined)

    console.print(table)


# ============================================================================
# Loan Commands
# ============================================================================


@app.command()
def borrow(
    user_id: int = typer.Argument(..., help="Borrowing user id"),
    book_id: str = typer.Argument(..., help="Book ISBN"),
    today: Optional[str] = typer.Option(None, "--today", help="Loan date (YYYY-MM-DD)"),
) -> None:
    """Lend a copy of a book to a member."""
    ledger = get_ledger()
    try:
        loan_id = ledger.borrow(user_id, book_id, today=parse_date(today))
    except LibraryError as e:
        print_error(str(e))
        raise typer.Exit(1)

    loan = ledger.get_loan(loan_id)
    print_success(f"Loan {loan_id} created")
    console.print(f"[dim]Due: {loan.due_date}[/dim]")


@app.command("return")
def return_(
    loan_id: int = typer.Argument(..., help="Loan id"),
    today: Optional[str] = typer.Option(None, "--today", help="Return date (YYYY-MM-DD)"),
) -> None:
    """Mark a loan as returned."""
    try:
        loan = get_ledger().return_loan(loan_id, today=parse_date(today))
    except LibraryError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"Loan {loan.id} returned on {loan.return_date}")


@app.command()
def loans(
    user_id: int = typer.Argument(..., help="User id"),
) -> None:
    """List a member's loans."""
    try:
        views = get_ledger().list_loans_for_user(user_id)
    except LibraryError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if not views:
        console.print("[dim]No loans found[/dim]")
        return

    table = Table(title=f"Loans for user {user_id}", show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right", no_wrap=True)
    table.add_column("Title", style="cyan", max_width=40)
    table.add_column("Author", style="green", max_width=25)
    table.add_column("Loaned", no_wrap=True)
    table.add_column("Due", no_wrap=True)
    table.add_column("Returned", no_wrap=True)
    table.add_column("Status", no_wrap=True)

    for view in views:
        table.add_row(
            str(view.id),
            view.title,
            view.author,
            view.loan_date.isoformat(),
            view.due_date.isoformat(),
            view.return_date.isoformat() if view.return_date else "-",
            status_badge(view.status.value),
        )

    console.print(table)


@app.command()
def overdue(
    today: Optional[str] = typer.Option(None, "--today", help="Evaluate as of this date"),
) -> None:
    """Show overdue loans."""
    report = get_ledger().overdue_report(today=parse_date(today))

    if not report.loans:
        print_success("No overdue loans!")
        return

    console.print(Panel(
        f"[bold red]Overdue Loans: {report.total_overdue}[/bold red]\n"
        f"Oldest: {report.oldest_overdue_days} days overdue",
        style="red",
    ))

    table = Table(show_header=True, header_style="bold red")
    table.add_column("Loan", justify="right", no_wrap=True)
    table.add_column("Book", style="cyan")
    table.add_column("Borrower", no_wrap=True)
    table.add_column("Loaned", no_wrap=True)
    table.add_column("Due Date", no_wrap=True)
    table.add_column("Days Overdue", justify="right")

    for loan in report.loans:
        table.add_row(
            str(loan.id),
            loan.title,
            loan.user_name,
            loan.loan_date.isoformat(),
            loan.due_date.isoformat(),
            f"[bold red]{loan.days_overdue}[/bold red]",
        )

    console.print(table)


@app.command("mark-overdue")
def mark_overdue(
    today: Optional[str] = typer.Option(None, "--today", help="Evaluate as of this date"),
) -> None:
    """Record past-due borrowed loans as overdue."""
    count = get_ledger().mark_overdue(today=parse_date(today))
    print_success(f"Marked {count} loans overdue")


@app.command()
def stats() -> None:
    """Show loan statistics."""
    summary = get_ledger().get_stats()

    table = Table(title="Loan Statistics", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total loans", str(summary.total_loans))
    table.add_row("Open", str(summary.open_loans))
    table.add_row("Returned", str(summary.returned_loans))
    table.add_row("Overdue", str(summary.overdue_loans))
    table.add_row("Borrowers with open loans", str(summary.borrowers_with_open_loans))

    console.print(table)


if __name__ == "__main__":
    app()
