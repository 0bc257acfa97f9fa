import logging
import subprocess
import sys
from typing import Optional

import typer
from rich.console import Console

from libraryapp.book import BookType
from libraryapp.config import settings
from libraryapp.errors import LibraryError, NotFoundError
from libraryapp.services import BookService, UserService
from libraryapp.ui_helpers import (
    print_books_result,
    print_loaned_count,
    print_stats_result,
    print_users_result,
    set_output_mode,
)

APP_NAME = "Library CLI"

console = Console()

# --- Typer CLI application ---
app = typer.Typer(help=APP_NAME)

@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global CLI options (e.g. output mode)."""
    logging.basicConfig(level=settings.log_level)
    if output:
        set_output_mode(output)

def _report(error: LibraryError) -> None:
    if isinstance(error, NotFoundError):
        print(f"Not found: {error.message}")
    else:
        print(f"Error: {error.message}")

# --- Users ---
@app.command("user-add")
def cli_user_add(name: str, age: Optional[int] = typer.Option(None, "--age", help="Age of the user")):
    """Register a new user."""
    try:
        user = UserService().create(name, age)
        print(f"User added: {user.name} (id={user.id})")
    except LibraryError as e:
        _report(e)

@app.command("user-rename")
def cli_user_rename(user_id: int, name: str):
    """Rename the user with the given id."""
    try:
        user = UserService().update_name(user_id, name)
        print(f"User {user.id} renamed to {user.name}")
    except LibraryError as e:
        _report(e)

@app.command("user-delete")
def cli_user_delete(name: str):
    """Delete a user and their loan history."""
    try:
        UserService().delete(name)
        print(f"User {name} has been removed.")
    except LibraryError as e:
        _report(e)

@app.command("users")
def cli_users():
    """List registered users."""
    print_users_result(UserService().list_users())

# --- Books ---
@app.command("book-add")
def cli_book_add(name: str, category: BookType):
    """Register a new book under a category."""
    try:
        book = BookService().create(name, category)
        print(f"Book added: {book.name} [{book.type.value}]")
    except LibraryError as e:
        _report(e)

@app.command("books")
def cli_books():
    """List registered books."""
    print_books_result(BookService().list_books())

@app.command("loan")
def cli_loan(user_name: str, book_name: str):
    """Lend a book to a user."""
    try:
        BookService().loan(user_name, book_name)
        print(f"{book_name} loaned to {user_name}")
    except LibraryError as e:
        _report(e)

@app.command("return")
def cli_return(user_name: str, book_name: str):
    """Return a loaned book."""
    try:
        BookService().return_book(user_name, book_name)
        print(f"{book_name} returned by {user_name}")
    except LibraryError as e:
        _report(e)

@app.command("loaned")
def cli_loaned():
    """Show how many books are currently on loan."""
    print_loaned_count(BookService().count_loaned())

@app.command("stats")
def cli_stats():
    """Show the number of books per category."""
    print_stats_result(BookService().stats_by_category())

@app.command("serve")
def cli_serve(host: Optional[str] = typer.Option(None, "--host"), port: Optional[int] = typer.Option(None, "--port")):
    """Start the HTTP API with Uvicorn."""
    host = host or settings.api_host
    port = int(port or settings.api_port)
    print(f"Starting API on http://{host}:{port}/")
    args = [
        sys.executable,
        "-m", "uvicorn",
        "libraryapp.api:app",
        "--host", host,
        "--port", str(port),
    ]
    try:
        subprocess.run(args, check=False)
    except KeyboardInterrupt:
        console.print("[yellow]Server stopped.[/]")


if __name__ == "__main__":
    app()
