import os
import json
from typing import List, Any
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()

def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode

def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()

def _rich_table(title: str, columns: List[str], rows: List[List[str]]) -> None:
    table = Table(title=title, show_lines=True, header_style="bold cyan")
    for name in columns:
        table.add_column(name, style="white")
    for row in rows:
        table.add_row(*row)
    _console.print(table)

def print_users_result(users: List[Any]) -> None:
    """Print users for the current output mode.
    - plain: 'ID - Name (age)' lines, or 'No users registered.'
    - json: array of id, name, age
    - rich: Rich table
    """
    if not users:
        print("No users registered.")
        return

    mode = get_output_mode()
    if mode == "json":
        print(json.dumps([u.to_dict() for u in users], ensure_ascii=False))
    elif mode == "rich":
        rows = [[str(u.id), u.name, "" if u.age is None else str(u.age)] for u in users]
        _rich_table("👤 Users", ["ID", "Name", "Age"], rows)
    else:
        for u in users:
            age = "-" if u.age is None else u.age
            print(f"{u.id} - {u.name} ({age})")

def print_books_result(books: List[Any]) -> None:
    if not books:
        print("No books in library.")
        return

    mode = get_output_mode()
    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        rows = [[str(b.id), b.name, b.type.value] for b in books]
        _rich_table("📚 Books", ["ID", "Name", "Category"], rows)
    else:
        for b in books:
            print(f"{b.id} - {b.name} [{b.type.value}]")

def print_stats_result(stats: List[Any]) -> None:
    """Print per-category book counts.
    - plain: 'CATEGORY: count' lines
    - json: JSON array of {type, count}
    - rich: Panel with one line per category
    """
    if not stats:
        print("No statistics available.")
        return

    mode = get_output_mode()
    if mode == "json":
        print(json.dumps([s.to_dict() for s in stats], ensure_ascii=False))
    elif mode == "rich":
        content = "\n".join(f"[bold]{s.type.value}:[/] {s.count}" for s in stats)
        _console.print(Panel.fit(content, title="📊 Books per category", border_style="blue"))
    else:
        for s in stats:
            print(f"{s.type.value}: {s.count}")

def print_loaned_count(count: int) -> None:
    mode = get_output_mode()
    if mode == "json":
        print(json.dumps({"loaned": count}))
    elif mode == "rich":
        _console.print(Panel.fit(f"[bold]Books on loan:[/] {count}", border_style="blue"))
    else:
        print(f"Books on loan: {count}")
