import os
import json
from typing import List, Any, Dict
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "SHELF_CLI_OUTPUT"

_console = Console()

def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode

def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()

def print_list_result(books: List[Dict[str, Any]]) -> None:
    """Print book projections in the current output mode.
    - plain: 'id - name (publisher)' lines, or 'No books on the shelf.'
    - json: JSON array of id, name, publisher
    - rich: Rich table
    """
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps(books, ensure_ascii=False))
        return

    if not books:
        print("No books on the shelf.")
        return

    if mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Publisher", style="white")
        for b in books:
            table.add_row(b.get("id", ""), b.get("name", ""), b.get("publisher") or "-")
        _console.print(table)
    else:
        for b in books:
            publisher = b.get("publisher") or "unknown publisher"
            print(f"{b.get('id', '')} - {b.get('name', '')} ({publisher})")

def print_book_result(book: Dict[str, Any]) -> None:
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps(book, ensure_ascii=False))
        return

    lines = [
        ("Name", book.get("name")),
        ("Author", book.get("author")),
        ("Year", book.get("year")),
        ("Publisher", book.get("publisher")),
        ("Summary", book.get("summary")),
        ("Progress", f"{book.get('readPage', 0)}/{book.get('pageCount', 0)}"),
        ("Reading", "yes" if book.get("reading") else "no"),
        ("Finished", "yes" if book.get("finished") else "no"),
        ("Inserted", book.get("insertedAt")),
        ("Updated", book.get("updatedAt")),
    ]
    if mode == "rich":
        content = "\n".join(f"[bold]{label}:[/] {value if value is not None else '-'}" for label, value in lines)
        _console.print(Panel.fit(content, title=f"📖 {book.get('id', '')}", border_style="blue"))
    else:
        print(f"ID: {book.get('id', '')}")
        for label, value in lines:
            print(f"{label}: {value if value is not None else '-'}")

def print_stats_result(stats: Dict[str, Any]) -> None:
    mode = get_output_mode()

    total = stats.get("total_books", 0)
    reading = stats.get("reading_books", 0)
    finished = stats.get("finished_books", 0)

    if mode == "json":
        print(json.dumps({"total_books": total, "reading_books": reading, "finished_books": finished}))
    elif mode == "rich":
        content = f"[bold]Total Books:[/] {total}\n[bold]Reading:[/] {reading}\n[bold]Finished:[/] {finished}"
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        print(f"Total Books: {total}")
        print(f"Reading: {reading}")
        print(f"Finished: {finished}")
