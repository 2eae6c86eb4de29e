import subprocess
import sys
from typing import Any, Dict, Optional

import typer

from config import settings
from shelf_client import ShelfAPIError, ShelfServiceUnavailable, get_shelf_client
from ui_helpers import set_output_mode, print_list_result, print_book_result, print_stats_result

APP_NAME = "Bookshelf CLI"

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
    if output:
        set_output_mode(output)

def _fail(message: str) -> None:
    print(message)
    raise typer.Exit(code=1)

def _call(operation, *args, **kwargs):
    """Run a client call, turning API and connection failures into a CLI error."""
    try:
        with get_shelf_client() as client:
            return operation(client, *args, **kwargs)
    except ShelfAPIError as e:
        _fail(f"Error: {e.message}")
    except ShelfServiceUnavailable as e:
        _fail(f"Connection error: {e}")

def _payload(name: str, year: Optional[int], author: Optional[str], summary: Optional[str],
             publisher: Optional[str], page_count: int, read_page: int, reading: bool) -> Dict[str, Any]:
    return {
        "name": name,
        "year": year,
        "author": author,
        "summary": summary,
        "publisher": publisher,
        "pageCount": page_count,
        "readPage": read_page,
        "reading": reading,
    }

@app.command("serve")
def cli_serve(
    host: str = typer.Option(settings.api_host, "--host", help="Bind address"),
    port: int = typer.Option(settings.api_port, "--port", help="Bind port"),
):
    """Start the bookshelf API with uvicorn."""
    print(f"Starting bookshelf API on http://{host}:{port}/")
    args = [
        sys.executable,
        "-m", "uvicorn",
        "api:app",
        "--host", host,
        "--port", str(port),
    ]
    try:
        subprocess.run(args, check=False)
    except KeyboardInterrupt:
        print("Server stopped.")

@app.command("list")
def cli_list(
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Filter by part of the name (case-insensitive)"),
    reading: Optional[bool] = typer.Option(None, "--reading/--not-reading", help="Filter by reading flag"),
    finished: Optional[bool] = typer.Option(None, "--finished/--unfinished", help="Filter by finished state"),
):
    """List books on the shelf."""
    books = _call(lambda c: c.list_books(name=name, reading=reading, finished=finished))
    print_list_result(books)

@app.command("show")
def cli_show(book_id: str):
    """Show every field of a book."""
    book = _call(lambda c: c.get_book(book_id))
    print_book_result(book)

@app.command("add")
def cli_add(
    name: str,
    year: Optional[int] = typer.Option(None, "--year"),
    author: Optional[str] = typer.Option(None, "--author", "-a"),
    summary: Optional[str] = typer.Option(None, "--summary"),
    publisher: Optional[str] = typer.Option(None, "--publisher", "-p"),
    page_count: int = typer.Option(0, "--page-count", min=0),
    read_page: int = typer.Option(0, "--read-page", min=0),
    reading: bool = typer.Option(False, "--reading/--not-reading"),
):
    """Add a book to the shelf."""
    payload = _payload(name, year, author, summary, publisher, page_count, read_page, reading)
    book_id = _call(lambda c: c.add_book(payload))
    print(f"Book added: {book_id}")

@app.command("update")
def cli_update(
    book_id: str,
    name: str,
    year: Optional[int] = typer.Option(None, "--year"),
    author: Optional[str] = typer.Option(None, "--author", "-a"),
    summary: Optional[str] = typer.Option(None, "--summary"),
    publisher: Optional[str] = typer.Option(None, "--publisher", "-p"),
    page_count: int = typer.Option(0, "--page-count", min=0),
    read_page: int = typer.Option(0, "--read-page", min=0),
    reading: bool = typer.Option(False, "--reading/--not-reading"),
):
    """Replace every field of a book. Omitted options are cleared."""
    payload = _payload(name, year, author, summary, publisher, page_count, read_page, reading)
    message = _call(lambda c: c.update_book(book_id, payload))
    print(message)

@app.command("remove")
def cli_remove(book_id: str):
    """Delete a book by id."""
    message = _call(lambda c: c.delete_book(book_id))
    print(message)

@app.command("stats")
def cli_stats():
    """Show shelf statistics."""
    stats = _call(lambda c: c.get_statistics())
    print_stats_result(stats)

if __name__ == "__main__":
    app()
