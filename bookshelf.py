import copy
import logging
import secrets
import string
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Dict, List, Optional, Set

from book import Book
from config import settings
from validators import BookValidator, BookshelfError, InvalidPageRangeError, MissingNameError

logger = logging.getLogger(__name__)

# URL-safe alphabet, 64 symbols
ID_ALPHABET = string.ascii_letters + string.digits + "_-"


class BookNotFoundError(BookshelfError, LookupError):
    def __init__(self, book_id: str) -> None:
        super().__init__(f"Book with id {book_id} not found.")
        self.book_id = book_id


class InsertFailureError(BookshelfError, RuntimeError):
    pass


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision, e.g. 2024-01-01T10:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Bookshelf:
    """Owns the in-memory, insertion-ordered collection of books."""

    def __init__(self, id_length: Optional[int] = None) -> None:
        self.id_length = id_length or settings.book_id_length
        self.books: List[Book] = []
        # Every id ever issued, so deleted ids are never handed out again
        self._issued_ids: Set[str] = set()
        self._lock = RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self.books)

    # ------------------------- Core operations ------------------------- #
    def add_book(self, name: Optional[str], *, year: Optional[int] = None, author: Optional[str] = None,
                 summary: Optional[str] = None, publisher: Optional[str] = None,
                 page_count: int = 0, read_page: int = 0, reading: bool = False) -> str:
        """Validate and append a new book. Returns the generated id."""
        BookValidator.validate(name, page_count, read_page)

        with self._lock:
            book_id = self._generate_id()
            inserted_at = utc_timestamp()
            book = Book(
                id=book_id,
                name=name,
                year=year,
                author=author,
                summary=summary,
                publisher=publisher,
                page_count=page_count,
                read_page=read_page,
                reading=reading,
                inserted_at=inserted_at,
                updated_at=inserted_at,
            )
            self.books.append(book)

            if self._index_of(book_id) == -1:
                logger.error(f"Book {book_id} missing right after insert")
                raise InsertFailureError(f"Book {book_id} could not be stored.")

        logger.info(f"Book added: {book}")
        return book_id

    def list_books(self, *, name: Optional[str] = None, reading: Optional[bool] = None,
                   finished: Optional[bool] = None) -> List[Dict[str, Any]]:
        """Return {id, name, publisher} for every book passing all supplied filters."""
        with self._lock:
            books = self.books
            if name is not None:
                needle = name.lower()
                books = [b for b in books if needle in b.name.lower()]
            if reading is not None:
                books = [b for b in books if b.reading == reading]
            if finished is not None:
                books = [b for b in books if b.finished == finished]

            return [b.to_summary() for b in books]

    def get_book(self, book_id: str) -> Book:
        """Return a copy of the book with the given id."""
        with self._lock:
            index = self._index_of(book_id)
            if index == -1:
                raise BookNotFoundError(book_id)
            return copy.copy(self.books[index])

    def update_book(self, book_id: str, name: Optional[str], *, year: Optional[int] = None,
                    author: Optional[str] = None, summary: Optional[str] = None,
                    publisher: Optional[str] = None, page_count: int = 0, read_page: int = 0,
                    reading: bool = False) -> None:
        """Replace every mutable field of a book and refresh its updatedAt."""
        BookValidator.validate(name, page_count, read_page)

        with self._lock:
            index = self._index_of(book_id)
            if index == -1:
                logger.warning(f"Update rejected, unknown id {book_id}")
                raise BookNotFoundError(book_id)

            book = self.books[index]
            book.name = name
            book.year = year
            book.author = author
            book.summary = summary
            book.publisher = publisher
            book.page_count = page_count
            book.read_page = read_page
            book.reading = reading
            book.updated_at = utc_timestamp()

        logger.info(f"Book updated: id={book_id}")

    def remove_book(self, book_id: str) -> None:
        with self._lock:
            index = self._index_of(book_id)
            if index == -1:
                logger.warning(f"Delete rejected, unknown id {book_id}")
                raise BookNotFoundError(book_id)
            del self.books[index]

        logger.info(f"Book removed: id={book_id}")

    def get_statistics(self) -> Dict[str, int]:
        with self._lock:
            return {
                "total_books": len(self.books),
                "reading_books": sum(1 for b in self.books if b.reading),
                "finished_books": sum(1 for b in self.books if b.finished),
            }

    def clear(self) -> None:
        """Drop every book. Issued ids stay reserved."""
        with self._lock:
            self.books.clear()

    # ------------------------- Utilities ------------------------- #
    def _index_of(self, book_id: str) -> int:
        for index, book in enumerate(self.books):
            if book.id == book_id:
                return index
        return -1

    def _generate_id(self) -> str:
        while True:
            candidate = "".join(secrets.choice(ID_ALPHABET) for _ in range(self.id_length))
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate


__all__ = [
    "Bookshelf",
    "BookshelfError",
    "BookNotFoundError",
    "InsertFailureError",
    "InvalidPageRangeError",
    "MissingNameError",
    "utc_timestamp",
]
