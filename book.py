from __future__ import annotations


class Book:
    """Represents a single book record on the shelf."""

    def __init__(self, id: str, name: str, year: int | None = None, author: str | None = None,
                 summary: str | None = None, publisher: str | None = None,
                 page_count: int = 0, read_page: int = 0, reading: bool = False,
                 inserted_at: str | None = None, updated_at: str | None = None) -> None:
        self.id = id
        self.name = name
        self.year = year
        self.author = author
        self.summary = summary
        self.publisher = publisher
        self.page_count = page_count
        self.read_page = read_page
        self.reading = reading
        self.inserted_at = inserted_at
        self.updated_at = updated_at

    @property
    def finished(self) -> bool:
        return self.read_page == self.page_count

    def __str__(self) -> str:
        return f"{self.name} ({self.read_page}/{self.page_count} pages, id: {self.id})"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "year": self.year,
            "author": self.author,
            "summary": self.summary,
            "publisher": self.publisher,
            "pageCount": self.page_count,
            "readPage": self.read_page,
            "finished": self.finished,
            "reading": self.reading,
            "insertedAt": self.inserted_at,
            "updatedAt": self.updated_at,
        }

    def to_summary(self) -> dict:
        """Projection returned by list queries."""
        return {"id": self.id, "name": self.name, "publisher": self.publisher}

