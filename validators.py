from typing import Optional

TRUE_FLAGS = frozenset({"1", "true", "yes", "on"})
FALSE_FLAGS = frozenset({"0", "false", "no", "off"})


class BookshelfError(Exception):
    """Base class for errors raised by the bookshelf domain."""


class MissingNameError(BookshelfError, ValueError):
    def __init__(self, message: str = "Please provide the book name") -> None:
        super().__init__(message)


class InvalidPageRangeError(BookshelfError, ValueError):
    def __init__(self, message: str = "readPage cannot be greater than pageCount") -> None:
        super().__init__(message)


class InvalidFlagError(BookshelfError, ValueError):
    pass


class BookValidator:
    """Business rules applied to every write (create and update)."""

    @staticmethod
    def validate_name(name: Optional[str]) -> None:
        if name is None or not str(name).strip():
            raise MissingNameError()

    @staticmethod
    def validate_page_range(page_count: int, read_page: int) -> None:
        if read_page > page_count:
            raise InvalidPageRangeError()

    @staticmethod
    def validate(name: Optional[str], page_count: int, read_page: int) -> None:
        # Name first, then page range
        BookValidator.validate_name(name)
        BookValidator.validate_page_range(page_count, read_page)


def parse_flag(value: Optional[str], field: str = "flag") -> Optional[bool]:
    """Parse a query-string flag into a boolean.

    - None: the filter was not supplied, returns None
    - '1', 'true', 'yes', 'on' (any case): True
    - '0', 'false', 'no', 'off' (any case): False
    Anything else raises InvalidFlagError.
    """
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in TRUE_FLAGS:
        return True
    if normalized in FALSE_FLAGS:
        return False
    raise InvalidFlagError(f"Invalid value for '{field}': {value!r}. Use 0 or 1.")
