import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Security
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookshelf import Bookshelf, BookNotFoundError, InsertFailureError, utc_timestamp
from config import settings
from validators import InvalidFlagError, parse_flag

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

bookshelf = Bookshelf()

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.app_name} {settings.app_version} starting, shelf holds {len(bookshelf)} books")
    yield
    logger.info(f"{settings.app_name} shutting down, {len(bookshelf)} books discarded")

app = FastAPI(title=settings.app_name, version=settings.app_version, debug=settings.debug, lifespan=lifespan)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    return response

# --- Error envelopes ---
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "fail", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed payloads get the same 400 envelope as business-rule failures."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = " ".join(part for part in (location, first.get("msg", "")) if part)
        message = f"Invalid request: {detail}" if detail else "Invalid request"
    else:
        message = "Invalid request"
    logger.warning(f"{request.method} {request.url.path} rejected: {message}")
    return JSONResponse(status_code=400, content={"status": "fail", "message": message})

# --- Security ---
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

def get_api_key(api_key: Optional[str] = Security(api_key_header)):
    """Require X-API-Key on writes, but only when an API key is configured."""
    if settings.api_key is None or api_key == settings.api_key:
        return api_key
    raise HTTPException(
        status_code=403,
        detail="Could not validate credentials",
    )

# --- Models ---
class BookPayloadModel(BaseModel):
    name: Optional[str] = None
    year: Optional[int] = None
    author: Optional[str] = None
    summary: Optional[str] = None
    publisher: Optional[str] = None
    pageCount: int = Field(default=0, ge=0)
    readPage: int = Field(default=0, ge=0)
    reading: bool = False

    def to_kwargs(self) -> dict:
        return {
            "year": self.year,
            "author": self.author,
            "summary": self.summary,
            "publisher": self.publisher,
            "page_count": self.pageCount,
            "read_page": self.readPage,
            "reading": self.reading,
        }

# --- Health ---
@app.get("/health")
def health():
    return {
        "status": "healthy",
        "timestamp": utc_timestamp(),
        "total_books": len(bookshelf),
    }

@app.get("/stats")
def get_bookshelf_stats():
    return {"status": "success", "data": bookshelf.get_statistics()}

# --- Books ---
@app.post("/books", status_code=201, dependencies=[Depends(get_api_key)])
def add_book(payload: BookPayloadModel):
    """Add a new book to the shelf."""
    try:
        book_id = bookshelf.add_book(payload.name, **payload.to_kwargs())
    except InsertFailureError:
        raise HTTPException(status_code=500, detail="Book failed to be added")
    except ValueError as e:
        logger.warning(f"Add rejected: {e}")
        raise HTTPException(status_code=400, detail=f"Failed to add book. {e}")
    return {
        "status": "success",
        "message": "Book added successfully",
        "data": {"bookId": book_id},
    }

@app.get("/books")
def get_books(
    name: Optional[str] = Query(None, description="Case-insensitive substring of the book name"),
    reading: Optional[str] = Query(None, description="0 or 1"),
    finished: Optional[str] = Query(None, description="0 or 1"),
):
    """List books, optionally filtered by name, reading and finished."""
    try:
        reading_flag = parse_flag(reading, "reading")
        finished_flag = parse_flag(finished, "finished")
    except InvalidFlagError as e:
        raise HTTPException(status_code=400, detail=str(e))
    books = bookshelf.list_books(name=name, reading=reading_flag, finished=finished_flag)
    return {"status": "success", "data": {"books": books}}

@app.get("/books/{book_id}")
def get_book(book_id: str):
    try:
        book = bookshelf.get_book(book_id)
    except BookNotFoundError:
        raise HTTPException(status_code=404, detail="Book not found")
    return {"status": "success", "data": {"book": book.to_dict()}}

@app.put("/books/{book_id}", dependencies=[Depends(get_api_key)])
def update_book(book_id: str, payload: BookPayloadModel):
    """Replace every mutable field of a book."""
    try:
        bookshelf.update_book(book_id, payload.name, **payload.to_kwargs())
    except BookNotFoundError:
        raise HTTPException(status_code=404, detail="Failed to update book. Id not found")
    except ValueError as e:
        logger.warning(f"Update of {book_id} rejected: {e}")
        raise HTTPException(status_code=400, detail=f"Failed to update book. {e}")
    return {"status": "success", "message": "Book updated successfully"}

@app.delete("/books/{book_id}", dependencies=[Depends(get_api_key)])
def delete_book(book_id: str):
    try:
        bookshelf.remove_book(book_id)
    except BookNotFoundError:
        raise HTTPException(status_code=404, detail="Failed to delete book. Id not found")
    return {"status": "success", "message": "Book deleted successfully"}
