import logging
from typing import Any, Dict, List, Optional

import httpx

from config import settings

logger = logging.getLogger(__name__)


class ShelfAPIError(Exception):
    """The API answered with a non-success envelope."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ShelfServiceUnavailable(Exception):
    """The API could not be reached."""


class ShelfClient:
    """Synchronous client for a running bookshelf API."""

    def __init__(self, client: Optional[httpx.Client] = None) -> None:
        if client is None:
            headers = {"X-API-Key": settings.api_key} if settings.api_key else {}
            client = httpx.Client(
                base_url=settings.api_base_url,
                timeout=httpx.Timeout(settings.client_timeout, connect=5.0),
                headers=headers,
            )
        self._client = client

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            logger.error(f"{method} {url} failed: {exc}")
            raise ShelfServiceUnavailable(f"Bookshelf API unreachable at {settings.api_base_url}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.status_code >= 400 or body.get("status") != "success":
            message = body.get("message") or f"HTTP {response.status_code}"
            raise ShelfAPIError(response.status_code, message)
        return body

    def add_book(self, payload: Dict[str, Any]) -> str:
        body = self._request("POST", "/books", json=payload)
        return body["data"]["bookId"]

    def list_books(self, name: Optional[str] = None, reading: Optional[bool] = None,
                   finished: Optional[bool] = None) -> List[Dict[str, Any]]:
        params: Dict[str, str] = {}
        if name is not None:
            params["name"] = name
        if reading is not None:
            params["reading"] = "1" if reading else "0"
        if finished is not None:
            params["finished"] = "1" if finished else "0"
        body = self._request("GET", "/books", params=params)
        return body["data"]["books"]

    def get_book(self, book_id: str) -> Dict[str, Any]:
        body = self._request("GET", f"/books/{book_id}")
        return body["data"]["book"]

    def update_book(self, book_id: str, payload: Dict[str, Any]) -> str:
        body = self._request("PUT", f"/books/{book_id}", json=payload)
        return body.get("message", "")

    def delete_book(self, book_id: str) -> str:
        body = self._request("DELETE", f"/books/{book_id}")
        return body.get("message", "")

    def get_statistics(self) -> Dict[str, int]:
        body = self._request("GET", "/stats")
        return body["data"]

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def get_shelf_client() -> ShelfClient:
    return ShelfClient()
