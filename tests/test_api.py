import pytest

import api as api_module
from bookshelf import InsertFailureError
from config import settings


def _add(client, **payload):
    payload.setdefault("name", "Kitab")
    payload.setdefault("pageCount", 100)
    payload.setdefault("readPage", 25)
    response = client.post("/books", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]["bookId"]


def test_add_book(client):
    payload = {
        "name": "Kitab",
        "year": 2010,
        "author": "John Doe",
        "summary": "Lorem ipsum dolor sit amet",
        "publisher": "Dicoding Indonesia",
        "pageCount": 100,
        "readPage": 100,
        "reading": False,
    }
    response = client.post("/books", json=payload)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["message"] == "Book added successfully"
    book_id = body["data"]["bookId"]

    book = client.get(f"/books/{book_id}").json()["data"]["book"]
    for key, value in payload.items():
        assert book[key] == value
    assert book["id"] == book_id
    assert book["finished"] is True
    assert book["insertedAt"] == book["updatedAt"]


def test_add_book_without_name(client):
    response = client.post("/books", json={"pageCount": 10, "readPage": 1})

    assert response.status_code == 400
    assert response.json() == {
        "status": "fail",
        "message": "Failed to add book. Please provide the book name",
    }
    assert client.get("/books").json()["data"]["books"] == []


def test_add_book_with_invalid_page_range(client):
    response = client.post("/books", json={"name": "Bad", "pageCount": 50, "readPage": 60})

    assert response.status_code == 400
    assert response.json() == {
        "status": "fail",
        "message": "Failed to add book. readPage cannot be greater than pageCount",
    }
    assert client.get("/books").json()["data"]["books"] == []


@pytest.mark.parametrize("payload", [
    {"name": "Kitab", "pageCount": -1},
    {"name": "Kitab", "pageCount": "many"},
    {"name": "Kitab", "reading": "sometimes"},
])
def test_malformed_payload(client, payload):
    response = client.post("/books", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "fail"
    assert body["message"].startswith("Invalid request")


def test_add_book_without_body(client):
    response = client.post("/books")

    assert response.status_code == 400
    assert response.json() == {"status": "fail", "message": "Invalid request: Field required"}


def test_malformed_payload_names_the_field(client):
    response = client.post("/books", json={"name": "Kitab", "pageCount": -1})

    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid request: pageCount ")


def test_unknown_route_uses_envelope(client):
    response = client.get("/shelves")

    assert response.status_code == 404
    assert response.json() == {"status": "fail", "message": "Not Found"}


def test_add_book_insert_failure(client, monkeypatch):
    def broken_add(*args, **kwargs):
        raise InsertFailureError("lost")

    monkeypatch.setattr(api_module.bookshelf, "add_book", broken_add)
    response = client.post("/books", json={"name": "Kitab"})

    assert response.status_code == 500
    assert response.json() == {"status": "fail", "message": "Book failed to be added"}


def test_list_books(client):
    first = _add(client, name="Alpha", publisher="Pub A")
    second = _add(client, name="Beta", publisher="Pub B")

    response = client.get("/books")
    assert response.status_code == 200
    assert response.json() == {
        "status": "success",
        "data": {
            "books": [
                {"id": first, "name": "Alpha", "publisher": "Pub A"},
                {"id": second, "name": "Beta", "publisher": "Pub B"},
            ]
        },
    }


def test_list_books_empty(client):
    response = client.get("/books")
    assert response.status_code == 200
    assert response.json() == {"status": "success", "data": {"books": []}}


def test_list_books_filters(client):
    reading = _add(client, name="Dicoding Academy", reading=True, pageCount=10, readPage=2)
    finished = _add(client, name="Finished Story", reading=False, pageCount=10, readPage=10)

    def ids(query):
        response = client.get(f"/books?{query}")
        assert response.status_code == 200
        return [b["id"] for b in response.json()["data"]["books"]]

    assert ids("reading=1") == [reading]
    assert ids("reading=0") == [finished]
    assert ids("finished=1") == [finished]
    assert ids("finished=0") == [reading]
    assert ids("name=dICODING") == [reading]
    assert ids("name=story&finished=1&reading=0") == [finished]
    assert ids("name=story&reading=1") == []


def test_list_books_rejects_bad_flag(client):
    response = client.get("/books?finished=maybe")

    assert response.status_code == 400
    assert response.json()["status"] == "fail"
    assert "finished" in response.json()["message"]


def test_get_book_not_found(client):
    response = client.get("/books/xxxxx")

    assert response.status_code == 404
    assert response.json() == {"status": "fail", "message": "Book not found"}


def test_update_book(client):
    book_id = _add(client, name="Old", publisher="Old Pub")
    inserted_at = client.get(f"/books/{book_id}").json()["data"]["book"]["insertedAt"]

    response = client.put(f"/books/{book_id}", json={
        "name": "New",
        "publisher": "New Pub",
        "pageCount": 200,
        "readPage": 200,
        "reading": True,
    })
    assert response.status_code == 200
    assert response.json() == {"status": "success", "message": "Book updated successfully"}

    book = client.get(f"/books/{book_id}").json()["data"]["book"]
    assert book["name"] == "New"
    assert book["publisher"] == "New Pub"
    assert book["finished"] is True
    assert book["reading"] is True
    assert book["insertedAt"] == inserted_at


def test_update_book_validation(client):
    book_id = _add(client)

    response = client.put(f"/books/{book_id}", json={"pageCount": 10, "readPage": 1})
    assert response.status_code == 400
    assert response.json()["message"] == "Failed to update book. Please provide the book name"

    response = client.put(f"/books/{book_id}", json={"name": "Kitab", "pageCount": 10, "readPage": 11})
    assert response.status_code == 400
    assert response.json()["message"] == "Failed to update book. readPage cannot be greater than pageCount"


def test_update_book_not_found(client):
    response = client.put("/books/xxxxx", json={"name": "Kitab", "pageCount": 10, "readPage": 1})

    assert response.status_code == 404
    assert response.json() == {"status": "fail", "message": "Failed to update book. Id not found"}


def test_delete_book(client):
    keep = _add(client, name="Keep")
    drop = _add(client, name="Drop")

    response = client.delete(f"/books/{drop}")
    assert response.status_code == 200
    assert response.json() == {"status": "success", "message": "Book deleted successfully"}

    books = client.get("/books").json()["data"]["books"]
    assert [b["id"] for b in books] == [keep]
    assert client.get(f"/books/{drop}").status_code == 404


def test_delete_book_not_found(client):
    response = client.delete("/books/xxxxx")

    assert response.status_code == 404
    assert response.json() == {"status": "fail", "message": "Failed to delete book. Id not found"}


def test_bookshelf_scenario(client):
    kitab = _add(client, name="Kitab", pageCount=100, readPage=100, reading=True)
    assert client.get(f"/books/{kitab}").json()["data"]["book"]["finished"] is True

    bad = client.post("/books", json={"name": "Bad", "pageCount": 50, "readPage": 60})
    assert bad.status_code == 400

    idle = _add(client, name="Idle", pageCount=10, readPage=0, reading=False)
    reading_books = client.get("/books?reading=1").json()["data"]["books"]
    assert reading_books == [{"id": kitab, "name": "Kitab", "publisher": None}]

    missing = client.put("/books/nonexistent", json={"name": "Kitab", "pageCount": 1, "readPage": 1})
    assert missing.status_code == 404

    assert client.delete(f"/books/{idle}").status_code == 200
    remaining = client.get("/books").json()["data"]["books"]
    assert [b["id"] for b in remaining] == [kitab]


def test_api_key_protects_writes(client, monkeypatch):
    monkeypatch.setattr(settings, "api_key", "super-secret-key")

    response = client.post("/books", json={"name": "Kitab"}, headers={"X-API-Key": "invalid-key"})
    assert response.status_code == 403
    assert response.json() == {"status": "fail", "message": "Could not validate credentials"}

    response = client.post("/books", json={"name": "Kitab"}, headers={"X-API-Key": "super-secret-key"})
    assert response.status_code == 201

    # Reads stay open
    assert client.get("/books").status_code == 200


def test_health_and_stats(client):
    _add(client, reading=True, pageCount=10, readPage=10)

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"
    assert health.json()["total_books"] == 1
    assert health.headers["X-Content-Type-Options"] == "nosniff"

    stats = client.get("/stats").json()
    assert stats == {
        "status": "success",
        "data": {"total_books": 1, "reading_books": 1, "finished_books": 1},
    }
