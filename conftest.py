import pytest
from fastapi.testclient import TestClient

import api as api_module
from bookshelf import Bookshelf
from config import settings
from ui_helpers import OUTPUT_MODE_ENV


@pytest.fixture
def shelf():
    return Bookshelf()


@pytest.fixture
def client(monkeypatch):
    # Every test starts from an empty, open shelf
    api_module.bookshelf.clear()
    monkeypatch.setattr(settings, "api_key", None)
    with TestClient(api_module.app) as test_client:
        yield test_client
    api_module.bookshelf.clear()


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    monkeypatch.setenv(OUTPUT_MODE_ENV, "plain")
