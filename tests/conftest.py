# tests/conftest.py
import os
import sys

import pytest
from fastapi.testclient import TestClient

# ensure project root is importable
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from wishlist_api.main import app  # noqa: E402
from wishlist_api.api.deps import get_db  # noqa: E402
from wishlist_api.database import FileBackedDB  # noqa: E402
from wishlist_api.db.wishlist_repository import WishlistRepository  # noqa: E402
from wishlist_api.services.wishlist import WishlistService  # noqa: E402


@pytest.fixture
def file_db(tmp_path):
    """
    A FileBackedDB rooted in a per-test temp directory, so tests never touch
    local developer data or each other's tables.
    """
    return FileBackedDB(tmp_path / "data")


@pytest.fixture
def repository(file_db):
    return WishlistRepository(file_db)


@pytest.fixture
def service(repository):
    return WishlistService(repository, max_items=20, max_attempts=3)


@pytest.fixture
def client(file_db):
    app.dependency_overrides[get_db] = lambda: file_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def product_data():
    """
    Build product request data.
    Usage: item = product_data(quantity=2, product_id="1234")
    """
    def _fn(quantity=1, product_id="1234", product_name="teste"):
        return {"product_id": product_id, "product_name": product_name, "quantity": quantity}
    return _fn
