from __future__ import annotations

import os

# Point the app at an in-memory database before any app module reads settings
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["CSRF_ENABLED"] = "true"

from collections.abc import Callable, Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.main import app
from app.services.category_service import CategoryService
from app.services.product_service import ProductService


@pytest.fixture
def tables() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(tables: None) -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(tables: None) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def csrf_token(client: TestClient) -> str:
    """Token handed out by the page, bound to the client's session cookie."""
    response = client.get("/categories", headers={"X-Inertia": "true"})
    assert response.status_code == 200
    return response.json()["props"]["csrf_token"]


@pytest.fixture
def auth_headers(csrf_token: str) -> dict[str, str]:
    return {"X-CSRF-TOKEN": csrf_token, "Accept": "application/json"}


@pytest.fixture
def category_service(db: Session) -> CategoryService:
    return CategoryService(db)


@pytest.fixture
def product_service(db: Session) -> ProductService:
    return ProductService(db)


@pytest.fixture
def category_payload() -> Callable[..., dict[str, Any]]:
    def _make(**overrides: Any) -> dict[str, Any]:
        payload = {"name": "Electronics", "description": None, "color": "#1E90FF", "active": True}
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def product_payload() -> Callable[..., dict[str, Any]]:
    def _make(**overrides: Any) -> dict[str, Any]:
        payload = {
            "name": "Cable",
            "description": "USB-C to USB-C, 1m",
            "price": 9.99,
            "stock": 100,
            "status": "active",
            "category_id": None,
        }
        payload.update(overrides)
        return payload

    return _make
