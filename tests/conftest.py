# tests/conftest.py
from __future__ import annotations

import os

# DB in-memory (StaticPool) — setat înainte de importul aplicației
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["DB_CREATE_ALL"] = "1"

from typing import Iterator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from inventory.database import Base, engine, init_db, session_scope  # noqa: E402
from inventory.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_tables() -> Iterator[None]:
    """Fiecare test pornește cu tabelul gol (și id-uri de la 1)."""
    Base.metadata.drop_all(bind=engine)
    init_db()
    yield


@pytest.fixture()
def db() -> Iterator[Session]:
    with session_scope() as session:
        yield session


@pytest.fixture()
def client() -> Iterator[TestClient]:
    """Client HTTP (httpx) peste aplicația ASGI; rulează și lifespan-ul."""
    with TestClient(app) as c:
        yield c
