# inventory/database.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import MetaData, create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from inventory.core.settings import settings

logger = logging.getLogger(__name__)

# -----------------------------
# Helpers
# -----------------------------
def _mask_url(url: str) -> str:
    if "://" not in url:
        return url
    scheme, rest = url.split("://", 1)
    if "@" not in rest or ":" not in rest.split("@", 1)[0]:
        return url
    creds, tail = rest.split("@", 1)
    user = creds.split(":", 1)[0]
    return f"{scheme}://{user}:***@{tail}"

# -----------------------------
# Config
# -----------------------------
DATABASE_URL = settings.DATABASE_URL

# SQLite nu are scheme (în afara ATTACH) → ignorăm DB_SCHEMA acolo
DEFAULT_SCHEMA = None if settings.is_sqlite else settings.DB_SCHEMA

# -----------------------------
# Naming convention (nume stabile pentru constrângeri/indexuri)
# -----------------------------
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(schema=DEFAULT_SCHEMA, naming_convention=NAMING_CONVENTION)
Base = declarative_base(metadata=metadata)

# -----------------------------
# Engine factory
# -----------------------------
def _build_engine_kwargs(url: str) -> dict:
    kwargs: dict = {"echo": settings.DB_ECHO}

    if url.startswith("sqlite"):
        # SQLite: single-thread în driver → dezactivează check_same_thread
        kwargs["connect_args"] = {"check_same_thread": False}
        # In-memory → StaticPool (altfel fiecare conexiune are DB separat)
        if url in {"sqlite://", "sqlite:///:memory:", "sqlite+pysqlite:///:memory:"}:
            kwargs["poolclass"] = StaticPool
        else:
            kwargs["poolclass"] = NullPool
    else:
        # Postgres / MySQL
        kwargs.update(
            {
                "pool_pre_ping": True,
                "pool_use_lifo": True,
                "pool_size": settings.DB_POOL_SIZE,
                "max_overflow": settings.DB_MAX_OVERFLOW,
                "pool_recycle": settings.DB_POOL_RECYCLE,
                "pool_timeout": settings.DB_POOL_TIMEOUT,
            }
        )
        if DEFAULT_SCHEMA:
            kwargs["connect_args"] = {"options": f"-c search_path={DEFAULT_SCHEMA},public"}

    return kwargs

engine: Engine = create_engine(DATABASE_URL, **_build_engine_kwargs(DATABASE_URL))

# -----------------------------
# Session factory
# -----------------------------
# expire_on_commit=False → obiectele rămân utilizabile după commit
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency pentru o sesiune SQLAlchemy închisă garantat.
    Face rollback automat dacă apare o excepție în request handler.
    """
    db: Session = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Context manager pentru scripturi/teste (non-FastAPI).
    Exemplu:
        with session_scope() as db:
            db.add(obj)
    """
    db: Session = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def ping() -> bool:
    with engine.connect() as conn:
        return conn.execute(text("SELECT 1")).scalar_one() == 1

def _ensure_schema() -> None:
    if DEFAULT_SCHEMA:
        with engine.begin() as conn:
            conn.exec_driver_sql(f'CREATE SCHEMA IF NOT EXISTS "{DEFAULT_SCHEMA}"')

def init_db() -> None:
    """
    Creează tabelele din modele (create_all e idempotent).
    Nu există tooling de migrații; schema vine direct din modele.
    """
    from inventory.models import product  # noqa: F401  (înregistrează tabelul în metadata)

    _ensure_schema()
    Base.metadata.create_all(bind=engine)
    logger.info("DB tables ready (url=%s, schema=%s)", _mask_url(DATABASE_URL), DEFAULT_SCHEMA)

def init_db_if_requested() -> None:
    if settings.DB_CREATE_ALL:
        init_db()

__all__ = [
    "engine",
    "SessionLocal",
    "Base",
    "get_db",
    "session_scope",
    "ping",
    "init_db",
    "init_db_if_requested",
]
