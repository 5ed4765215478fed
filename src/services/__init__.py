"""Database engine and session factory for the ledger services."""

import os
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.services.config import DEFAULT_DATABASE_URL


def make_engine(database_url: str) -> Engine:
    """Create an engine for ``database_url``.

    SQLite engines share a single connection (StaticPool), so an in-memory
    database stays visible to every session.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, pool_pre_ping=True)


DATABASE_URL = os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL

engine = make_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a session and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


__all__ = [
    "DATABASE_URL",
    "engine",
    "make_engine",
    "SessionLocal",
    "get_db",
]
