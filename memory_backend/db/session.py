from __future__ import annotations

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from memory_backend.core.config import get_settings
from memory_backend.db.base import Base
from memory_backend.db.seed import seed_demo_people

settings = get_settings()
logger = logging.getLogger("memory_backend.db")


def _normalize_database_url(database_url: str) -> str:
    # Hosted PostgreSQL URLs often come without an explicit driver.
    for prefix in ("postgresql://", "postgres://"):
        if database_url.startswith(prefix):
            return f"postgresql+psycopg://{database_url[len(prefix):]}"
    return database_url


def _connect_args(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        # Request handlers run in a threadpool.
        return {"check_same_thread": False}
    return {}


_url = _normalize_database_url(settings.database_url)
engine = create_engine(_url, future=True, pool_pre_ping=True, connect_args=_connect_args(_url))
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


def init_db(seed_demo: bool = False) -> int:
    """Create missing tables and, if asked, the demo people. Returns how many people were seeded."""
    Base.metadata.create_all(bind=engine)
    if not seed_demo:
        return 0
    with SessionLocal() as db:
        return seed_demo_people(db)


def database_reachable() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        return False
    return True


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
