from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from bto.core.config import get_settings


def make_engine(database_url: str, busy_timeout: int = 30) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # sessions are handed across threadpool workers
        connect_args = {"check_same_thread": False, "timeout": busy_timeout}
    return create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args=connect_args,
        future=True,
    )


settings = get_settings()

engine = make_engine(settings.database_url, settings.sqlite_busy_timeout_seconds)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    future=True,
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    All-or-nothing unit of work: commit on success, roll back on any error.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
