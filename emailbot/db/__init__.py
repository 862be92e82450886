"""Database package: engine, session factory and session context manager."""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from emailbot.db.base import Base

# Import all models so Base.metadata has all tables
from emailbot.db.models import DraftRecord  # noqa: F401
from emailbot.utils.logger import get_logger

logger = get_logger("emailbot.db")


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite://"))


def create_db_engine(url: str) -> Engine:
    """Create engine with check_same_thread=False so sync-bridge threads can share SQLite."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if _is_memory_sqlite(url):
            # One shared connection, otherwise each checkout sees an empty database
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=False, **kwargs)
    return create_engine(url, echo=False, pool_pre_ping=True)


class Database:
    """Engine plus session factory for one DATABASE_URL. Tables are created on construction."""

    def __init__(self, url: str):
        self.url = url
        self.engine = create_db_engine(url)
        Base.metadata.create_all(bind=self.engine)
        self._session_factory = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)
        logger.info("db.init", dialect=self.engine.dialect.name)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Yield a session; commit on success, roll back on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


__all__ = ["Base", "Database", "DraftRecord", "create_db_engine"]
