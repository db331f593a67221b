"""Relational store gateway: pooled SQLAlchemy engine and session factory"""
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.config import settings
from app.errors import StoreError
from app.utils.logger import logger

Base = declarative_base()


class Database:
    """Owns the connection pool for the relational store.

    Every statement goes through bound parameters: ``text()`` with ``:name``
    placeholders or ORM expressions. Any driver or pool failure is re-raised
    as :class:`~app.errors.StoreError`.
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 20,
        pool_timeout: int = 2,
        pool_recycle: int = 30,
        connect_timeout: int = 2,
    ):
        self.url = url
        if url.startswith("sqlite"):
            self.engine = create_engine(url, connect_args={"check_same_thread": False})
        else:
            self.engine = create_engine(
                url,
                pool_size=pool_size,
                max_overflow=0,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
                pool_pre_ping=True,
                connect_args={"connect_timeout": connect_timeout},
            )
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @classmethod
    def from_settings(cls) -> "Database":
        return cls(
            settings.DATABASE_URL,
            pool_size=settings.DATABASE_POOL_SIZE,
            pool_timeout=settings.DATABASE_POOL_TIMEOUT,
            pool_recycle=settings.DATABASE_POOL_RECYCLE,
            connect_timeout=settings.DATABASE_CONNECT_TIMEOUT,
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield an ORM session; callers commit explicitly."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error(
                f"Database session failed: {exc.__class__.__name__}",
                extra={"error": str(exc)},
                exc_info=True,
            )
            raise StoreError() from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def query(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Run a read statement and return its rows as dicts."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(sql), params or {})
                return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as exc:
            logger.error("Database query failed", extra={"error": str(exc)}, exc_info=True)
            raise StoreError() from exc

    def execute(self, sql: str, params: Optional[Dict[str, Any]] = None) -> int:
        """Run a write statement in its own transaction and return the rowcount."""
        try:
            with self.engine.begin() as conn:
                result = conn.execute(text(sql), params or {})
                return result.rowcount
        except SQLAlchemyError as exc:
            logger.error("Database execute failed", extra={"error": str(exc)}, exc_info=True)
            raise StoreError() from exc

    def ping(self) -> bool:
        """Run a trivial query; raises StoreError when the store is unreachable."""
        self.query("SELECT 1")
        return True

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database connection pool closed")
