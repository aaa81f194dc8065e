"""
Database connection management for RaastaFix
SQLite by default; any SQLAlchemy URL works.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from sqlalchemy.exc import SQLAlchemyError

from raastafix.core.config import settings
from .models import Base

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """
    Database connection manager.

    In-memory SQLite URLs share one connection so every session sees
    the same data.
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        echo: bool = False
    ):
        """
        Initialize database connection.

        Args:
            database_url: SQLAlchemy connection URL
            echo: Log emitted SQL
        """
        self.database_url = database_url or settings.database_url

        engine_kwargs = {"echo": echo}
        if self.database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if self._is_memory(self.database_url):
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_pre_ping"] = True

        self.engine = create_engine(self.database_url, **engine_kwargs)

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

        logger.info(f"Database connection initialized: {self._mask_url(self.database_url)}")

    @staticmethod
    def _is_memory(url: str) -> bool:
        return url in ("sqlite://", "sqlite:///:memory:")

    def _mask_url(self, url: str) -> str:
        """Mask password in connection URL for logging."""
        if "@" in url and ":" in url:
            parts = url.split("@")
            credentials = parts[0].split(":")
            if len(credentials) >= 3:
                credentials[-1] = "****"
            return ":".join(credentials) + "@" + parts[1]
        return url

    def create_tables(self) -> None:
        """Create all database tables."""
        try:
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database tables created successfully")
        except SQLAlchemyError as e:
            logger.error(f"Failed to create tables: {e}")
            raise

    def check_connection(self) -> bool:
        """
        Check if database connection is healthy.

        Returns:
            True if connection is healthy
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database connection check failed: {e}")
            return False

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """
        Context manager for database sessions.

        Yields:
            SQLAlchemy session
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database session error: {e}")
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Close database connection and dispose engine."""
        self.engine.dispose()
        logger.info("Database connection closed")
