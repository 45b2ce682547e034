"""Database connection manager with health checks and schema setup."""

from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from src.shared.config.logging import get_logger
from src.shared.config.settings import get_settings
from src.shared.db.models import Base

logger = get_logger(__name__)


class DatabaseManager:
    """Manages database connections and transactional sessions.

    Supports context manager protocol for automatic session cleanup.
    SQLite URLs get a single shared connection for in-memory databases
    and cross-thread access for file databases; other backends use a
    QueuePool sized from settings.
    """

    def __init__(self, database_url: str | None = None) -> None:
        """Initialize database manager.

        Args:
            database_url: Database connection string. If None, loads from settings.
        """
        settings = get_settings()
        self._database_url = database_url or settings.database_url

        engine_kwargs: dict[str, Any] = {"echo": False}
        if self._database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self._database_url or self._database_url == "sqlite://":
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs.update(
                poolclass=QueuePool,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_timeout=settings.db_pool_timeout,
                pool_pre_ping=True,
            )

        self._engine: Engine = create_engine(self._database_url, **engine_kwargs)

        self._session_factory = sessionmaker(
            bind=self._engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

        logger.info(
            "database_manager_initialized",
            backend=self._engine.dialect.name,
        )

    @property
    def engine(self) -> Engine:
        """Get SQLAlchemy engine.

        Returns:
            SQLAlchemy engine instance
        """
        return self._engine

    def create_schema(self) -> None:
        """Create all prediction store tables that do not exist yet."""
        Base.metadata.create_all(self._engine)
        logger.info("database_schema_ready", tables=sorted(Base.metadata.tables))

    def health_check(self) -> bool:
        """Check if database is reachable.

        Returns:
            True if database connection successful, False otherwise
        """
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.debug("database_health_check_passed")
            return True
        except Exception as e:
            logger.error("database_health_check_failed", error=str(e))
            return False

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Provide a transactional scope for database operations.

        Yields:
            SQLAlchemy session

        Example:
            with db_manager.session() as session:
                session.add(model)
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Close all database connections and dispose of engine.

        Should be called during graceful shutdown.
        """
        logger.info("closing_database_connections")
        self._engine.dispose()
