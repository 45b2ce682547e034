"""Base repository class with common database operations."""

from datetime import date, datetime, timezone
from typing import Generic, TypeVar

from sqlalchemy import delete, func, select

from src.shared.config.logging import get_logger
from src.shared.db.connection import DatabaseManager
from src.shared.db.models import Base

logger = get_logger(__name__)

# Generic type for ORM models
T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository for date-keyed collections.

    Every table in the prediction store carries a ``target_date`` column,
    which is what retention and counting operate on.
    """

    def __init__(self, db_manager: DatabaseManager, model_class: type[T]) -> None:
        """Initialize repository.

        Args:
            db_manager: Database manager instance
            model_class: SQLAlchemy model class for this repository
        """
        self._db = db_manager
        self._model_class = model_class
        self._table_name = model_class.__tablename__
        logger.debug("repository_initialized", table=self._table_name)

    @property
    def model_class(self) -> type[T]:
        """Get the model class for this repository."""
        return self._model_class

    def count(self) -> int:
        """Count total records in table.

        Returns:
            Total record count
        """
        with self._db.session() as session:
            stmt = select(func.count()).select_from(self._model_class)
            return int(session.execute(stmt).scalar_one())

    def purge_before(self, cutoff: date) -> int:
        """Delete records whose target date precedes the cutoff.

        Args:
            cutoff: First target date to keep

        Returns:
            Number of records deleted
        """
        with self._db.session() as session:
            stmt = delete(self._model_class).where(
                self._model_class.target_date < cutoff  # type: ignore[attr-defined]
            )
            result = session.execute(stmt)
            deleted = result.rowcount or 0

        if deleted:
            logger.info(
                "records_purged",
                table=self._table_name,
                cutoff=cutoff.isoformat(),
                deleted=deleted,
            )
        return deleted

    @staticmethod
    def _utc_now() -> datetime:
        """Get current UTC timestamp.

        Returns:
            Timezone-aware datetime in UTC
        """
        return datetime.now(timezone.utc)
