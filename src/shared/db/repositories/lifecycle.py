"""Lifecycle record repository.

Persists one LifecycleRecord per target date with an optimistic version
check, so a writer holding a stale copy cannot silently overwrite a newer
record.
"""

from datetime import date

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from src.shared.config.logging import get_logger
from src.shared.db.connection import DatabaseManager
from src.shared.db.models import LifecycleEntry
from src.shared.db.repositories.base import BaseRepository
from src.shared.errors import StaleWriteError
from src.shared.models.lifecycle import LifecycleRecord, lifecycle_key

logger = get_logger(__name__)


class LifecycleRepository(BaseRepository[LifecycleEntry]):
    """Repository for lifecycle records keyed by ``lifecycle:{date}``.

    Example:
        >>> repo = LifecycleRepository(db_manager)
        >>> record = repo.get(date(2026, 10, 20))
        >>> saved = repo.save(record.model_copy(update={"state": LifecycleState.ACTIVE}))
        >>> saved.version == record.version + 1
        True
    """

    def __init__(self, db_manager: DatabaseManager) -> None:
        """Initialize lifecycle repository.

        Args:
            db_manager: Database manager instance
        """
        super().__init__(db_manager, LifecycleEntry)

    def get(self, target_date: date) -> LifecycleRecord | None:
        """Get the lifecycle record for a target date.

        Args:
            target_date: Dawn patrol date

        Returns:
            LifecycleRecord or None if no prediction was ever requested
        """
        with self._db.session() as session:
            row = session.get(LifecycleEntry, lifecycle_key(target_date))
            if row is None:
                return None
            return LifecycleRecord.model_validate(row.payload)

    def save(self, record: LifecycleRecord) -> LifecycleRecord:
        """Persist a record written from the version it was read at.

        ``record.version`` must be the version the caller read (0 for a
        record that was never persisted). The stored record carries the
        next version.

        Args:
            record: Modified record

        Returns:
            The record as stored, with its version incremented

        Raises:
            StaleWriteError: If another writer persisted the record first
        """
        expected = record.version
        stored = record.model_copy(update={"version": expected + 1})
        payload = stored.model_dump(mode="json")

        with self._db.session() as session:
            if expected == 0:
                session.add(
                    LifecycleEntry(
                        record_key=stored.record_key,
                        target_date=stored.target_date,
                        state=stored.state.value,
                        version=stored.version,
                        payload=payload,
                    )
                )
                try:
                    session.flush()
                except IntegrityError as exc:
                    raise StaleWriteError(stored.record_key, expected) from exc
            else:
                stmt = (
                    update(LifecycleEntry)
                    .where(
                        LifecycleEntry.record_key == stored.record_key,
                        LifecycleEntry.version == expected,
                    )
                    .values(
                        state=stored.state.value,
                        version=stored.version,
                        payload=payload,
                        updated_at=self._utc_now(),
                    )
                )
                result = session.execute(stmt)
                if result.rowcount != 1:
                    raise StaleWriteError(stored.record_key, expected)

        logger.debug(
            "lifecycle_record_saved",
            key=stored.record_key,
            state=stored.state.value,
            version=stored.version,
        )
        return stored

    def list_dates(self) -> list[date]:
        """List all target dates with a lifecycle record, oldest first."""
        with self._db.session() as session:
            stmt = select(LifecycleEntry.target_date).order_by(LifecycleEntry.target_date)
            return list(session.execute(stmt).scalars().all())
