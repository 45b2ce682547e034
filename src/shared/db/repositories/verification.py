"""Verification record repository.

Insert-only storage of one VerificationRecord per target date.
"""

from datetime import date
from typing import Iterator

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError

from src.shared.config.logging import get_logger
from src.shared.db.connection import DatabaseManager
from src.shared.db.models import VerificationEntry
from src.shared.db.repositories.base import BaseRepository
from src.shared.models.verification import VerificationRecord, verification_key

logger = get_logger(__name__)


class VerificationRepository(BaseRepository[VerificationEntry]):
    """Repository for verification records keyed by ``verification:{date}``."""

    def __init__(self, db_manager: DatabaseManager) -> None:
        """Initialize verification repository.

        Args:
            db_manager: Database manager instance
        """
        super().__init__(db_manager, VerificationEntry)

    def get(self, target_date: date) -> VerificationRecord | None:
        """Get the verification record for a target date.

        Args:
            target_date: Dawn patrol date

        Returns:
            VerificationRecord or None if the date was never verified
        """
        with self._db.session() as session:
            row = session.get(VerificationEntry, verification_key(target_date))
            if row is None:
                return None
            return VerificationRecord.model_validate(row.payload)

    def insert(self, record: VerificationRecord) -> VerificationRecord:
        """Store a verification record unless one already exists.

        Args:
            record: Newly computed verification record

        Returns:
            The stored record; the earlier one if the date was already verified
        """
        try:
            with self._db.session() as session:
                session.add(
                    VerificationEntry(
                        record_key=record.record_key,
                        target_date=record.target_date,
                        accuracy_score=record.accuracy_score,
                        payload=record.model_dump(mode="json"),
                    )
                )
        except IntegrityError:
            logger.info("verification_already_stored", key=record.record_key)
        else:
            logger.debug("verification_record_saved", key=record.record_key)

        stored = self.get(record.target_date)
        if stored is None:
            raise RuntimeError(f"Verification record {record.record_key} missing after insert")
        return stored

    def iter_recent(self, limit: int = 30) -> Iterator[VerificationRecord]:
        """Lazily yield the most recent verification records, newest first.

        Args:
            limit: Maximum records to yield

        Yields:
            VerificationRecord instances ordered by target date descending
        """
        with self._db.session() as session:
            stmt = (
                select(VerificationEntry.payload)
                .order_by(desc(VerificationEntry.target_date))
                .limit(limit)
                .execution_options(yield_per=50)
            )
            for payload in session.execute(stmt).scalars():
                yield VerificationRecord.model_validate(payload)
