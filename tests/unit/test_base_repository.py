"""Tests for BaseRepository class."""

from datetime import date, datetime, timezone
from unittest.mock import MagicMock

from src.shared.db.models import Base, VerificationEntry
from src.shared.db.repositories.base import BaseRepository


def add_entry(db, target: date) -> None:
    with db.session() as session:
        session.add(
            VerificationEntry(
                record_key=f"verification:{target.isoformat()}",
                target_date=target,
                accuracy_score=50.0,
                payload={},
            )
        )


class TestBaseRepository:
    """Tests for BaseRepository common operations."""

    def test_init_sets_attributes(self) -> None:
        """Test repository initialization."""
        mock_model = MagicMock(spec=Base)
        mock_model.__tablename__ = "test_table"
        mock_db = MagicMock()

        repo = BaseRepository(mock_db, mock_model)

        assert repo._db is mock_db
        assert repo.model_class is mock_model
        assert repo._table_name == "test_table"

    def test_count(self, db) -> None:
        """Test count reflects inserted rows."""
        repo = BaseRepository(db, VerificationEntry)
        assert repo.count() == 0

        add_entry(db, date(2026, 10, 18))
        add_entry(db, date(2026, 10, 19))

        assert repo.count() == 2

    def test_purge_before_keeps_cutoff_date(self, db) -> None:
        """Test purge deletes only dates strictly before the cutoff."""
        repo = BaseRepository(db, VerificationEntry)
        for day in (17, 18, 19):
            add_entry(db, date(2026, 10, day))

        deleted = repo.purge_before(date(2026, 10, 18))

        assert deleted == 1
        assert repo.count() == 2

    def test_purge_before_nothing_to_delete(self, db) -> None:
        """Test purge on an empty table."""
        repo = BaseRepository(db, VerificationEntry)

        assert repo.purge_before(date(2026, 10, 18)) == 0

    def test_utc_now(self) -> None:
        """Test _utc_now returns timezone-aware UTC datetime."""
        result = BaseRepository._utc_now()

        assert isinstance(result, datetime)
        assert result.tzinfo == timezone.utc
