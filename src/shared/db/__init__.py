"""Database connection, ORM models, and repository pattern implementation."""

from src.shared.db.connection import DatabaseManager
from src.shared.db.models import Base, LifecycleEntry, PredictionLogRow, VerificationEntry
from src.shared.db.repositories import (
    BaseRepository,
    LifecycleRepository,
    PredictionLogRepository,
    VerificationRepository,
)


def get_repositories(
    db_manager: DatabaseManager,
) -> tuple[LifecycleRepository, VerificationRepository, PredictionLogRepository]:
    """Create all repositories over one database manager.

    Args:
        db_manager: Database manager shared by the repositories

    Returns:
        Tuple of (LifecycleRepository, VerificationRepository, PredictionLogRepository)

    Example:
        >>> lifecycle_repo, verification_repo, log_repo = get_repositories(db)
        >>> record = lifecycle_repo.get(date(2026, 10, 20))
    """
    return (
        LifecycleRepository(db_manager),
        VerificationRepository(db_manager),
        PredictionLogRepository(db_manager),
    )


__all__ = [
    # Connection management
    "DatabaseManager",
    # ORM Base and Models
    "Base",
    "LifecycleEntry",
    "VerificationEntry",
    "PredictionLogRow",
    # Repositories
    "BaseRepository",
    "LifecycleRepository",
    "VerificationRepository",
    "PredictionLogRepository",
    # Factory functions
    "get_repositories",
]
