"""Repository pattern implementation for the prediction store.

Provides a type-safe data access layer that returns pydantic domain models.
"""

from src.shared.db.repositories.base import BaseRepository
from src.shared.db.repositories.lifecycle import LifecycleRepository
from src.shared.db.repositories.prediction_log import PredictionLogRepository
from src.shared.db.repositories.verification import VerificationRepository

__all__ = [
    "BaseRepository",
    "LifecycleRepository",
    "PredictionLogRepository",
    "VerificationRepository",
]
