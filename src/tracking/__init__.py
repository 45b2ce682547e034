"""Verification and accuracy tracking."""

from src.tracking.accuracy import accuracy_score, in_downslope_sector, speed_closeness, summarize
from src.tracking.tracker import PredictionTracker

__all__ = [
    "PredictionTracker",
    "accuracy_score",
    "in_downslope_sector",
    "speed_closeness",
    "summarize",
]
