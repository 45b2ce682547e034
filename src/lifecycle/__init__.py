"""Time-gated prediction lifecycle."""

from src.lifecycle.clock import Clock, SystemClock
from src.lifecycle.schedule import LifecycleSchedule
from src.lifecycle.state_manager import (
    PredictionRecorder,
    PredictionStateManager,
    WeatherSignalProvider,
)

__all__ = [
    "Clock",
    "LifecycleSchedule",
    "PredictionRecorder",
    "PredictionStateManager",
    "SystemClock",
    "WeatherSignalProvider",
]
