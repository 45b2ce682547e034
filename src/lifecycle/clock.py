"""Clock capability injected into time-driven components.

The lifecycle manager and verification tracker never read the system clock
directly; they ask a Clock, so tests can pin every transition boundary.
"""

from datetime import datetime
from typing import Protocol

import pytz


class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        """Current timezone-aware time."""
        ...


class SystemClock:
    """Wall clock in the local reporting timezone."""

    def __init__(self, timezone_name: str = "America/Denver") -> None:
        """Initialize system clock.

        Args:
            timezone_name: IANA timezone the returned times are expressed in
        """
        self.tz = pytz.timezone(timezone_name)

    def now(self) -> datetime:
        """Current time in the reporting timezone."""
        return datetime.now(pytz.utc).astimezone(self.tz)
