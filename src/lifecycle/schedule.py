"""Lifecycle checkpoints for a target date.

For dawn patrol date D the checkpoints are, in local time:

    D-1 18:00  preview -> locked-evening
    D-1 23:00  locked-evening -> locked-final
    D   06:00  locked-final -> active
    D   08:00  active -> verified
"""

from datetime import date, datetime, time, timedelta

import pytz

from src.shared.config.settings import Settings, get_settings
from src.shared.models.enums import LIFECYCLE_SEQUENCE, LifecycleState


class LifecycleSchedule:
    """Maps wall-clock time to the lifecycle state a target date should be in."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize schedule.

        Args:
            settings: Settings with checkpoint times and timezone
        """
        settings = settings or get_settings()
        self.tz = pytz.timezone(settings.timezone)
        self._entry_times: dict[LifecycleState, tuple[int, time]] = {
            LifecycleState.LOCKED_EVENING: (-1, settings.evening_lock_time),
            LifecycleState.LOCKED_FINAL: (-1, settings.final_lock_time),
            LifecycleState.ACTIVE: (0, settings.active_time),
            LifecycleState.VERIFIED: (0, settings.verified_time),
        }

    def localize(self, moment: datetime) -> datetime:
        """Express a datetime in the reporting timezone (naive means local)."""
        if moment.tzinfo is None:
            return self.tz.localize(moment)
        return moment.astimezone(self.tz)

    def checkpoint(self, target_date: date, state: LifecycleState) -> datetime | None:
        """Moment a target date enters a state.

        Args:
            target_date: Dawn patrol date
            state: Lifecycle state

        Returns:
            Localized entry time, or None for preview (no entry checkpoint)
        """
        if state is LifecycleState.PREVIEW:
            return None
        return self.entered_at(target_date, state)

    def entered_at(self, target_date: date, state: LifecycleState) -> datetime:
        """Checkpoint of a state that has one.

        Raises:
            ValueError: For preview, which is entered on first request
        """
        if state not in self._entry_times:
            raise ValueError(f"{state.value} has no entry checkpoint")
        day_offset, at = self._entry_times[state]
        day = target_date + timedelta(days=day_offset)
        return self.tz.localize(datetime.combine(day, at))

    def state_at(self, target_date: date, now: datetime) -> LifecycleState:
        """Lifecycle state a target date should be in at a given time.

        Args:
            target_date: Dawn patrol date
            now: Current time

        Returns:
            Latest state whose checkpoint has been reached
        """
        now = self.localize(now)
        current = LifecycleState.PREVIEW
        for state in LIFECYCLE_SEQUENCE[1:]:
            if now >= self.entered_at(target_date, state):
                current = state
        return current

    def verification_opens(self, target_date: date) -> datetime:
        """Earliest moment a target date may be verified."""
        return self.entered_at(target_date, LifecycleState.VERIFIED)
