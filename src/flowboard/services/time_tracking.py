"""Start/stop timer producing time entries."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..models import MIN_TIME_ENTRY_SECONDS, TimeEntry
from ..utils import now_utc

logger = logging.getLogger(__name__)


def format_duration(seconds: int) -> str:
    """Render seconds as HH:MM:SS."""
    hours, remainder = divmod(max(seconds, 0), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class TimeTracker:
    """Timer for one user working on one task."""

    def __init__(
        self,
        task_id: str,
        user_id: str,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.task_id = task_id
        self.user_id = user_id
        self._clock = clock
        self.started_at: datetime | None = None
        self.description = ""

    @property
    def is_tracking(self) -> bool:
        return self.started_at is not None

    def elapsed_seconds(self) -> int:
        """Whole seconds since start, or 0 when idle."""
        if self.started_at is None:
            return 0
        return int((self._clock() - self.started_at).total_seconds())

    def start(self, description: str = "") -> None:
        """Begin timing. Restarting a running timer keeps the original start."""
        if self.started_at is not None:
            return
        self.started_at = self._clock()
        self.description = description
        logger.debug("Timer started for task %s", self.task_id)

    def stop(self) -> TimeEntry | None:
        """
        Stop timing and build the entry to record.

        Returns:
            The completed entry, or None if the timer was idle or ran for
            less than a minute (that run is discarded).
        """
        if self.started_at is None:
            return None

        started_at = self.started_at
        end_time = self._clock()
        duration = int((end_time - started_at).total_seconds())
        description = self.description
        self.started_at = None
        self.description = ""

        if duration < MIN_TIME_ENTRY_SECONDS:
            logger.debug("Timer for task %s discarded after %ds", self.task_id, duration)
            return None

        return TimeEntry(
            task_id=self.task_id,
            user_id=self.user_id,
            description=description or "Work on task",
            start_time=started_at,
            end_time=end_time,
            duration=duration,
            created_at=end_time,
            updated_at=end_time,
        )
