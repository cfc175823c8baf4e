from __future__ import annotations

from datetime import timedelta
from typing import Optional, Sequence

from ...core.constants import DEFAULT_SUSPICIOUS_GRACE_MINUTES
from ...tasks.model import Task
from ..model import TaskEvent
from .base import FlagReason, SuspiciousRule


class TimeWindowRule(SuspiciousRule):
    """Event recorded outside [start_time - grace, end_time + grace] (bounds inclusive)."""

    name = "TIME_WINDOW"

    def __init__(self, grace_minutes: int = DEFAULT_SUSPICIOUS_GRACE_MINUTES):
        if grace_minutes < 0:
            raise ValueError("grace_minutes must be >= 0")
        self._grace = timedelta(minutes=grace_minutes)

    def check(self, *, task: Task, event: TaskEvent, previous_events: Sequence[TaskEvent]) -> Optional[FlagReason]:
        ts = event.server_timestamp
        if ts < task.start_time - self._grace:
            return FlagReason(self.name, f"{event.event_type.value} recorded before the task window opened")
        if ts > task.end_time + self._grace:
            return FlagReason(self.name, f"{event.event_type.value} recorded after the task window closed")
        return None
