from __future__ import annotations

from typing import Optional, Sequence

from ...core.constants import DEFAULT_EXPECTED_TRAVEL_MINUTES, TRAVEL_TIME_TOLERANCE
from ...core.enums import AuditAction, EventType
from ...tasks.model import Task
from ..model import TaskEvent
from .base import FlagReason, SuspiciousRule


class TravelTimeRule(SuspiciousRule):
    """Pickup -> exam center took far longer than the expected travel time.

    Only applies to ARRIVAL_EXAM_CENTER when a pickup event exists (afternoon
    shifts have none).
    """

    name = "TRAVEL_TIME"

    def __init__(
        self,
        default_expected_minutes: int = DEFAULT_EXPECTED_TRAVEL_MINUTES,
        tolerance: float = TRAVEL_TIME_TOLERANCE,
    ):
        self._default_expected = int(default_expected_minutes)
        self._tolerance = float(tolerance)

    def check(self, *, task: Task, event: TaskEvent, previous_events: Sequence[TaskEvent]) -> Optional[FlagReason]:
        if event.event_type != EventType.ARRIVAL_EXAM_CENTER:
            return None

        pickup = next((e for e in previous_events if e.event_type == EventType.PICKUP_POLICE_STATION), None)
        if pickup is None:
            return None

        travel_minutes = (event.server_timestamp - pickup.server_timestamp).total_seconds() / 60
        expected = task.expected_travel_time or self._default_expected
        threshold = expected * self._tolerance
        if travel_minutes > threshold:
            return FlagReason(
                self.name,
                f"travel took {travel_minutes:.0f} min, expected about {expected} min",
                audit_action=AuditAction.RED_FLAG_TRAVEL_TIME,
            )
        return None
