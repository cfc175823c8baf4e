from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import LocationType
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_task_and_location(self, task_id: str, location_type: LocationType) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_task(self, task_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert a record; raises ``AlreadyMarkedError`` if (task_id, location_type) exists."""

        raise NotImplementedError
