from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from ..common.datetime_utils import to_iso
from ..core.enums import ExamType, LocationType, ShiftType, TaskStatus


@dataclass(frozen=True)
class Task:
    """Domain entity: one sealed-pack delivery assignment."""

    task_id: str
    sealed_pack_code: str
    source_location: str
    destination_location: str
    assigned_user_id: str
    start_time: datetime
    end_time: datetime
    status: TaskStatus = TaskStatus.PENDING
    is_suspicious: bool = False
    exam_type: ExamType = ExamType.REGULAR
    is_double_shift: bool = False
    shift_type: Optional[ShiftType] = None
    pickup_latitude: Optional[float] = None
    pickup_longitude: Optional[float] = None
    destination_latitude: Optional[float] = None
    destination_longitude: Optional[float] = None
    geofence_radius: Optional[int] = None
    expected_travel_time: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_afternoon_shift(self) -> bool:
        return self.is_double_shift and self.shift_type == ShiftType.AFTERNOON

    @property
    def display_status(self) -> TaskStatus:
        if self.is_suspicious and self.status != TaskStatus.COMPLETED:
            return TaskStatus.SUSPICIOUS
        return self.status

    def target_for(self, location_type: LocationType) -> Optional[Tuple[float, float]]:
        if location_type == LocationType.PICKUP:
            lat, lng = self.pickup_latitude, self.pickup_longitude
        else:
            lat, lng = self.destination_latitude, self.destination_longitude
        if lat is None or lng is None:
            return None
        return lat, lng

    def to_dict(self) -> dict:
        return {
            "id": self.task_id,
            "sealed_pack_code": self.sealed_pack_code,
            "source_location": self.source_location,
            "destination_location": self.destination_location,
            "pickup_latitude": self.pickup_latitude,
            "pickup_longitude": self.pickup_longitude,
            "destination_latitude": self.destination_latitude,
            "destination_longitude": self.destination_longitude,
            "assigned_user_id": self.assigned_user_id,
            "start_time": to_iso(self.start_time),
            "end_time": to_iso(self.end_time),
            "status": self.status.value,
            "is_suspicious": self.is_suspicious,
            "display_status": self.display_status.value,
            "exam_type": self.exam_type.value,
            "is_double_shift": self.is_double_shift,
            "shift_type": self.shift_type.value if self.shift_type else None,
            "geofence_radius": self.geofence_radius,
            "expected_travel_time": self.expected_travel_time,
            "created_at": to_iso(self.created_at),
        }
