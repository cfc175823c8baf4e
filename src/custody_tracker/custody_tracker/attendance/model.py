from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import LocationType


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one geo-fenced check-in. Immutable once recorded.

    ``is_within_geofence`` and ``distance_from_target`` are None when the task
    has no target coordinates for the location.
    """

    attendance_id: str
    task_id: str
    user_id: str
    location_type: LocationType
    image_url: str
    image_hash: str
    latitude: float
    longitude: float
    is_within_geofence: Optional[bool]
    distance_from_target: Optional[float]
    server_timestamp: datetime
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "task_id": self.task_id,
            "user_id": self.user_id,
            "location_type": self.location_type.value,
            "image_url": self.image_url,
            "image_hash": self.image_hash,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "is_within_geofence": self.is_within_geofence,
            "distance_from_target": (
                round(self.distance_from_target, 2) if self.distance_from_target is not None else None
            ),
            "timestamp": to_iso(self.server_timestamp),
        }
