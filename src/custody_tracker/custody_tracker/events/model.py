from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from ..common.datetime_utils import to_iso
from ..core.enums import EventType


@dataclass(frozen=True)
class TaskEvent:
    """Immutable proof-of-custody record. Never updated or deleted."""

    event_id: str
    task_id: str
    event_type: EventType
    image_url: str
    image_hash: str
    latitude: float
    longitude: float
    server_timestamp: datetime
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.event_id,
            "task_id": self.task_id,
            "event_type": self.event_type.value,
            "image_url": self.image_url,
            "image_hash": self.image_hash,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "server_timestamp": to_iso(self.server_timestamp),
            "created_at": to_iso(self.created_at),
        }


@dataclass(frozen=True)
class AllowedEvents:
    """Read-model for the client: the one step it may offer, and what is left."""

    next_event_type: Optional[EventType]
    remaining: Tuple[EventType, ...]

    @property
    def is_complete(self) -> bool:
        return self.next_event_type is None

    def to_dict(self) -> dict:
        return {
            "next_event_type": self.next_event_type.value if self.next_event_type else None,
            "remaining": [t.value for t in self.remaining],
            "is_complete": self.is_complete,
        }
