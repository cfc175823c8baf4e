from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..audit.service import AuditService
from ..common.datetime_utils import now_utc
from ..common.geo import distance_meters
from ..common.images import ImageUpload, compute_hash
from ..common.locks import KeyedLock
from ..common.validators import parse_enum, parse_latitude, parse_longitude
from ..core.constants import DEFAULT_GEOFENCE_RADIUS_METERS
from ..core.enums import AuditAction, LocationType, Role
from ..core.exceptions import AlreadyMarkedError, ValidationError
from ..storage.image_store import ImageStore
from ..tasks.model import Task
from ..tasks.service import TaskService
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Geo-fenced attendance at the pickup and destination checkpoints.

    Independent of the event sequence. Being outside the geofence never
    rejects a submission: the record is kept with ``is_within_geofence=False``
    for later review.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        task_service: TaskService,
        images: ImageStore,
        audit: AuditService,
        *,
        default_geofence_radius: int = DEFAULT_GEOFENCE_RADIUS_METERS,
        locks: KeyedLock | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._task_service = task_service
        self._images = images
        self._audit = audit
        self._default_radius = int(default_geofence_radius)
        self._locks = locks or KeyedLock()
        self._clock = clock

    def mark_attendance(
        self,
        task_id: str,
        *,
        agent_id: str,
        location_type: Any,
        image: Optional[ImageUpload],
        latitude: Any,
        longitude: Any,
        ip_address: Optional[str] = None,
    ) -> AttendanceRecord:
        location_type = parse_enum(LocationType, location_type, "location_type")
        lat = parse_latitude(latitude)
        lng = parse_longitude(longitude)
        if image is None or not image.content:
            raise ValidationError("Image file is required")

        task = self._task_service.get_for_agent(task_id, user_id=agent_id)

        with self._locks.hold((task.task_id, location_type)):
            if self._attendance.get_for_task_and_location(task.task_id, location_type):
                self._audit_duplicate(task, agent_id, ip_address)
                raise AlreadyMarkedError(f"Attendance already marked for {location_type.value} location")

            distance, within = self.check_geofence(task, location_type, lat, lng)

            server_timestamp = self._clock()
            image_url = self._images.save(
                key=f"attendance/{task.task_id}/{location_type.value.lower()}_{server_timestamp:%Y%m%d%H%M%S%f}.{image.extension}",
                content=image.content,
                mime_type=image.mime_type,
            )
            record = AttendanceRecord(
                attendance_id=str(uuid.uuid4()),
                task_id=task.task_id,
                user_id=str(agent_id),
                location_type=location_type,
                image_url=image_url,
                image_hash=compute_hash(image.content),
                latitude=lat,
                longitude=lng,
                is_within_geofence=within,
                distance_from_target=distance,
                server_timestamp=server_timestamp,
                created_at=server_timestamp,
            )
            try:
                saved = self._attendance.create(record)
            except AlreadyMarkedError:
                self._audit_duplicate(task, agent_id, ip_address)
                raise

        try:
            self._audit.log(
                AuditAction.ATTENDANCE_MARKED,
                entity_type="Attendance",
                entity_id=saved.attendance_id,
                user_id=agent_id,
                ip_address=ip_address,
            )
        except Exception:
            # Record already committed; the caller must still get it back.
            logger.exception("Task %s: audit write failed after %s attendance", task.task_id, location_type.value)
        logger.info(
            "Task %s: %s attendance by %s (distance=%s, within=%s)",
            task.task_id,
            location_type.value,
            agent_id,
            f"{distance:.2f}m" if distance is not None else "-",
            within,
        )
        return saved

    def list_attendance(self, task_id: str, *, user_id: str, role: Role) -> Sequence[AttendanceRecord]:
        task = self._task_service.get_for_viewer(task_id, user_id=user_id, role=role)
        return self._attendance.list_for_task(task.task_id)

    def check_geofence(
        self, task: Task, location_type: LocationType, latitude: float, longitude: float
    ) -> tuple[Optional[float], Optional[bool]]:
        """Distance to the checkpoint and whether it is inside the radius; (None, None) without a target."""
        target = task.target_for(location_type)
        if target is None:
            return None, None
        distance = distance_meters(latitude, longitude, target[0], target[1])
        radius = task.geofence_radius or self._default_radius
        return distance, distance <= radius

    @staticmethod
    def describe(record: AttendanceRecord) -> str:
        if record.is_within_geofence is None:
            return "Attendance marked. Target location is not configured for this task."
        if record.is_within_geofence:
            return "Attendance marked successfully. You are within the designated area."
        return "Attendance marked. Note: You are outside the designated area."

    def _audit_duplicate(self, task: Task, agent_id: str, ip_address: Optional[str]) -> None:
        self._audit.log(
            AuditAction.ATTENDANCE_REJECTED_DUPLICATE,
            entity_type="Attendance",
            entity_id=task.task_id,
            user_id=agent_id,
            ip_address=ip_address,
        )
