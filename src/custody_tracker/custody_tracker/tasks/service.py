from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_utc
from ..common.validators import parse_latitude, parse_longitude, require_non_empty
from ..core.enums import ExamType, Role, ShiftType, TaskStatus
from ..core.exceptions import AuthorizationError, TaskNotFoundError, ValidationError
from .model import Task
from .repository import TaskRepository

logger = logging.getLogger(__name__)


class TaskService:
    """Task lookup with access rules, plus creation for the assignment workflow."""

    def __init__(self, tasks: TaskRepository, *, clock: Callable[[], datetime] = now_utc):
        self._tasks = tasks
        self._clock = clock

    def get_task(self, task_id: str) -> Task:
        task = self._tasks.get_by_id(str(task_id))
        if not task:
            raise TaskNotFoundError(f"Task with ID '{task_id}' not found")
        return task

    def get_for_agent(self, task_id: str, *, user_id: str) -> Task:
        """Write access: only the assigned agent may submit for a task."""
        task = self.get_task(task_id)
        if task.assigned_user_id != str(user_id):
            raise AuthorizationError("You are not assigned to this task")
        return task

    def get_for_viewer(self, task_id: str, *, user_id: str, role: Role) -> Task:
        """Read access: the assigned agent, or an admin reviewing the task."""
        task = self.get_task(task_id)
        if role != Role.ADMIN and task.assigned_user_id != str(user_id):
            raise AuthorizationError("You are not assigned to this task")
        return task

    def create_task(
        self,
        *,
        sealed_pack_code: str,
        source_location: str,
        destination_location: str,
        assigned_user_id: str,
        start_time: datetime,
        end_time: datetime,
        exam_type: ExamType = ExamType.REGULAR,
        is_double_shift: bool = False,
        shift_type: Optional[ShiftType] = None,
        pickup: Optional[tuple] = None,
        destination: Optional[tuple] = None,
        geofence_radius: Optional[int] = None,
        expected_travel_time: Optional[int] = None,
    ) -> Task:
        code = require_non_empty(sealed_pack_code, "sealed_pack_code")
        if end_time <= start_time:
            raise ValidationError("End time must be after start time")
        if is_double_shift and shift_type is None:
            raise ValidationError("shift_type is required for a double shift")
        if geofence_radius is not None and int(geofence_radius) <= 0:
            raise ValidationError("geofence_radius must be positive")
        if expected_travel_time is not None and int(expected_travel_time) <= 0:
            raise ValidationError("expected_travel_time must be positive")
        if self._tasks.get_by_pack_code(code):
            raise ValidationError(f"Task with sealed pack code '{code}' already exists")

        pickup_lat, pickup_lng = (parse_latitude(pickup[0]), parse_longitude(pickup[1])) if pickup else (None, None)
        dest_lat, dest_lng = (
            (parse_latitude(destination[0]), parse_longitude(destination[1])) if destination else (None, None)
        )

        task = Task(
            task_id=str(uuid.uuid4()),
            sealed_pack_code=code,
            source_location=require_non_empty(source_location, "source_location"),
            destination_location=require_non_empty(destination_location, "destination_location"),
            assigned_user_id=require_non_empty(str(assigned_user_id), "assigned_user_id"),
            start_time=start_time,
            end_time=end_time,
            status=TaskStatus.PENDING,
            exam_type=exam_type,
            is_double_shift=is_double_shift,
            shift_type=shift_type,
            pickup_latitude=pickup_lat,
            pickup_longitude=pickup_lng,
            destination_latitude=dest_lat,
            destination_longitude=dest_lng,
            geofence_radius=int(geofence_radius) if geofence_radius is not None else None,
            expected_travel_time=int(expected_travel_time) if expected_travel_time is not None else None,
            created_at=self._clock(),
        )
        self._tasks.insert(task)
        logger.info("Task %s created for pack %s (agent %s)", task.task_id, code, task.assigned_user_id)
        return task
