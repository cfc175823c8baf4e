from __future__ import annotations

from typing import Any, Dict, Optional

import mysql.connector

from ..core.enums import ExamType, ShiftType, TaskStatus
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_float, db_cursor, fetchone, is_duplicate_key
from .model import Task
from .repository import TaskRepository

TASK_COLUMNS = """
    task_id, sealed_pack_code, source_location, destination_location,
    pickup_latitude, pickup_longitude, destination_latitude, destination_longitude,
    assigned_user_id, start_time, end_time, status, is_suspicious, exam_type,
    is_double_shift, shift_type, geofence_radius, expected_travel_time, created_at
"""


def row_to_task(r: Dict[str, Any]) -> Task:
    return Task(
        task_id=str(r["task_id"]),
        sealed_pack_code=r["sealed_pack_code"],
        source_location=r["source_location"],
        destination_location=r["destination_location"],
        assigned_user_id=str(r["assigned_user_id"]),
        start_time=r["start_time"],
        end_time=r["end_time"],
        status=TaskStatus(r["status"]),
        is_suspicious=bool(as_bool(r["is_suspicious"])),
        exam_type=ExamType(r["exam_type"]),
        is_double_shift=bool(as_bool(r["is_double_shift"])),
        shift_type=ShiftType(r["shift_type"]) if r.get("shift_type") else None,
        pickup_latitude=as_float(r.get("pickup_latitude")),
        pickup_longitude=as_float(r.get("pickup_longitude")),
        destination_latitude=as_float(r.get("destination_latitude")),
        destination_longitude=as_float(r.get("destination_longitude")),
        geofence_radius=int(r["geofence_radius"]) if r.get("geofence_radius") is not None else None,
        expected_travel_time=int(r["expected_travel_time"]) if r.get("expected_travel_time") is not None else None,
        created_at=r.get("created_at"),
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, task_id: str) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {TASK_COLUMNS} FROM tasks WHERE task_id=%s", (task_id,))
            r = fetchone(cur)
            return row_to_task(r) if r else None

    def get_by_pack_code(self, sealed_pack_code: str) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {TASK_COLUMNS} FROM tasks WHERE sealed_pack_code=%s", (sealed_pack_code,))
            r = fetchone(cur)
            return row_to_task(r) if r else None

    def insert(self, task: Task) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO tasks ({TASK_COLUMNS})
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        task.task_id,
                        task.sealed_pack_code,
                        task.source_location,
                        task.destination_location,
                        task.pickup_latitude,
                        task.pickup_longitude,
                        task.destination_latitude,
                        task.destination_longitude,
                        task.assigned_user_id,
                        task.start_time,
                        task.end_time,
                        task.status.value,
                        int(task.is_suspicious),
                        task.exam_type.value,
                        int(task.is_double_shift),
                        task.shift_type.value if task.shift_type else None,
                        task.geofence_radius,
                        task.expected_travel_time,
                        task.created_at,
                    ),
                )
        except mysql.connector.Error as exc:
            if is_duplicate_key(exc):
                raise ValidationError(f"Task with sealed pack code '{task.sealed_pack_code}' already exists") from exc
            raise
