from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import LocationType
from ..core.exceptions import AlreadyMarkedError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_float, db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceRecord
from .repository import AttendanceRepository

ATTENDANCE_COLUMNS = """
    attendance_id, task_id, user_id, location_type, image_url, image_hash,
    latitude, longitude, is_within_geofence, distance_from_target, server_timestamp, created_at
"""


def _row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=str(r["attendance_id"]),
        task_id=str(r["task_id"]),
        user_id=str(r["user_id"]),
        location_type=LocationType(r["location_type"]),
        image_url=r["image_url"],
        image_hash=r["image_hash"],
        latitude=as_float(r["latitude"]),
        longitude=as_float(r["longitude"]),
        is_within_geofence=as_bool(r.get("is_within_geofence")),
        distance_from_target=as_float(r.get("distance_from_target")),
        server_timestamp=r["server_timestamp"],
        created_at=r.get("created_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_task_and_location(self, task_id: str, location_type: LocationType) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {ATTENDANCE_COLUMNS}
                FROM attendance_records
                WHERE task_id=%s AND location_type=%s
                """,
                (task_id, location_type.value),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def list_for_task(self, task_id: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {ATTENDANCE_COLUMNS}
                FROM attendance_records
                WHERE task_id=%s
                ORDER BY server_timestamp ASC
                """,
                (task_id,),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO attendance_records({ATTENDANCE_COLUMNS})
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.attendance_id,
                        record.task_id,
                        record.user_id,
                        record.location_type.value,
                        record.image_url,
                        record.image_hash,
                        record.latitude,
                        record.longitude,
                        None if record.is_within_geofence is None else int(record.is_within_geofence),
                        record.distance_from_target,
                        record.server_timestamp,
                        record.created_at or record.server_timestamp,
                    ),
                )
        except mysql.connector.Error as exc:
            if is_duplicate_key(exc):
                raise AlreadyMarkedError(
                    f"Attendance already marked for {record.location_type.value} location"
                ) from exc
            raise
        return record
