from datetime import datetime
from decimal import Decimal

import pytest
from mysql.connector import errors

from conftest import build_task
from fake_mysql import FakeConnection, FakeConnFactory
from src.custody_tracker.custody_tracker.attendance.model import AttendanceRecord
from src.custody_tracker.custody_tracker.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.custody_tracker.custody_tracker.core.enums import EventType, LocationType, TaskStatus
from src.custody_tracker.custody_tracker.core.exceptions import (
    AlreadyMarkedError,
    DuplicateEventError,
    StorageUnavailableError,
    TaskCompletedError,
    TaskNotFoundError,
)
from src.custody_tracker.custody_tracker.events.model import TaskEvent
from src.custody_tracker.custody_tracker.events.mysql_event_repository import MySQLTaskEventRepository
from src.custody_tracker.custody_tracker.tasks.mysql_task_repository import MySQLTaskRepository

TS = datetime(2026, 3, 1, 9, 5)


def _event(event_type=EventType.PICKUP_POLICE_STATION):
    return TaskEvent(
        event_id="event-1",
        task_id="task-1",
        event_type=event_type,
        image_url="/uploads/x.png",
        image_hash="a" * 64,
        latitude=26.1862,
        longitude=91.7457,
        server_timestamp=TS,
    )


def _record():
    return AttendanceRecord(
        attendance_id="att-1",
        task_id="task-1",
        user_id="agent-1",
        location_type=LocationType.PICKUP,
        image_url="/uploads/a.png",
        image_hash="b" * 64,
        latitude=26.1862,
        longitude=91.7457,
        is_within_geofence=True,
        distance_from_target=0.0,
        server_timestamp=TS,
    )


def _duplicate():
    return errors.IntegrityError(msg="Duplicate entry 'task-1-PICKUP_POLICE_STATION'", errno=1062)


def test_append_inserts_and_updates_in_one_transaction():
    conn = FakeConnection([[{"status": "PENDING"}], None, None])
    repo = MySQLTaskEventRepository(FakeConnFactory(conn))
    task = build_task(status=TaskStatus.IN_PROGRESS, is_suspicious=True)

    repo.append(event=_event(), task=task)

    sqls = [sql for sql, _ in conn.statements]
    assert sqls[0].endswith("FOR UPDATE")
    assert sqls[1].startswith("INSERT INTO task_events")
    assert sqls[2].startswith("UPDATE tasks")
    assert conn.statements[2][1] == ("IN_PROGRESS", 1, "task-1")
    assert conn.committed


def test_append_duplicate_key_is_duplicate_event():
    conn = FakeConnection([[{"status": "IN_PROGRESS"}], _duplicate()])
    repo = MySQLTaskEventRepository(FakeConnFactory(conn))

    with pytest.raises(DuplicateEventError):
        repo.append(event=_event(), task=build_task(status=TaskStatus.IN_PROGRESS))

    assert conn.rollback_attempted
    assert not conn.committed


def test_append_rechecks_completed_under_row_lock():
    conn = FakeConnection([[{"status": "COMPLETED"}]])
    repo = MySQLTaskEventRepository(FakeConnFactory(conn))

    with pytest.raises(TaskCompletedError):
        repo.append(event=_event(EventType.SUBMISSION_POST_OFFICE), task=build_task(status=TaskStatus.COMPLETED))

    assert len(conn.statements) == 1
    assert not conn.committed


def test_append_missing_task():
    conn = FakeConnection([[]])
    with pytest.raises(TaskNotFoundError):
        MySQLTaskEventRepository(FakeConnFactory(conn)).append(event=_event(), task=build_task())


def test_append_deadlock_is_storage_unavailable_not_duplicate():
    conn = FakeConnection([[{"status": "IN_PROGRESS"}], errors.DatabaseError(msg="Deadlock found", errno=1213)])

    with pytest.raises(StorageUnavailableError):
        MySQLTaskEventRepository(FakeConnFactory(conn)).append(event=_event(), task=build_task())


def test_attendance_duplicate_key_is_already_marked():
    conn = FakeConnection([_duplicate()])
    with pytest.raises(AlreadyMarkedError):
        MySQLAttendanceRepository(FakeConnFactory(conn)).create(_record())


def test_attendance_lock_wait_is_storage_unavailable():
    conn = FakeConnection([errors.DatabaseError(msg="Lock wait timeout exceeded", errno=1205)])
    with pytest.raises(StorageUnavailableError):
        MySQLAttendanceRepository(FakeConnFactory(conn)).create(_record())


def test_task_row_mapping():
    row = {
        "task_id": "task-1",
        "sealed_pack_code": "PACK-001",
        "source_location": "Panbazar Police Station",
        "destination_location": "Cotton University",
        "pickup_latitude": Decimal("26.1862000"),
        "pickup_longitude": Decimal("91.7457000"),
        "destination_latitude": None,
        "destination_longitude": None,
        "assigned_user_id": "agent-1",
        "start_time": datetime(2026, 3, 1, 9, 0),
        "end_time": datetime(2026, 3, 1, 12, 0),
        "status": "IN_PROGRESS",
        "is_suspicious": 1,
        "exam_type": "REGULAR",
        "is_double_shift": 0,
        "shift_type": None,
        "geofence_radius": 100,
        "expected_travel_time": None,
        "created_at": None,
    }
    task = MySQLTaskRepository(FakeConnFactory(FakeConnection([[row]]))).get_by_id("task-1")

    assert task.status == TaskStatus.IN_PROGRESS
    assert task.is_suspicious is True
    assert task.pickup_latitude == pytest.approx(26.1862)
    assert task.target_for(LocationType.DESTINATION) is None
