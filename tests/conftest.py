from __future__ import annotations

import io
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Optional

import pytest
from PIL import Image

from src.custody_tracker.custody_tracker.attendance.model import AttendanceRecord
from src.custody_tracker.custody_tracker.audit.model import AuditLogEntry
from src.custody_tracker.custody_tracker.common.images import ImageUpload, validate_image_bytes
from src.custody_tracker.custody_tracker.container import Container, ServiceOptions, wire_container
from src.custody_tracker.custody_tracker.core.enums import LocationType, TaskStatus
from src.custody_tracker.custody_tracker.core.exceptions import (
    AlreadyMarkedError,
    DuplicateEventError,
    StorageUnavailableError,
    TaskCompletedError,
    TaskNotFoundError,
    ValidationError,
)
from src.custody_tracker.custody_tracker.events.model import TaskEvent
from src.custody_tracker.custody_tracker.tasks.model import Task

# Panbazar police station -> Cotton University exam center, Guwahati
PICKUP = (26.1862, 91.7457)
DESTINATION = (26.1869, 91.7468)


class InMemoryTasks:
    def __init__(self, tasks=()):
        self._by_id: dict[str, Task] = {t.task_id: t for t in tasks}

    def get_by_id(self, task_id: str) -> Optional[Task]:
        return self._by_id.get(task_id)

    def get_by_pack_code(self, sealed_pack_code: str) -> Optional[Task]:
        return next((t for t in self._by_id.values() if t.sealed_pack_code == sealed_pack_code), None)

    def insert(self, task: Task) -> None:
        if self.get_by_pack_code(task.sealed_pack_code):
            raise ValidationError("duplicate pack code")
        self._by_id[task.task_id] = task

    def put(self, task: Task) -> None:
        self._by_id[task.task_id] = task


class InMemoryEvents:
    """Mirrors the MySQL append: one atomic step that checks, inserts and updates the task."""

    def __init__(self, tasks: InMemoryTasks):
        self._tasks = tasks
        self._rows: list[TaskEvent] = []
        self._lock = threading.Lock()

    def list_for_task(self, task_id: str):
        with self._lock:
            rows = [e for e in self._rows if e.task_id == task_id]
        return sorted(rows, key=lambda e: e.server_timestamp)

    def append(self, *, event: TaskEvent, task: Task) -> TaskEvent:
        with self._lock:
            stored = self._tasks.get_by_id(event.task_id)
            if stored is None:
                raise TaskNotFoundError("missing")
            if stored.status == TaskStatus.COMPLETED:
                raise TaskCompletedError("completed")
            if any(e.task_id == event.task_id and e.event_type == event.event_type for e in self._rows):
                raise DuplicateEventError("duplicate")
            self._rows.append(event)
            self._tasks.put(
                replace(stored, status=task.status, is_suspicious=stored.is_suspicious or task.is_suspicious)
            )
        return event

    def count(self, task_id: str) -> int:
        return len(self.list_for_task(task_id))


class InMemoryAttendance:
    def __init__(self):
        self._rows: list[AttendanceRecord] = []
        self._lock = threading.Lock()

    def get_for_task_and_location(self, task_id: str, location_type: LocationType) -> Optional[AttendanceRecord]:
        return next((r for r in self._rows if r.task_id == task_id and r.location_type == location_type), None)

    def list_for_task(self, task_id: str):
        return sorted((r for r in self._rows if r.task_id == task_id), key=lambda r: r.server_timestamp)

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        with self._lock:
            if self.get_for_task_and_location(record.task_id, record.location_type):
                raise AlreadyMarkedError("already marked")
            self._rows.append(record)
        return record


class InMemoryAudit:
    def __init__(self):
        self.entries: list[AuditLogEntry] = []
        self.fail_on: set[str] = set()

    def add(self, entry: AuditLogEntry) -> None:
        if entry.action.value in self.fail_on:
            raise StorageUnavailableError("Database is unavailable, please retry")
        self.entries.append(entry)

    def actions(self) -> list[str]:
        return [e.action.value for e in self.entries]


class InMemoryImageStore:
    def __init__(self, *, fail: bool = False):
        self.saved: dict[str, bytes] = {}
        self.fail = fail

    def save(self, *, key: str, content: bytes, mime_type: str) -> str:
        if self.fail:
            raise StorageUnavailableError("Failed to store image, please try again")
        self.saved[key] = content
        return f"memory://{key}"


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, hour: int, minute: int = 0) -> None:
        self.now = self.now.replace(hour=hour, minute=minute, second=0, microsecond=0)

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def png_bytes(color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color).save(buf, format="PNG")
    return buf.getvalue()


def build_task(**overrides) -> Task:
    values = dict(
        task_id="task-1",
        sealed_pack_code="PACK-001",
        source_location="Panbazar Police Station",
        destination_location="Cotton University Exam Center",
        assigned_user_id="agent-1",
        start_time=datetime(2026, 3, 1, 9, 0),
        end_time=datetime(2026, 3, 1, 12, 0),
        pickup_latitude=PICKUP[0],
        pickup_longitude=PICKUP[1],
        destination_latitude=DESTINATION[0],
        destination_longitude=DESTINATION[1],
        created_at=datetime(2026, 2, 28, 18, 0),
    )
    values.update(overrides)
    return Task(**values)


@dataclass
class World:
    clock: FakeClock
    tasks: InMemoryTasks
    events: InMemoryEvents
    attendance: InMemoryAttendance
    audit: InMemoryAudit
    images: InMemoryImageStore
    container: Container
    image: ImageUpload = field(default_factory=lambda: validate_image_bytes(png_bytes(), filename="proof.png"))

    def add_task(self, **overrides) -> Task:
        task = build_task(**overrides)
        self.tasks.put(task)
        return task

    def task(self, task_id: str = "task-1") -> Task:
        return self.tasks.get_by_id(task_id)


def make_world(*, options: ServiceOptions | None = None, images: InMemoryImageStore | None = None) -> World:
    clock = FakeClock(datetime(2026, 3, 1, 9, 5))
    tasks = InMemoryTasks()
    events = InMemoryEvents(tasks)
    attendance = InMemoryAttendance()
    audit = InMemoryAudit()
    images = images or InMemoryImageStore()
    container = wire_container(
        tasks_repo=tasks,
        events_repo=events,
        attendance_repo=attendance,
        audit_repo=audit,
        image_store=images,
        options=options,
        clock=clock,
    )
    return World(
        clock=clock,
        tasks=tasks,
        events=events,
        attendance=attendance,
        audit=audit,
        images=images,
        container=container,
    )


@pytest.fixture
def world() -> World:
    w = make_world()
    w.add_task()
    return w
