from __future__ import annotations

from typing import Sequence

import mysql.connector

from ..core.enums import EventType, TaskStatus
from ..core.exceptions import DuplicateEventError, TaskCompletedError, TaskNotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone, is_duplicate_key
from ..tasks.model import Task
from .model import TaskEvent
from .repository import TaskEventRepository


class MySQLTaskEventRepository(TaskEventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_task(self, task_id: str) -> Sequence[TaskEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT event_id, task_id, event_type, image_url, image_hash,
                       latitude, longitude, server_timestamp, created_at
                FROM task_events
                WHERE task_id=%s
                ORDER BY server_timestamp ASC
                """,
                (task_id,),
            )
            rows = fetchall(cur)
            return [
                TaskEvent(
                    event_id=str(r["event_id"]),
                    task_id=str(r["task_id"]),
                    event_type=EventType(r["event_type"]),
                    image_url=r["image_url"],
                    image_hash=r["image_hash"],
                    latitude=as_float(r["latitude"]),
                    longitude=as_float(r["longitude"]),
                    server_timestamp=r["server_timestamp"],
                    created_at=r.get("created_at"),
                )
                for r in rows
            ]

    def append(self, *, event: TaskEvent, task: Task) -> TaskEvent:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                # Row lock serializes writers for this task across processes.
                cur.execute("SELECT status FROM tasks WHERE task_id=%s FOR UPDATE", (event.task_id,))
                row = fetchone(cur)
                if not row:
                    raise TaskNotFoundError(f"Task with ID '{event.task_id}' not found")
                if TaskStatus(row["status"]) == TaskStatus.COMPLETED:
                    raise TaskCompletedError("Task is already completed. No more events can be recorded.")

                cur.execute(
                    """
                    INSERT INTO task_events(
                        event_id, task_id, event_type, image_url, image_hash,
                        latitude, longitude, server_timestamp, created_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        event.event_id,
                        event.task_id,
                        event.event_type.value,
                        event.image_url,
                        event.image_hash,
                        event.latitude,
                        event.longitude,
                        event.server_timestamp,
                        event.created_at or event.server_timestamp,
                    ),
                )
                cur.execute(
                    """
                    UPDATE tasks
                    SET status=%s, is_suspicious=GREATEST(is_suspicious, %s)
                    WHERE task_id=%s
                    """,
                    (task.status.value, int(task.is_suspicious), task.task_id),
                )
        except mysql.connector.Error as exc:
            if is_duplicate_key(exc):
                raise DuplicateEventError(
                    f"Event type '{event.event_type.value}' has already been recorded for this task"
                ) from exc
            raise
        return event
