from __future__ import annotations

from typing import Protocol, Sequence

from ..tasks.model import Task
from .model import TaskEvent


class TaskEventRepository(Protocol):
    def list_for_task(self, task_id: str) -> Sequence[TaskEvent]:
        """Events of one task ordered by server timestamp (oldest first)."""

        raise NotImplementedError

    def append(self, *, event: TaskEvent, task: Task) -> TaskEvent:
        """Insert ``event`` and store ``task.status`` / ``task.is_suspicious`` in one transaction.

        Raises ``DuplicateEventError`` when (task_id, event_type) already exists and
        ``TaskCompletedError`` when the stored task is already COMPLETED; nothing
        is written in either case.
        """

        raise NotImplementedError
