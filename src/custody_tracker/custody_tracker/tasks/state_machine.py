from __future__ import annotations

from dataclasses import replace

from ..core.enums import EventType, TaskStatus
from ..core.exceptions import InvalidTransitionError
from ..events.policy import EventSequencePolicy
from .model import Task

_LIFECYCLE_RANK = {
    TaskStatus.PENDING: 0,
    TaskStatus.IN_PROGRESS: 1,
    TaskStatus.COMPLETED: 2,
}


class TaskStateMachine:
    """Lifecycle PENDING -> IN_PROGRESS -> COMPLETED plus the SUSPICIOUS overlay.

    Tasks are immutable; every transition returns a new ``Task``.
    """

    def __init__(self, policy: EventSequencePolicy | None = None):
        self._policy = policy or EventSequencePolicy()

    def can_accept_events(self, task: Task) -> bool:
        return task.status != TaskStatus.COMPLETED

    def on_event_accepted(self, task: Task, event_type: EventType) -> Task:
        if not self.can_accept_events(task):
            raise InvalidTransitionError(f"Task {task.task_id} is COMPLETED and cannot accept {event_type.value}")

        updated = task
        if updated.status == TaskStatus.PENDING:
            updated = self._transition(updated, TaskStatus.IN_PROGRESS)
        if event_type == self._policy.final_type(task.is_afternoon_shift):
            updated = self._transition(updated, TaskStatus.COMPLETED)
        return updated

    def set_suspicious(self, task: Task) -> Task:
        if task.is_suspicious:
            return task
        return replace(task, is_suspicious=True)

    def _transition(self, task: Task, target: TaskStatus) -> Task:
        current_rank = _LIFECYCLE_RANK.get(task.status)
        target_rank = _LIFECYCLE_RANK.get(target)
        if current_rank is None or target_rank is None or target_rank <= current_rank:
            raise InvalidTransitionError(f"Cannot move task {task.task_id} from {task.status.value} to {target.value}")
        return replace(task, status=target)
