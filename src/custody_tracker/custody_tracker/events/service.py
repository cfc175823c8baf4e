from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..audit.service import AuditService
from ..common.datetime_utils import now_utc
from ..common.images import ImageUpload, compute_hash
from ..common.locks import KeyedLock
from ..common.validators import parse_enum, parse_latitude, parse_longitude
from ..core.enums import AuditAction, EventType, Role
from ..core.exceptions import (
    AuthorizationError,
    DuplicateEventError,
    SequenceViolationError,
    TaskCompletedError,
    TaskNotFoundError,
    ValidationError,
)
from ..storage.image_store import ImageStore
from ..tasks.model import Task
from ..tasks.service import TaskService
from ..tasks.state_machine import TaskStateMachine
from .flags.engine import FlagDecision, SuspiciousFlagEngine
from .model import AllowedEvents, TaskEvent
from .policy import COMPLETE, EventSequencePolicy
from .repository import TaskEventRepository

logger = logging.getLogger(__name__)


class EventIngestService:
    """Accepts proof-of-custody submissions for a task.

    Flow: validate input -> load task and check assignment -> reject if
    COMPLETED -> (per-task lock) duplicate check -> sequence check -> server
    timestamp + image hash -> store image -> state machine + suspicious flags
    -> one atomic write of the event and the task status -> audit.

    Rule violations (duplicate, sequence, completed) are hard failures and
    write nothing. Timing anomalies are soft: the event is kept and the task
    is flagged SUSPICIOUS.
    """

    def __init__(
        self,
        task_service: TaskService,
        events: TaskEventRepository,
        images: ImageStore,
        audit: AuditService,
        *,
        policy: EventSequencePolicy | None = None,
        state_machine: TaskStateMachine | None = None,
        flag_engine: SuspiciousFlagEngine | None = None,
        locks: KeyedLock | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._task_service = task_service
        self._events = events
        self._images = images
        self._audit = audit
        self._policy = policy or EventSequencePolicy()
        self._state_machine = state_machine or TaskStateMachine(self._policy)
        self._flags = flag_engine or SuspiciousFlagEngine(self._state_machine)
        self._locks = locks or KeyedLock()
        self._clock = clock

    def submit(
        self,
        task_id: str,
        *,
        agent_id: str,
        event_type: Any,
        image: Optional[ImageUpload],
        latitude: Any,
        longitude: Any,
        ip_address: Optional[str] = None,
    ) -> TaskEvent:
        event_type = parse_enum(EventType, event_type, "event_type")
        lat = parse_latitude(latitude)
        lng = parse_longitude(longitude)
        if image is None or not image.content:
            raise ValidationError("Image file is required")

        task = self._load_for_agent(task_id, agent_id, ip_address)
        self._ensure_open(task, agent_id, ip_address)

        with self._locks.hold(task.task_id):
            # Re-read under the lock: another request may have advanced the task meanwhile.
            task = self._task_service.get_task(task.task_id)
            self._ensure_open(task, agent_id, ip_address)

            previous = list(self._events.list_for_task(task.task_id))
            completed = {e.event_type for e in previous}

            if event_type in completed:
                self._audit_rejection(AuditAction.EVENT_REJECTED_DUPLICATE, task, agent_id, ip_address)
                raise DuplicateEventError(f"Event type '{event_type.value}' has already been recorded for this task")

            expected = self._policy.next_expected(completed, task.is_afternoon_shift)
            if expected != event_type:
                self._audit_rejection(AuditAction.EVENT_REJECTED_SEQUENCE, task, agent_id, ip_address)
                if expected == COMPLETE:
                    raise SequenceViolationError("All events for this task have already been recorded.")
                raise SequenceViolationError(
                    f"'{event_type.value}' is not allowed yet. Complete '{expected.value}' first.",
                    expected=expected.value,
                )

            server_timestamp = self._clock()
            image_url = self._images.save(
                key=f"task-events/{task.task_id}/{event_type.value}_{server_timestamp:%Y%m%d%H%M%S%f}.{image.extension}",
                content=image.content,
                mime_type=image.mime_type,
            )
            event = TaskEvent(
                event_id=str(uuid.uuid4()),
                task_id=task.task_id,
                event_type=event_type,
                image_url=image_url,
                image_hash=compute_hash(image.content),
                latitude=lat,
                longitude=lng,
                server_timestamp=server_timestamp,
                created_at=server_timestamp,
            )

            advanced = self._state_machine.on_event_accepted(task, event_type)
            decision = self._flags.evaluate(advanced, event, previous_events=previous)

            try:
                saved = self._events.append(event=event, task=decision.task)
            except DuplicateEventError:
                self._audit_rejection(AuditAction.EVENT_REJECTED_DUPLICATE, task, agent_id, ip_address)
                raise
            except TaskCompletedError:
                self._audit_rejection(AuditAction.EVENT_REJECTED_TASK_LOCKED, task, agent_id, ip_address)
                raise

        try:
            self._audit_accepted(task, decision, saved, agent_id, ip_address)
        except Exception:
            # Event already committed; the caller must still get it back.
            logger.exception("Task %s: audit write failed after %s was recorded", task.task_id, event_type.value)
        logger.info(
            "Task %s: %s recorded by %s (status %s -> %s%s)",
            task.task_id,
            event_type.value,
            agent_id,
            task.status.value,
            decision.task.status.value,
            ", SUSPICIOUS" if decision.task.is_suspicious else "",
        )
        return saved

    def list_events(self, task_id: str, *, user_id: str, role: Role) -> Sequence[TaskEvent]:
        task = self._task_service.get_for_viewer(task_id, user_id=user_id, role=role)
        return self._events.list_for_task(task.task_id)

    def allowed_events(self, task_id: str, *, user_id: str, role: Role) -> AllowedEvents:
        task = self._task_service.get_for_viewer(task_id, user_id=user_id, role=role)
        if not self._state_machine.can_accept_events(task):
            return AllowedEvents(next_event_type=None, remaining=())

        completed = {e.event_type for e in self._events.list_for_task(task.task_id)}
        expected = self._policy.next_expected(completed, task.is_afternoon_shift)
        return AllowedEvents(
            next_event_type=None if expected == COMPLETE else expected,
            remaining=self._policy.remaining(completed, task.is_afternoon_shift),
        )

    def _load_for_agent(self, task_id: str, agent_id: str, ip_address: Optional[str]) -> Task:
        try:
            return self._task_service.get_for_agent(task_id, user_id=agent_id)
        except AuthorizationError:
            self._audit.log(
                AuditAction.EVENT_UPLOAD_DENIED_NOT_ASSIGNED,
                entity_type="Task",
                entity_id=str(task_id),
                user_id=agent_id,
                ip_address=ip_address,
            )
            raise
        except TaskNotFoundError:
            logger.info("Event submission by %s for unknown task %s", agent_id, task_id)
            raise

    def _ensure_open(self, task: Task, agent_id: str, ip_address: Optional[str]) -> None:
        if not self._state_machine.can_accept_events(task):
            self._audit_rejection(AuditAction.EVENT_REJECTED_TASK_LOCKED, task, agent_id, ip_address)
            raise TaskCompletedError("Task is already completed. No more events can be recorded.")

    def _audit_rejection(self, action: AuditAction, task: Task, agent_id: str, ip_address: Optional[str]) -> None:
        logger.info("Task %s: submission by %s rejected (%s)", task.task_id, agent_id, action.value)
        self._audit.log(action, entity_type="TaskEvent", entity_id=task.task_id, user_id=agent_id, ip_address=ip_address)

    def _audit_accepted(
        self, before: Task, decision: FlagDecision, event: TaskEvent, agent_id: str, ip_address: Optional[str]
    ) -> None:
        self._audit.log(
            AuditAction.EVENT_UPLOADED,
            entity_type="TaskEvent",
            entity_id=event.event_id,
            user_id=agent_id,
            ip_address=ip_address,
        )
        if decision.task.status != before.status:
            self._audit.log(
                AuditAction.TASK_STATUS_CHANGED,
                entity_type="Task",
                entity_id=before.task_id,
                user_id=agent_id,
                ip_address=ip_address,
            )
        for reason in decision.reasons:
            self._audit.log(
                reason.audit_action,
                entity_type="Task",
                entity_id=before.task_id,
                user_id=agent_id,
                ip_address=ip_address,
            )
