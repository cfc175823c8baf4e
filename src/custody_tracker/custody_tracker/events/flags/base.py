from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from ...core.enums import AuditAction
from ...tasks.model import Task
from ..model import TaskEvent


@dataclass(frozen=True)
class FlagReason:
    rule: str
    detail: str
    audit_action: AuditAction = AuditAction.TASK_FLAGGED_SUSPICIOUS


class SuspiciousRule(ABC):
    """Strategy Pattern: one advisory check on an accepted event."""

    name: str = "rule"

    @abstractmethod
    def check(self, *, task: Task, event: TaskEvent, previous_events: Sequence[TaskEvent]) -> Optional[FlagReason]:
        raise NotImplementedError
