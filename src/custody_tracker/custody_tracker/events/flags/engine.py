from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

from ...tasks.model import Task
from ...tasks.state_machine import TaskStateMachine
from ..model import TaskEvent
from .base import FlagReason, SuspiciousRule
from .factory import SuspiciousRuleFactory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlagDecision:
    task: Task
    reasons: Tuple[FlagReason, ...] = ()

    @property
    def flagged(self) -> bool:
        return bool(self.reasons)


class SuspiciousFlagEngine:
    """Advisory checks on accepted events.

    Never rejects an event and never changes whether the task accepts events;
    a triggered rule only sets the SUSPICIOUS overlay.
    """

    def __init__(self, state_machine: TaskStateMachine, rules: Sequence[SuspiciousRule] | None = None):
        self._state_machine = state_machine
        self._rules = list(rules) if rules is not None else SuspiciousRuleFactory().build()

    def evaluate(self, task: Task, event: TaskEvent, *, previous_events: Sequence[TaskEvent] = ()) -> FlagDecision:
        reasons = []
        for rule in self._rules:
            reason = rule.check(task=task, event=event, previous_events=previous_events)
            if reason is not None:
                reasons.append(reason)

        if not reasons:
            return FlagDecision(task=task)

        logger.info(
            "Task %s flagged on %s: %s",
            task.task_id,
            event.event_type.value,
            "; ".join(f"{r.rule}: {r.detail}" for r in reasons),
        )
        return FlagDecision(task=self._state_machine.set_suspicious(task), reasons=tuple(reasons))
