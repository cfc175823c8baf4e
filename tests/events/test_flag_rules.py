from datetime import datetime

from conftest import build_task
from src.custody_tracker.custody_tracker.core.enums import AuditAction, EventType, TaskStatus
from src.custody_tracker.custody_tracker.events.flags.engine import SuspiciousFlagEngine
from src.custody_tracker.custody_tracker.events.flags.time_window_rule import TimeWindowRule
from src.custody_tracker.custody_tracker.events.flags.travel_time_rule import TravelTimeRule
from src.custody_tracker.custody_tracker.events.model import TaskEvent
from src.custody_tracker.custody_tracker.tasks.state_machine import TaskStateMachine


def _event(event_type: EventType, hour: int, minute: int = 0) -> TaskEvent:
    ts = datetime(2026, 3, 1, hour, minute)
    return TaskEvent(
        event_id=f"{event_type.value}-{hour}{minute}",
        task_id="task-1",
        event_type=event_type,
        image_url="memory://x",
        image_hash="0" * 64,
        latitude=26.18,
        longitude=91.74,
        server_timestamp=ts,
    )


def test_time_window_bounds_are_inclusive():
    rule = TimeWindowRule(grace_minutes=5)
    task = build_task()  # 09:00 - 12:00
    assert rule.check(task=task, event=_event(EventType.PICKUP_POLICE_STATION, 8, 55), previous_events=()) is None
    assert rule.check(task=task, event=_event(EventType.PICKUP_POLICE_STATION, 12, 5), previous_events=()) is None


def test_time_window_flags_outside_grace():
    rule = TimeWindowRule(grace_minutes=5)
    task = build_task()
    early = rule.check(task=task, event=_event(EventType.PICKUP_POLICE_STATION, 8, 54), previous_events=())
    late = rule.check(task=task, event=_event(EventType.SUBMISSION_POST_OFFICE, 13, 0), previous_events=())
    assert early is not None and "before" in early.detail
    assert late is not None and "after" in late.detail
    assert late.audit_action == AuditAction.TASK_FLAGGED_SUSPICIOUS


def test_travel_time_uses_task_expectation():
    rule = TravelTimeRule(default_expected_minutes=30, tolerance=1.5)
    task = build_task(expected_travel_time=20)
    pickup = _event(EventType.PICKUP_POLICE_STATION, 9, 0)

    ok = rule.check(task=task, event=_event(EventType.ARRIVAL_EXAM_CENTER, 9, 30), previous_events=[pickup])
    slow = rule.check(task=task, event=_event(EventType.ARRIVAL_EXAM_CENTER, 9, 31), previous_events=[pickup])

    assert ok is None
    assert slow is not None
    assert slow.audit_action == AuditAction.RED_FLAG_TRAVEL_TIME


def test_travel_time_falls_back_to_default():
    rule = TravelTimeRule(default_expected_minutes=30, tolerance=1.5)
    pickup = _event(EventType.PICKUP_POLICE_STATION, 9, 0)
    arrival = _event(EventType.ARRIVAL_EXAM_CENTER, 9, 46)
    assert rule.check(task=build_task(), event=arrival, previous_events=[pickup]) is not None


def test_travel_time_ignores_other_events_and_missing_pickup():
    rule = TravelTimeRule()
    task = build_task()
    assert rule.check(task=task, event=_event(EventType.ARRIVAL_EXAM_CENTER, 11, 0), previous_events=()) is None
    pickup = _event(EventType.PICKUP_POLICE_STATION, 9, 0)
    assert rule.check(task=task, event=_event(EventType.OPENING_SEAL, 11, 0), previous_events=[pickup]) is None


def test_engine_sets_overlay_without_touching_status():
    engine = SuspiciousFlagEngine(TaskStateMachine())
    task = build_task(status=TaskStatus.IN_PROGRESS)

    decision = engine.evaluate(task, _event(EventType.OPENING_SEAL, 13, 0))

    assert decision.flagged
    assert decision.task.is_suspicious
    assert decision.task.status == TaskStatus.IN_PROGRESS
    assert decision.task.display_status == TaskStatus.SUSPICIOUS


def test_engine_leaves_clean_event_alone():
    engine = SuspiciousFlagEngine(TaskStateMachine())
    task = build_task(status=TaskStatus.IN_PROGRESS)

    decision = engine.evaluate(task, _event(EventType.OPENING_SEAL, 10, 0))

    assert not decision.flagged
    assert decision.task is task
