import pytest

from src.custody_tracker.custody_tracker.core.enums import EventType
from src.custody_tracker.custody_tracker.events.policy import COMPLETE, DELIVERY_PROTOCOL, EventSequencePolicy

E = EventType


def test_full_shift_starts_with_pickup():
    assert EventSequencePolicy().next_expected(set(), False) == E.PICKUP_POLICE_STATION


def test_afternoon_shift_starts_with_opening_seal():
    assert EventSequencePolicy().next_expected(set(), True) == E.OPENING_SEAL


def test_next_expected_walks_the_protocol():
    policy = EventSequencePolicy()
    completed = set()
    seen = []
    expected = policy.next_expected(completed, False)
    while expected != COMPLETE:
        seen.append(expected)
        completed.add(expected)
        expected = policy.next_expected(completed, False)
    assert tuple(seen) == DELIVERY_PROTOCOL


def test_gap_returns_first_missing_step():
    policy = EventSequencePolicy()
    completed = {E.PICKUP_POLICE_STATION, E.OPENING_SEAL}
    assert policy.next_expected(completed, False) == E.ARRIVAL_EXAM_CENTER


def test_afternoon_complete_after_three_events():
    policy = EventSequencePolicy()
    completed = {E.OPENING_SEAL, E.SEALING_ANSWER_SHEETS, E.SUBMISSION_POST_OFFICE}
    assert policy.next_expected(completed, True) == COMPLETE
    assert policy.remaining(completed, True) == ()


def test_is_allowed_only_for_the_next_step():
    policy = EventSequencePolicy()
    assert policy.is_allowed(E.PICKUP_POLICE_STATION, set(), False)
    assert not policy.is_allowed(E.OPENING_SEAL, set(), False)
    assert not policy.is_allowed(E.PICKUP_POLICE_STATION, set(), True)


def test_remaining_and_final_type():
    policy = EventSequencePolicy()
    assert policy.remaining({E.PICKUP_POLICE_STATION}, False) == DELIVERY_PROTOCOL[1:]
    assert policy.final_type(False) == E.SUBMISSION_POST_OFFICE
    assert policy.final_type(True) == E.SUBMISSION_POST_OFFICE
    assert policy.order_for(True) == DELIVERY_PROTOCOL[2:]


def test_protocol_must_not_repeat_events():
    with pytest.raises(ValueError):
        EventSequencePolicy(protocol=(E.PICKUP_POLICE_STATION, E.PICKUP_POLICE_STATION))
    with pytest.raises(ValueError):
        EventSequencePolicy(protocol=(E.PICKUP_POLICE_STATION,), afternoon_start=E.OPENING_SEAL)
