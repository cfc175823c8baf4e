"""Delivery protocol: which custody event may be recorded next."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, Tuple, Union

from ..core.enums import EventType


class SequenceState(str, Enum):
    COMPLETE = "COMPLETE"


COMPLETE = SequenceState.COMPLETE

DELIVERY_PROTOCOL: Tuple[EventType, ...] = (
    EventType.PICKUP_POLICE_STATION,
    EventType.ARRIVAL_EXAM_CENTER,
    EventType.OPENING_SEAL,
    EventType.SEALING_ANSWER_SHEETS,
    EventType.SUBMISSION_POST_OFFICE,
)

# Afternoon shift of a double shift: pickup and arrival were recorded in the morning.
AFTERNOON_SHIFT_START = EventType.OPENING_SEAL


@dataclass(frozen=True)
class EventSequencePolicy:
    """Single authority for event ordering.

    The protocol is one ordered tuple; the afternoon-shift order is the suffix
    starting at ``afternoon_start``. Nothing else in the code base repeats the
    order, clients derive what to show from ``next_expected``.
    """

    protocol: Tuple[EventType, ...] = DELIVERY_PROTOCOL
    afternoon_start: EventType = AFTERNOON_SHIFT_START

    def __post_init__(self):
        if not self.protocol or len(set(self.protocol)) != len(self.protocol):
            raise ValueError("protocol must be a non-empty sequence of distinct event types")
        if self.afternoon_start not in self.protocol:
            raise ValueError("afternoon_start must be part of the protocol")

    def order_for(self, is_afternoon_shift: bool) -> Tuple[EventType, ...]:
        if is_afternoon_shift:
            return self.protocol[self.protocol.index(self.afternoon_start):]
        return self.protocol

    def next_expected(
        self, completed: AbstractSet[EventType], is_afternoon_shift: bool
    ) -> Union[EventType, SequenceState]:
        for event_type in self.order_for(is_afternoon_shift):
            if event_type not in completed:
                return event_type
        return COMPLETE

    def is_allowed(self, event_type: EventType, completed: AbstractSet[EventType], is_afternoon_shift: bool) -> bool:
        return self.next_expected(completed, is_afternoon_shift) == event_type

    def remaining(self, completed: AbstractSet[EventType], is_afternoon_shift: bool) -> Tuple[EventType, ...]:
        return tuple(t for t in self.order_for(is_afternoon_shift) if t not in completed)

    def final_type(self, is_afternoon_shift: bool) -> EventType:
        return self.order_for(is_afternoon_shift)[-1]
