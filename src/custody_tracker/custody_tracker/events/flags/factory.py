from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ...core.constants import DEFAULT_EXPECTED_TRAVEL_MINUTES, DEFAULT_SUSPICIOUS_GRACE_MINUTES, TRAVEL_TIME_TOLERANCE
from .base import SuspiciousRule
from .time_window_rule import TimeWindowRule
from .travel_time_rule import TravelTimeRule


@dataclass
class SuspiciousRuleFactory:
    """Factory Pattern: build the configured rule set."""

    grace_minutes: int = DEFAULT_SUSPICIOUS_GRACE_MINUTES
    expected_travel_minutes: int = DEFAULT_EXPECTED_TRAVEL_MINUTES
    travel_tolerance: float = TRAVEL_TIME_TOLERANCE

    def build(self) -> List[SuspiciousRule]:
        return [
            TimeWindowRule(self.grace_minutes),
            TravelTimeRule(self.expected_travel_minutes, self.travel_tolerance),
        ]
