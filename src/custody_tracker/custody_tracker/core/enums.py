from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles carried in the session by the external auth layer."""

    ADMIN = "ADMIN"
    DELIVERY = "DELIVERY"


class TaskStatus(str, Enum):
    """Wire values for task status.

    The stored lifecycle status only ever holds PENDING, IN_PROGRESS or
    COMPLETED; SUSPICIOUS is reported as an overlay (see ``Task.display_status``).
    """

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    SUSPICIOUS = "SUSPICIOUS"


class EventType(str, Enum):
    """Custody checkpoints of the delivery protocol."""

    PICKUP_POLICE_STATION = "PICKUP_POLICE_STATION"
    ARRIVAL_EXAM_CENTER = "ARRIVAL_EXAM_CENTER"
    OPENING_SEAL = "OPENING_SEAL"
    SEALING_ANSWER_SHEETS = "SEALING_ANSWER_SHEETS"
    SUBMISSION_POST_OFFICE = "SUBMISSION_POST_OFFICE"


class ShiftType(str, Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"


class ExamType(str, Enum):
    REGULAR = "REGULAR"
    COMPARTMENTAL = "COMPARTMENTAL"


class LocationType(str, Enum):
    """Attendance checkpoints: police station (pickup) or exam center (destination)."""

    PICKUP = "PICKUP"
    DESTINATION = "DESTINATION"


class ErrorCode(str, Enum):
    """Stable error codes returned to clients (see ERROR_CODE_VERSION)."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    TASK_NOT_FOUND = "TASK_NOT_FOUND"
    TASK_COMPLETED = "TASK_COMPLETED"
    DUPLICATE_EVENT = "DUPLICATE_EVENT"
    SEQUENCE_VIOLATION = "SEQUENCE_VIOLATION"
    ALREADY_MARKED = "ALREADY_MARKED"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"


class AuditAction(str, Enum):
    EVENT_UPLOADED = "EVENT_UPLOADED"
    EVENT_REJECTED_DUPLICATE = "EVENT_REJECTED_DUPLICATE"
    EVENT_REJECTED_TASK_LOCKED = "EVENT_REJECTED_TASK_LOCKED"
    EVENT_REJECTED_SEQUENCE = "EVENT_REJECTED_SEQUENCE"
    EVENT_UPLOAD_DENIED_NOT_ASSIGNED = "EVENT_UPLOAD_DENIED_NOT_ASSIGNED"
    TASK_STATUS_CHANGED = "TASK_STATUS_CHANGED"
    TASK_FLAGGED_SUSPICIOUS = "TASK_FLAGGED_SUSPICIOUS"
    RED_FLAG_TRAVEL_TIME = "RED_FLAG_TRAVEL_TIME"
    ATTENDANCE_MARKED = "ATTENDANCE_MARKED"
    ATTENDANCE_REJECTED_DUPLICATE = "ATTENDANCE_REJECTED_DUPLICATE"
