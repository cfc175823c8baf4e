from __future__ import annotations

from typing import Optional

from .enums import ErrorCode


class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass maps to one stable ``ErrorCode`` and an HTTP status so the
    controller layer never has to inspect the message text.
    """

    error_code: ErrorCode = ErrorCode.VALIDATION_ERROR
    http_status: int = 400

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.error_code.value


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when the request carries no valid agent identity."""

    error_code = ErrorCode.UNAUTHORIZED
    http_status = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    error_code = ErrorCode.UNAUTHORIZED
    http_status = 403


class TaskNotFoundError(DomainError):
    error_code = ErrorCode.TASK_NOT_FOUND
    http_status = 404


class TaskCompletedError(DomainError):
    """The task reached COMPLETED; no further events are accepted."""

    error_code = ErrorCode.TASK_COMPLETED
    http_status = 409


class DuplicateEventError(DomainError):
    error_code = ErrorCode.DUPLICATE_EVENT
    http_status = 409


class SequenceViolationError(DomainError):
    error_code = ErrorCode.SEQUENCE_VIOLATION
    http_status = 422

    def __init__(self, message: str, *, expected: Optional[str] = None):
        super().__init__(message)
        self.expected = expected


class AlreadyMarkedError(DomainError):
    error_code = ErrorCode.ALREADY_MARKED
    http_status = 409


class StorageUnavailableError(DomainError):
    """Transient infrastructure failure (database, image store, lock wait). Safe to retry."""

    error_code = ErrorCode.STORAGE_UNAVAILABLE
    http_status = 503


class InvalidTransitionError(RuntimeError):
    """Programming error: a lifecycle transition that must never be requested."""
