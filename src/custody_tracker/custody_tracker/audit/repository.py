from __future__ import annotations

from typing import Protocol

from .model import AuditLogEntry


class AuditLogRepository(Protocol):
    def add(self, entry: AuditLogEntry) -> None:
        raise NotImplementedError
