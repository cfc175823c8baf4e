from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_utc
from ..core.enums import AuditAction
from .model import AuditLogEntry
from .repository import AuditLogRepository

logger = logging.getLogger(__name__)


class AuditService:
    """Append-only trail of accepted and rejected custody actions."""

    def __init__(self, logs: AuditLogRepository, *, clock: Callable[[], datetime] = now_utc):
        self._logs = logs
        self._clock = clock

    def log(
        self,
        action: AuditAction,
        *,
        entity_type: str,
        entity_id: Optional[str] = None,
        user_id: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> AuditLogEntry:
        entry = AuditLogEntry(
            log_id=str(uuid.uuid4()),
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            ip_address=ip_address,
            created_at=self._clock(),
        )
        self._logs.add(entry)
        logger.debug("audit %s %s/%s by %s", action.value, entity_type, entity_id, user_id)
        return entry
