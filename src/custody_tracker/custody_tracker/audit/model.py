from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AuditAction


@dataclass(frozen=True)
class AuditLogEntry:
    log_id: str
    action: AuditAction
    entity_type: str
    entity_id: Optional[str]
    user_id: Optional[str]
    ip_address: Optional[str]
    created_at: datetime
