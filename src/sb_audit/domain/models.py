"""Domain models for sb_audit."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class AdminAction:
    id: int
    admin_id: str
    action: str                      # AdminActionType value
    target_type: str                 # AuditTargetType value
    target_id: str
    detail: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
