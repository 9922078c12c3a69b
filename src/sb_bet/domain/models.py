"""Domain models for sb_bet: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.sb_common.enums import BetStatus, DerivedBetStatus


@dataclass
class Bet:
    id: str
    creator_id: str
    title: str
    description: str | None
    category: str | None
    end_at: datetime
    max_participants: int | None
    visibility: str                 # BetVisibility value
    audience: str                   # BetAudience value
    group_id: str | None
    invite_code_enabled: bool
    invite_salt: int                # rotation counter, feeds the invite HMAC
    hide_participants: bool
    status: str                     # BetStatus value (stored)
    resolution: bool | None         # True = FOR won; set only when RESOLVED
    resolved_by_id: str | None
    resolved_at: datetime | None
    hidden: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_locked(self, now: datetime) -> bool:
        """OPEN but past end_at: staking closed, awaiting settlement."""
        return self.status == BetStatus.OPEN and now >= self.end_at

    def derived_status(self, now: datetime) -> str:
        if self.is_locked(now):
            return DerivedBetStatus.LOCKED.value
        return self.status


@dataclass
class BetStats:
    total_pot: int = 0
    for_stake: int = 0
    against_stake: int = 0
    participant_count: int = 0
    for_count: int = 0
    against_count: int = 0
