"""Domain models for sb_stake: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class BetEntry:
    """A user's single position on a bet. One row per (bet_id, user_id)."""

    id: int
    bet_id: str
    user_id: str
    side: str                        # Side value, fixed once placed
    stake: int                       # Neos, cumulative, always > 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
