"""Domain models for sb_settlement."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Settlement:
    """The settlement marker. Its primary key (bet_id) makes settlement exactly-once."""

    bet_id: str
    kind: str                        # SettlementKind value
    outcome: bool | None
    fee_bps: int
    auto_voided: bool
    settled_by_id: str
    total_pot: int
    paid_out: int
    retained: int
    created_at: datetime | None = None
