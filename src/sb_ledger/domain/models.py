"""Domain models for sb_ledger: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

# System account that receives fees and flooring residue from settlement.
PLATFORM_FEE_ACCOUNT = "PLATFORM_FEE"


@dataclass
class LedgerEntry:
    id: int                          # BIGSERIAL
    user_id: str                     # user UUID or PLATFORM_FEE_ACCOUNT
    amount: int                      # Neos, positive=credit negative=debit, never 0
    entry_type: str                  # LedgerEntryType value
    bet_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
