"""Pydantic schemas and cursor utilities for the wallet API."""

import base64
import json

from pydantic import BaseModel

from src.sb_common.neos import neos_to_display
from src.sb_ledger.domain.models import LedgerEntry

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


_BIGINT_MAX = 2**63 - 1


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error.

    Only a positive integer id within BIGINT range is accepted; anything else
    (floats, strings, overflowing numbers) reads as "no cursor".
    """
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        last_id = payload["id"]
    except (ValueError, KeyError, TypeError):
        return None
    if isinstance(last_id, bool) or not isinstance(last_id, int):
        return None
    if not (0 < last_id <= _BIGINT_MAX):
        return None
    return last_id


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    user_id: str
    balance: int
    balance_display: str

    @classmethod
    def from_neos(cls, user_id: str, balance: int) -> "BalanceResponse":
        return cls(user_id=user_id, balance=balance, balance_display=neos_to_display(balance))


class LedgerEntryItem(BaseModel):
    id: int
    entry_type: str
    amount: int
    amount_display: str
    bet_id: str | None
    metadata: dict[str, object]
    created_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, e: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=e.id,
            entry_type=e.entry_type,
            amount=e.amount,
            amount_display=neos_to_display(e.amount),
            bet_id=e.bet_id,
            metadata=e.metadata,
            created_at=e.created_at.isoformat() if e.created_at else "",
        )


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool
