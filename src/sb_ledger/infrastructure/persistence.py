"""LedgerRepository: concrete implementation of LedgerRepositoryProtocol.

ledger_entries is append-only (a trigger rejects UPDATE/DELETE). There is no
balance column anywhere: a balance is SUM(amount) over the user's rows.

Transaction ownership: the CALLER runs append() inside its own transaction
(see sb_common.transactions.run_atomic). No balance check happens here;
callers that debit check the balance first, under the user's row lock.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.enums import enum_value
from src.sb_common.errors import InternalError, InvalidAmountError
from src.sb_ledger.domain.models import LedgerEntry

_INSERT_ENTRY_SQL = text("""
    INSERT INTO ledger_entries (user_id, amount, entry_type, bet_id, metadata)
    VALUES (:user_id, :amount, :entry_type,
            CAST(:bet_id AS UUID), CAST(:metadata AS JSONB))
    RETURNING id, user_id, amount, entry_type, bet_id, metadata, created_at
""")

# SUM(BIGINT) is NUMERIC in PostgreSQL; cast back so the driver returns int.
_BALANCE_SQL = text("""
    SELECT CAST(COALESCE(SUM(amount), 0) AS BIGINT) AS balance
    FROM ledger_entries
    WHERE user_id = :user_id
""")

_LIST_ENTRIES_SQL = text("""
    SELECT id, user_id, amount, entry_type, bet_id, metadata, created_at
    FROM ledger_entries
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < CAST(:cursor_id AS BIGINT))
      AND (CAST(:entry_type AS TEXT) IS NULL OR entry_type = CAST(:entry_type AS TEXT))
    ORDER BY id DESC
    LIMIT :limit
""")


def _load_json(value: object) -> dict[str, Any]:
    """asyncpg hands JSONB back as text unless a codec is registered."""
    if value is None:
        return {}
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)  # type: ignore[call-overload]


def _row_to_entry(row: Any) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,
        user_id=row.user_id,
        amount=row.amount,
        entry_type=row.entry_type,
        bet_id=str(row.bet_id) if row.bet_id is not None else None,
        metadata=_load_json(row.metadata),
        created_at=row.created_at,
    )


class LedgerRepository:
    async def append(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        entry_type: str,
        bet_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> LedgerEntry:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidAmountError(f"ledger amount must be an integer, got {amount!r}")
        if amount == 0:
            raise InvalidAmountError("ledger amount must be non-zero")
        result = await db.execute(
            _INSERT_ENTRY_SQL,
            {
                "user_id": str(user_id),
                "amount": amount,
                "entry_type": enum_value(entry_type),
                "bet_id": str(bet_id) if bet_id is not None else None,
                "metadata": json.dumps(metadata) if metadata else None,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("ledger insert returned no row")
        return _row_to_entry(row)

    async def get_balance(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(_BALANCE_SQL, {"user_id": str(user_id)})
        return int(result.scalar_one())

    async def list_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_ENTRIES_SQL,
            {
                "user_id": str(user_id),
                "cursor_id": cursor_id,
                "entry_type": entry_type,
                "limit": limit,
            },
        )
        return [_row_to_entry(r) for r in result.fetchall()]
