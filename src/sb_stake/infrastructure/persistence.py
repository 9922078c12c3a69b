"""StakeRepository: concrete implementation of StakeRepositoryProtocol.

bet_entries has UNIQUE (bet_id, user_id). A stake either creates the row or
adds to it; the upsert's WHERE clause refuses to add to a row on the other
side, so side exclusivity holds even if an earlier check was bypassed.

Transaction ownership: the caller (StakeService via run_atomic).
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.enums import enum_value
from src.sb_common.ids import parse_uuid
from src.sb_stake.domain.models import BetEntry

_ENTRY_COLUMNS = "id, bet_id, user_id, side, stake, created_at, updated_at"

_GET_ENTRY_SQL = text(f"""
    SELECT {_ENTRY_COLUMNS}
    FROM bet_entries
    WHERE bet_id = :bet_id AND user_id = :user_id
""")

# Serializes the "is there room for one more participant" check per bet.
# Transaction-scoped: released automatically on commit/rollback.
_PARTICIPANT_LOCK_SQL = text(
    "SELECT pg_advisory_xact_lock(hashtextextended(CAST(:lock_key AS TEXT), 0))"
)

_COUNT_PARTICIPANTS_SQL = text(
    "SELECT COUNT(*) FROM bet_entries WHERE bet_id = :bet_id"
)

_UPSERT_ENTRY_SQL = text(f"""
    INSERT INTO bet_entries (bet_id, user_id, side, stake)
    VALUES (:bet_id, :user_id, :side, :amount)
    ON CONFLICT (bet_id, user_id) DO UPDATE
        SET stake = bet_entries.stake + EXCLUDED.stake,
            updated_at = NOW()
        WHERE bet_entries.side = EXCLUDED.side
    RETURNING {_ENTRY_COLUMNS}
""")

_LIST_ENTRIES_SQL = text(f"""
    SELECT {_ENTRY_COLUMNS}
    FROM bet_entries
    WHERE bet_id = :bet_id
    ORDER BY id
""")


def _row_to_entry(row: Any) -> BetEntry:
    return BetEntry(
        id=row.id,
        bet_id=str(row.bet_id),
        user_id=str(row.user_id),
        side=row.side,
        stake=int(row.stake),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class StakeRepository:
    async def get_entry(
        self, db: AsyncSession, bet_id: str, user_id: str
    ) -> BetEntry | None:
        row = (
            await db.execute(
                _GET_ENTRY_SQL,
                {"bet_id": parse_uuid(bet_id), "user_id": parse_uuid(user_id)},
            )
        ).fetchone()
        return _row_to_entry(row) if row is not None else None

    async def lock_participants(self, db: AsyncSession, bet_id: str) -> None:
        await db.execute(_PARTICIPANT_LOCK_SQL, {"lock_key": f"bet_entries:{bet_id}"})

    async def count_participants(self, db: AsyncSession, bet_id: str) -> int:
        result = await db.execute(_COUNT_PARTICIPANTS_SQL, {"bet_id": parse_uuid(bet_id)})
        return int(result.scalar_one())

    async def upsert_entry(
        self, db: AsyncSession, bet_id: str, user_id: str, side: str, amount: int
    ) -> BetEntry | None:
        """Returns None when the user already holds the opposite side."""
        row = (
            await db.execute(
                _UPSERT_ENTRY_SQL,
                {
                    "bet_id": parse_uuid(bet_id),
                    "user_id": parse_uuid(user_id),
                    "side": enum_value(side),
                    "amount": amount,
                },
            )
        ).fetchone()
        return _row_to_entry(row) if row is not None else None

    async def list_entries(self, db: AsyncSession, bet_id: str) -> list[BetEntry]:
        uid = parse_uuid(bet_id)
        if uid is None:
            return []
        rows = (await db.execute(_LIST_ENTRIES_SQL, {"bet_id": uid})).fetchall()
        return [_row_to_entry(r) for r in rows]
