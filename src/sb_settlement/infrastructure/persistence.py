"""SettlementRepository: the settlements table.

insert() uses ON CONFLICT DO NOTHING RETURNING: a second settlement of the
same bet inserts nothing and reports False, and the caller rolls back.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.enums import enum_value
from src.sb_common.ids import parse_uuid
from src.sb_settlement.domain.models import Settlement

_COLUMNS = """
    bet_id, kind, outcome, fee_bps, auto_voided, settled_by_id,
    total_pot, paid_out, retained, created_at
"""

_GET_SQL = text(f"SELECT {_COLUMNS} FROM settlements WHERE bet_id = :bet_id")

_INSERT_SQL = text("""
    INSERT INTO settlements
        (bet_id, kind, outcome, fee_bps, auto_voided, settled_by_id,
         total_pot, paid_out, retained)
    VALUES
        (:bet_id, :kind, :outcome, :fee_bps, :auto_voided, :settled_by_id,
         :total_pot, :paid_out, :retained)
    ON CONFLICT (bet_id) DO NOTHING
    RETURNING bet_id
""")

_LIST_SQL = text(f"SELECT {_COLUMNS} FROM settlements ORDER BY created_at")


def _row_to_settlement(row: Any) -> Settlement:
    return Settlement(
        bet_id=str(row.bet_id),
        kind=row.kind,
        outcome=row.outcome,
        fee_bps=row.fee_bps,
        auto_voided=row.auto_voided,
        settled_by_id=str(row.settled_by_id),
        total_pot=int(row.total_pot),
        paid_out=int(row.paid_out),
        retained=int(row.retained),
        created_at=row.created_at,
    )


class SettlementRepository:
    async def get(self, db: AsyncSession, bet_id: str) -> Settlement | None:
        uid = parse_uuid(bet_id)
        if uid is None:
            return None
        row = (await db.execute(_GET_SQL, {"bet_id": uid})).fetchone()
        return _row_to_settlement(row) if row is not None else None

    async def insert(self, db: AsyncSession, settlement: Settlement) -> bool:
        row = (
            await db.execute(
                _INSERT_SQL,
                {
                    "bet_id": parse_uuid(settlement.bet_id),
                    "kind": enum_value(settlement.kind),
                    "outcome": settlement.outcome,
                    "fee_bps": settlement.fee_bps,
                    "auto_voided": settlement.auto_voided,
                    "settled_by_id": parse_uuid(settlement.settled_by_id),
                    "total_pot": settlement.total_pot,
                    "paid_out": settlement.paid_out,
                    "retained": settlement.retained,
                },
            )
        ).fetchone()
        return row is not None

    async def list_all(self, db: AsyncSession) -> list[Settlement]:
        rows = (await db.execute(_LIST_SQL)).fetchall()
        return [_row_to_settlement(r) for r in rows]
