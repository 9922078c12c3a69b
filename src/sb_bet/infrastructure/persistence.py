"""BetRepository: concrete implementation of BetRepositoryProtocol.

All queries use raw text() SQL (no ORM).
Row locks:
  get_for_share   FOR SHARE   stakes by different users run in parallel,
                              settlement's FOR UPDATE waits for all of them
  get_for_update  FOR UPDATE  settlement, invite rotation

Malformed ids never reach PostgreSQL: they cannot name a row.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_bet.domain.models import Bet, BetStats
from src.sb_common.errors import BetNotFoundError, InternalError
from src.sb_common.ids import parse_uuid

_BET_COLUMNS = """
    id, creator_id, title, description, category, end_at, max_participants,
    visibility, audience, group_id, invite_code_enabled, invite_salt,
    hide_participants, status, resolution, resolved_by_id, resolved_at,
    hidden, created_at, updated_at
"""

_GET_BET_SQL = text(f"SELECT {_BET_COLUMNS} FROM bets WHERE id = :bet_id")
_GET_BET_FOR_SHARE_SQL = text(f"SELECT {_BET_COLUMNS} FROM bets WHERE id = :bet_id FOR SHARE")
_GET_BET_FOR_UPDATE_SQL = text(f"SELECT {_BET_COLUMNS} FROM bets WHERE id = :bet_id FOR UPDATE")

_INSERT_BET_SQL = text(f"""
    INSERT INTO bets
        (creator_id, title, description, category, end_at, max_participants,
         visibility, audience, group_id, invite_code_enabled, hide_participants)
    VALUES
        (:creator_id, :title, :description, :category, :end_at, :max_participants,
         :visibility, :audience, CAST(:group_id AS UUID), :invite_code_enabled,
         :hide_participants)
    RETURNING {_BET_COLUMNS}
""")

_STATS_SQL = text("""
    SELECT
        CAST(COALESCE(SUM(stake), 0) AS BIGINT)                                AS total_pot,
        CAST(COALESCE(SUM(stake) FILTER (WHERE side = 'FOR'), 0) AS BIGINT)     AS for_stake,
        CAST(COALESCE(SUM(stake) FILTER (WHERE side = 'AGAINST'), 0) AS BIGINT) AS against_stake,
        COUNT(*)                                                               AS participant_count,
        COUNT(*) FILTER (WHERE side = 'FOR')                                   AS for_count,
        COUNT(*) FILTER (WHERE side = 'AGAINST')                               AS against_count
    FROM bet_entries
    WHERE bet_id = :bet_id
""")

_SET_HIDDEN_SQL = text("""
    UPDATE bets SET hidden = :hidden, updated_at = NOW()
    WHERE id = :bet_id
    RETURNING id
""")

# Guarded on status = 'OPEN': a second writer that slipped past the
# settlement marker still cannot flip a terminal bet.
_MARK_RESOLVED_SQL = text("""
    UPDATE bets
    SET status = 'RESOLVED', resolution = :outcome,
        resolved_by_id = :admin_id, resolved_at = :at, updated_at = NOW()
    WHERE id = :bet_id AND status = 'OPEN'
    RETURNING id
""")

_MARK_VOIDED_SQL = text("""
    UPDATE bets
    SET status = 'VOID', resolution = NULL,
        resolved_by_id = :admin_id, resolved_at = :at, updated_at = NOW()
    WHERE id = :bet_id AND status = 'OPEN'
    RETURNING id
""")

_BUMP_SALT_SQL = text("""
    UPDATE bets SET invite_salt = invite_salt + 1, updated_at = NOW()
    WHERE id = :bet_id
    RETURNING invite_salt
""")


def _opt_str(value: object) -> str | None:
    return str(value) if value is not None else None


def _row_to_bet(row: Any) -> Bet:
    return Bet(
        id=str(row.id),
        creator_id=str(row.creator_id),
        title=row.title,
        description=row.description,
        category=row.category,
        end_at=row.end_at,
        max_participants=row.max_participants,
        visibility=row.visibility,
        audience=row.audience,
        group_id=_opt_str(row.group_id),
        invite_code_enabled=row.invite_code_enabled,
        invite_salt=row.invite_salt,
        hide_participants=row.hide_participants,
        status=row.status,
        resolution=row.resolution,
        resolved_by_id=_opt_str(row.resolved_by_id),
        resolved_at=row.resolved_at,
        hidden=row.hidden,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class BetRepository:
    async def _fetch(self, db: AsyncSession, sql: Any, bet_id: str) -> Bet | None:
        uid = parse_uuid(bet_id)
        if uid is None:
            return None
        row = (await db.execute(sql, {"bet_id": uid})).fetchone()
        return _row_to_bet(row) if row is not None else None

    async def get(self, db: AsyncSession, bet_id: str) -> Bet | None:
        return await self._fetch(db, _GET_BET_SQL, bet_id)

    async def get_for_share(self, db: AsyncSession, bet_id: str) -> Bet | None:
        return await self._fetch(db, _GET_BET_FOR_SHARE_SQL, bet_id)

    async def get_for_update(self, db: AsyncSession, bet_id: str) -> Bet | None:
        return await self._fetch(db, _GET_BET_FOR_UPDATE_SQL, bet_id)

    async def create(
        self,
        db: AsyncSession,
        creator_id: str,
        title: str,
        description: str | None,
        category: str | None,
        end_at: datetime,
        max_participants: int | None,
        visibility: str,
        audience: str,
        group_id: str | None,
        invite_code_enabled: bool,
        hide_participants: bool,
    ) -> Bet:
        row = (
            await db.execute(
                _INSERT_BET_SQL,
                {
                    "creator_id": parse_uuid(creator_id),
                    "title": title,
                    "description": description,
                    "category": category,
                    "end_at": end_at,
                    "max_participants": max_participants,
                    "visibility": visibility,
                    "audience": audience,
                    "group_id": group_id,
                    "invite_code_enabled": invite_code_enabled,
                    "hide_participants": hide_participants,
                },
            )
        ).fetchone()
        if row is None:
            raise InternalError("bet insert returned no row")
        return _row_to_bet(row)

    async def get_stats(self, db: AsyncSession, bet_id: str) -> BetStats:
        uid = parse_uuid(bet_id)
        if uid is None:
            return BetStats()
        row = (await db.execute(_STATS_SQL, {"bet_id": uid})).fetchone()
        if row is None:
            return BetStats()
        return BetStats(
            total_pot=int(row.total_pot),
            for_stake=int(row.for_stake),
            against_stake=int(row.against_stake),
            participant_count=int(row.participant_count),
            for_count=int(row.for_count),
            against_count=int(row.against_count),
        )

    async def set_hidden(self, db: AsyncSession, bet_id: str, hidden: bool) -> None:
        uid = parse_uuid(bet_id)
        row = None
        if uid is not None:
            row = (await db.execute(_SET_HIDDEN_SQL, {"bet_id": uid, "hidden": hidden})).fetchone()
        if row is None:
            raise BetNotFoundError(bet_id)

    async def mark_resolved(
        self, db: AsyncSession, bet_id: str, outcome: bool, admin_id: str, at: datetime
    ) -> None:
        row = (
            await db.execute(
                _MARK_RESOLVED_SQL,
                {
                    "bet_id": parse_uuid(bet_id),
                    "outcome": outcome,
                    "admin_id": parse_uuid(admin_id),
                    "at": at,
                },
            )
        ).fetchone()
        if row is None:
            raise InternalError(f"bet {bet_id} was not OPEN when marking RESOLVED")

    async def mark_voided(
        self, db: AsyncSession, bet_id: str, admin_id: str, at: datetime
    ) -> None:
        row = (
            await db.execute(
                _MARK_VOIDED_SQL,
                {"bet_id": parse_uuid(bet_id), "admin_id": parse_uuid(admin_id), "at": at},
            )
        ).fetchone()
        if row is None:
            raise InternalError(f"bet {bet_id} was not OPEN when marking VOID")

    async def bump_invite_salt(self, db: AsyncSession, bet_id: str) -> int:
        uid = parse_uuid(bet_id)
        row = None
        if uid is not None:
            row = (await db.execute(_BUMP_SALT_SQL, {"bet_id": uid})).fetchone()
        if row is None:
            raise BetNotFoundError(bet_id)
        return int(row.invite_salt)
