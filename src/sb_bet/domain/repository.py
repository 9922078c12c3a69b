"""Repository Protocol for bets. Unit tests inject a mock that conforms to this."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_bet.domain.models import Bet, BetStats


class BetRepositoryProtocol(Protocol):
    async def get(self, db: AsyncSession, bet_id: str) -> Bet | None: ...

    async def get_for_share(self, db: AsyncSession, bet_id: str) -> Bet | None: ...

    async def get_for_update(self, db: AsyncSession, bet_id: str) -> Bet | None: ...

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
    ) -> Bet: ...

    async def get_stats(self, db: AsyncSession, bet_id: str) -> BetStats: ...

    async def set_hidden(self, db: AsyncSession, bet_id: str, hidden: bool) -> None: ...

    async def mark_resolved(
        self, db: AsyncSession, bet_id: str, outcome: bool, admin_id: str, at: datetime
    ) -> None: ...

    async def mark_voided(
        self, db: AsyncSession, bet_id: str, admin_id: str, at: datetime
    ) -> None: ...

    async def bump_invite_salt(self, db: AsyncSession, bet_id: str) -> int: ...
