"""Repository Protocol for the stake book. Unit tests inject a conforming mock."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_stake.domain.models import BetEntry


class StakeRepositoryProtocol(Protocol):
    async def get_entry(
        self, db: AsyncSession, bet_id: str, user_id: str
    ) -> BetEntry | None: ...

    async def lock_participants(self, db: AsyncSession, bet_id: str) -> None: ...

    async def count_participants(self, db: AsyncSession, bet_id: str) -> int: ...

    async def upsert_entry(
        self, db: AsyncSession, bet_id: str, user_id: str, side: str, amount: int
    ) -> BetEntry | None: ...

    async def list_entries(self, db: AsyncSession, bet_id: str) -> list[BetEntry]: ...
