"""Repository Protocol for settlement markers."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_settlement.domain.models import Settlement


class SettlementRepositoryProtocol(Protocol):
    async def get(self, db: AsyncSession, bet_id: str) -> Settlement | None: ...

    async def insert(self, db: AsyncSession, settlement: Settlement) -> bool: ...

    async def list_all(self, db: AsyncSession) -> list[Settlement]: ...
