"""Repository Protocol: dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_ledger.domain.models import LedgerEntry


class LedgerRepositoryProtocol(Protocol):
    async def append(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        entry_type: str,
        bet_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> LedgerEntry: ...

    async def get_balance(self, db: AsyncSession, user_id: str) -> int: ...

    async def list_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]: ...
