"""LedgerApplicationService: wallet reads.

Both operations are read-only and run without an explicit transaction.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_ledger.application.schemas import (
    BalanceResponse,
    LedgerEntryItem,
    LedgerResponse,
    cursor_decode,
    cursor_encode,
)
from src.sb_ledger.domain.repository import LedgerRepositoryProtocol
from src.sb_ledger.infrastructure.cache import BalanceCache
from src.sb_ledger.infrastructure.persistence import LedgerRepository


class LedgerApplicationService:
    def __init__(
        self,
        repo: LedgerRepositoryProtocol | None = None,
        cache: BalanceCache | None = None,
    ) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()
        self._cache = cache or BalanceCache()

    async def get_balance(self, db: AsyncSession, user_id: str) -> BalanceResponse:
        balance = await self._cache.get(user_id)
        if balance is None:
            # Taken before the DB read so a concurrent invalidation wins.
            generation = await self._cache.generation(user_id)
            balance = await self._repo.get_balance(db, user_id)
            if generation is not None:
                await self._cache.set(user_id, balance, generation)
        return BalanceResponse.from_neos(user_id, balance)

    async def list_ledger(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
        entry_type: str | None,
    ) -> LedgerResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_entries(db, user_id, cursor_id, limit + 1, entry_type)
        has_more = len(entries) > limit
        page = entries[:limit]

        items = [LedgerEntryItem.from_domain(e) for e in page]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(items=items, next_cursor=next_cursor, has_more=has_more)
