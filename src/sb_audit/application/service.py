"""AuditService: paginated, newest-first view of admin_actions."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_audit.application.schemas import AdminActionItem, AdminActionListResponse
from src.sb_audit.domain.repository import AuditRepositoryProtocol
from src.sb_audit.infrastructure.persistence import AuditRepository
from src.sb_ledger.application.schemas import cursor_decode, cursor_encode


class AuditService:
    def __init__(self, repo: AuditRepositoryProtocol | None = None) -> None:
        self._repo: AuditRepositoryProtocol = repo or AuditRepository()

    async def list_actions(
        self,
        db: AsyncSession,
        cursor: str | None,
        limit: int,
        action: str | None,
    ) -> AdminActionListResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        rows = await self._repo.list_actions(db, cursor_id, limit + 1, action)
        has_more = len(rows) > limit
        page = rows[:limit]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return AdminActionListResponse(
            items=[AdminActionItem.from_domain(a) for a in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )
