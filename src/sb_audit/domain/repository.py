"""Repository Protocol for the admin audit log (append-only)."""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_audit.domain.models import AdminAction


class AuditRepositoryProtocol(Protocol):
    async def record(
        self,
        db: AsyncSession,
        admin_id: str,
        action: str,
        target_type: str,
        target_id: str,
        detail: dict[str, Any] | None = None,
    ) -> AdminAction: ...

    async def list_actions(
        self,
        db: AsyncSession,
        cursor_id: int | None,
        limit: int,
        action: str | None,
    ) -> list[AdminAction]: ...
