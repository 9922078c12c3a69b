"""AuditRepository: write-only admin_actions log.

record() runs inside the transaction of the action being audited, so an
audited action and its audit row commit or roll back together.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_audit.domain.models import AdminAction
from src.sb_common.enums import enum_value
from src.sb_common.errors import InternalError
from src.sb_common.ids import parse_uuid

_INSERT_ACTION_SQL = text("""
    INSERT INTO admin_actions (admin_id, action, target_type, target_id, detail)
    VALUES (:admin_id, :action, :target_type, :target_id, CAST(:detail AS JSONB))
    RETURNING id, admin_id, action, target_type, target_id, detail, created_at
""")

_LIST_ACTIONS_SQL = text("""
    SELECT id, admin_id, action, target_type, target_id, detail, created_at
    FROM admin_actions
    WHERE (CAST(:cursor_id AS BIGINT) IS NULL OR id < CAST(:cursor_id AS BIGINT))
      AND (CAST(:action AS TEXT) IS NULL OR action = CAST(:action AS TEXT))
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_action(row: Any) -> AdminAction:
    detail = row.detail
    if isinstance(detail, str):
        detail = json.loads(detail)
    return AdminAction(
        id=row.id,
        admin_id=str(row.admin_id),
        action=row.action,
        target_type=row.target_type,
        target_id=row.target_id,
        detail=dict(detail) if detail else {},
        created_at=row.created_at,
    )


class AuditRepository:
    async def record(
        self,
        db: AsyncSession,
        admin_id: str,
        action: str,
        target_type: str,
        target_id: str,
        detail: dict[str, Any] | None = None,
    ) -> AdminAction:
        row = (
            await db.execute(
                _INSERT_ACTION_SQL,
                {
                    "admin_id": parse_uuid(admin_id),
                    "action": enum_value(action),
                    "target_type": enum_value(target_type),
                    "target_id": str(target_id),
                    "detail": json.dumps(detail, default=str) if detail else None,
                },
            )
        ).fetchone()
        if row is None:
            raise InternalError("admin_actions insert returned no row")
        return _row_to_action(row)

    async def list_actions(
        self,
        db: AsyncSession,
        cursor_id: int | None,
        limit: int,
        action: str | None,
    ) -> list[AdminAction]:
        rows = (
            await db.execute(
                _LIST_ACTIONS_SQL,
                {"cursor_id": cursor_id, "action": action, "limit": limit},
            )
        ).fetchall()
        return [_row_to_action(r) for r in rows]
