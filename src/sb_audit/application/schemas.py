"""Pydantic schemas for the audit log listing."""

from pydantic import BaseModel

from src.sb_audit.domain.models import AdminAction


class AdminActionItem(BaseModel):
    id: int
    admin_id: str
    action: str
    target_type: str
    target_id: str
    detail: dict[str, object]
    created_at: str

    @classmethod
    def from_domain(cls, a: AdminAction) -> "AdminActionItem":
        return cls(
            id=a.id,
            admin_id=a.admin_id,
            action=a.action,
            target_type=a.target_type,
            target_id=a.target_id,
            detail=a.detail,
            created_at=a.created_at.isoformat() if a.created_at else "",
        )


class AdminActionListResponse(BaseModel):
    items: list[AdminActionItem]
    next_cursor: str | None
    has_more: bool
