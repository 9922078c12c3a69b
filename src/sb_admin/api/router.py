"""Admin REST API: settlement, funds, users, moderation, audit, invariants.

Every endpoint requires an ACTIVE admin (require_admin).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_admin.application.schemas import (
    GrantFundsRequest,
    SetHiddenRequest,
    SetUserStatusRequest,
)
from src.sb_admin.application.service import AdminService
from src.sb_audit.application.service import AuditService
from src.sb_common.database import get_db_session
from src.sb_common.enums import AdminActionType
from src.sb_common.response import ApiResponse, success_response
from src.sb_gateway.auth.dependencies import require_admin
from src.sb_gateway.user.models import Identity
from src.sb_settlement.application.schemas import ResolveRequest
from src.sb_settlement.application.service import SettlementService

router = APIRouter(prefix="/admin", tags=["admin"])

_service = AdminService()
_settlement = SettlementService()
_audit = AuditService()


def _wrap(request: Request, data: object) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/bets/{bet_id}/resolve")
async def resolve_bet(
    bet_id: str,
    body: ResolveRequest,
    admin: Annotated[Identity, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _settlement.resolve(db, bet_id, body.outcome, body.fee_bps, admin)
    return _wrap(request, result.model_dump())


@router.post("/bets/{bet_id}/void")
async def void_bet(
    bet_id: str,
    admin: Annotated[Identity, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _settlement.void(db, bet_id, admin)
    data = result.model_dump()
    # Any earlier settlement makes void a no-op; kind/voided keep the earlier outcome.
    data["already_voided"] = result.already_settled
    return _wrap(request, data)


@router.post("/bets/{bet_id}/hidden")
async def set_bet_hidden(
    bet_id: str,
    body: SetHiddenRequest,
    admin: Annotated[Identity, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.set_bet_hidden(db, bet_id, body.hidden, admin)
    return _wrap(request, result.model_dump())


@router.post("/users/{user_id}/funds")
async def grant_funds(
    user_id: str,
    body: GrantFundsRequest,
    admin: Annotated[Identity, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.grant_funds(db, user_id, body.amount, body.reason, admin)
    return _wrap(request, result.model_dump())


@router.post("/users/{user_id}/approve")
async def approve_user(
    user_id: str,
    admin: Annotated[Identity, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.approve_user(db, user_id, admin)
    return _wrap(request, result.model_dump())


@router.post("/users/{user_id}/status")
async def set_user_status(
    user_id: str,
    body: SetUserStatusRequest,
    admin: Annotated[Identity, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.set_user_status(db, user_id, body.status, body.reason, admin)
    return _wrap(request, result.model_dump())


@router.get("/audit")
async def list_audit(
    admin: Annotated[Identity, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(50, ge=1, le=200),
    action: AdminActionType | None = Query(None, description="Filter by action"),
) -> ApiResponse:
    result = await _audit.list_actions(db, cursor, limit, action.value if action else None)
    return _wrap(request, result.model_dump())


@router.get("/invariants")
async def verify_invariants(
    admin: Annotated[Identity, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.verify_invariants(db)
    return _wrap(request, result.model_dump())
