"""Wallet REST API: balance and ledger history for the calling user."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.database import get_db_session
from src.sb_common.enums import LedgerEntryType
from src.sb_common.response import ApiResponse, success_response
from src.sb_gateway.auth.dependencies import get_current_user
from src.sb_gateway.user.models import Identity
from src.sb_ledger.application.service import LedgerApplicationService

router = APIRouter(prefix="/wallet", tags=["wallet"])

_service = LedgerApplicationService()


@router.get("/balance")
async def get_balance(
    caller: Annotated[Identity, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(db, caller.user_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/ledger")
async def list_ledger(
    caller: Annotated[Identity, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    entry_type: LedgerEntryType | None = Query(None, description="Filter by LedgerEntryType"),
) -> ApiResponse:
    data = await _service.list_ledger(
        db, caller.user_id, cursor, limit, entry_type.value if entry_type else None
    )
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
