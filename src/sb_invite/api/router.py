"""Invite-code REST API for private bets."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.database import get_db_session
from src.sb_common.response import ApiResponse, success_response
from src.sb_gateway.auth.dependencies import get_current_user
from src.sb_gateway.user.models import Identity
from src.sb_invite.application.schemas import ValidateInviteRequest
from src.sb_invite.application.service import InviteService

router = APIRouter(prefix="/bets", tags=["invites"])

_service = InviteService()


@router.get("/{bet_id}/invite-code")
async def get_invite_code(
    bet_id: str,
    caller: Annotated[Identity, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_code(db, bet_id, caller)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{bet_id}/invite-code/rotate")
async def rotate_invite_code(
    bet_id: str,
    caller: Annotated[Identity, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.rotate(db, bet_id, caller)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{bet_id}/invite-code/validate")
async def validate_invite_code(
    bet_id: str,
    body: ValidateInviteRequest,
    caller: Annotated[Identity, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.validate(db, bet_id, body.code)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
