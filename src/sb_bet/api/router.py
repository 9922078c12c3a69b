"""Bet registry REST API: create, detail, stats."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_bet.application.schemas import CreateBetRequest
from src.sb_bet.application.service import BetApplicationService
from src.sb_common.database import get_db_session
from src.sb_common.response import ApiResponse, success_response
from src.sb_gateway.auth.dependencies import get_current_user
from src.sb_gateway.user.models import Identity

router = APIRouter(prefix="/bets", tags=["bets"])

_service = BetApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_bet(
    body: CreateBetRequest,
    caller: Annotated[Identity, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_bet(db, caller, body)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{bet_id}")
async def get_bet(
    bet_id: str,
    caller: Annotated[Identity, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_bet(db, bet_id, caller)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{bet_id}/stats")
async def get_bet_stats(
    bet_id: str,
    caller: Annotated[Identity, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_bet_stats(db, bet_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
