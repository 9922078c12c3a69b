"""Stake REST API."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.database import get_db_session
from src.sb_common.response import ApiResponse, success_response
from src.sb_gateway.auth.dependencies import get_current_user
from src.sb_gateway.user.models import Identity
from src.sb_stake.application.schemas import StakeRequest
from src.sb_stake.application.service import StakeService

router = APIRouter(prefix="/bets", tags=["stakes"])

_service = StakeService()


@router.post("/{bet_id}/stake")
async def place_stake(
    bet_id: str,
    body: StakeRequest,
    # Status is checked inside the service, after the bet checks.
    caller: Annotated[Identity, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.place_stake(db, bet_id, caller, body.side, body.amount)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
