"""InviteService: get, rotate and validate invite codes.

Only the bet's creator or an admin may read or rotate the code. Rotation
increments invite_salt under the bet's row lock, so two concurrent rotations
produce two distinct, ordered salts.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sb_bet.domain.models import Bet
from src.sb_bet.domain.repository import BetRepositoryProtocol
from src.sb_bet.infrastructure.persistence import BetRepository
from src.sb_common.errors import BetNotFoundError, InviteCodeDisabledError, NotBetCreatorError
from src.sb_common.transactions import run_atomic
from src.sb_gateway.user.models import Identity
from src.sb_invite.application.schemas import InviteCodeResponse, ValidateInviteResponse
from src.sb_invite.domain.codes import codes_match, derive_code

logger = logging.getLogger(__name__)


def code_for(bet: Bet, salt: int | None = None) -> str:
    return derive_code(
        bet.id,
        bet.invite_salt if salt is None else salt,
        settings.INVITE_SECRET,
        settings.INVITE_CODE_LENGTH,
    )


def _check_manager(bet: Bet, caller: Identity) -> None:
    if not bet.invite_code_enabled:
        raise InviteCodeDisabledError(bet.id)
    if not (caller.is_admin or caller.user_id == bet.creator_id):
        raise NotBetCreatorError()


class InviteService:
    def __init__(self, bet_repo: BetRepositoryProtocol | None = None) -> None:
        self._bets: BetRepositoryProtocol = bet_repo or BetRepository()

    async def get_code(
        self, db: AsyncSession, bet_id: str, caller: Identity
    ) -> InviteCodeResponse:
        bet = await self._bets.get(db, bet_id)
        if bet is None:
            raise BetNotFoundError(bet_id)
        _check_manager(bet, caller)
        return InviteCodeResponse(bet_id=bet.id, invite_code=code_for(bet))

    async def rotate(
        self, db: AsyncSession, bet_id: str, caller: Identity
    ) -> InviteCodeResponse:
        async def work() -> InviteCodeResponse:
            bet = await self._bets.get_for_update(db, bet_id)
            if bet is None:
                raise BetNotFoundError(bet_id)
            _check_manager(bet, caller)
            new_salt = await self._bets.bump_invite_salt(db, bet.id)
            return InviteCodeResponse(bet_id=bet.id, invite_code=code_for(bet, new_salt))

        result = await run_atomic(db, work)
        logger.info("Invite code rotated for bet %s by %s", bet_id, caller.user_id)
        return result

    async def validate(
        self, db: AsyncSession, bet_id: str, supplied: str
    ) -> ValidateInviteResponse:
        bet = await self._bets.get(db, bet_id)
        if bet is None:
            raise BetNotFoundError(bet_id)
        if not bet.invite_code_enabled:
            return ValidateInviteResponse(bet_id=bet.id, valid=False)
        return ValidateInviteResponse(bet_id=bet.id, valid=codes_match(code_for(bet), supplied))
