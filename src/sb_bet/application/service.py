"""BetApplicationService: create bets and read bet state.

Lifecycle transitions (OPEN -> RESOLVED | VOID) belong to sb_settlement;
the moderation flag belongs to sb_admin. LOCKED is derived from end_at on
every read and never stored.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_bet.application.schemas import (
    BetDetail,
    BetStatsResponse,
    CreateBetRequest,
    CreateBetResponse,
)
from src.sb_bet.domain.repository import BetRepositoryProtocol
from src.sb_bet.infrastructure.persistence import BetRepository
from src.sb_common.datetime_utils import ensure_utc, utc_now
from src.sb_common.enums import BetAudience, BetVisibility, enum_value
from src.sb_common.errors import BetNotFoundError, InvalidBetError, UserNotActiveError
from src.sb_common.ids import parse_uuid
from src.sb_common.transactions import run_atomic
from src.sb_gateway.user.models import Identity
from src.sb_invite.application.service import code_for
from src.sb_stake.domain.repository import StakeRepositoryProtocol
from src.sb_stake.infrastructure.persistence import StakeRepository

logger = logging.getLogger(__name__)


def visibility_for(audience: str) -> str:
    return BetVisibility.PUBLIC.value if audience == BetAudience.PUBLIC else BetVisibility.PRIVATE.value


class BetApplicationService:
    def __init__(
        self,
        repo: BetRepositoryProtocol | None = None,
        stake_repo: StakeRepositoryProtocol | None = None,
    ) -> None:
        self._repo: BetRepositoryProtocol = repo or BetRepository()
        self._stakes: StakeRepositoryProtocol = stake_repo or StakeRepository()

    async def create_bet(
        self, db: AsyncSession, caller: Identity, req: CreateBetRequest
    ) -> CreateBetResponse:
        if not caller.is_active:
            raise UserNotActiveError(caller.status)

        title = req.title.strip()
        if not title:
            raise InvalidBetError("title must not be blank")
        end_at = ensure_utc(req.end_at)
        if end_at <= utc_now():
            raise InvalidBetError("end_at must be in the future")

        audience = enum_value(req.audience)
        group_id: str | None = None
        if audience == BetAudience.GROUP:
            if parse_uuid(req.group_id) is None:
                raise InvalidBetError("GROUP audience requires a valid group_id")
            group_id = str(parse_uuid(req.group_id))

        visibility = visibility_for(audience)
        invite_enabled = req.invite_code_enabled or audience == BetAudience.INVITE_ONLY
        if invite_enabled and visibility == BetVisibility.PUBLIC:
            raise InvalidBetError("invite codes are only available for private bets")

        async def work() -> CreateBetResponse:
            bet = await self._repo.create(
                db,
                creator_id=caller.user_id,
                title=title,
                description=req.description,
                category=req.category,
                end_at=end_at,
                max_participants=req.max_participants,
                visibility=visibility,
                audience=audience,
                group_id=group_id,
                invite_code_enabled=invite_enabled,
                hide_participants=req.hide_participants,
            )
            return CreateBetResponse(
                id=bet.id,
                visibility=bet.visibility,
                audience=bet.audience,
                invite_code=code_for(bet) if bet.invite_code_enabled else None,
            )

        result = await run_atomic(db, work)
        logger.info("Bet created: id=%s creator=%s audience=%s", result.id, caller.user_id, audience)
        return result

    async def get_bet(self, db: AsyncSession, bet_id: str, caller: Identity) -> BetDetail:
        bet = await self._repo.get(db, bet_id)
        if bet is None:
            raise BetNotFoundError(bet_id)
        stats = await self._repo.get_stats(db, bet.id)
        entries = await self._stakes.list_entries(db, bet.id)
        my_entry = next((e for e in entries if e.user_id == caller.user_id), None)
        can_see_all = not bet.hide_participants or caller.is_admin or caller.user_id == bet.creator_id
        return BetDetail.from_domain(
            bet, utc_now(), stats, my_entry, entries if can_see_all else None
        )

    async def get_bet_stats(self, db: AsyncSession, bet_id: str) -> BetStatsResponse:
        bet = await self._repo.get(db, bet_id)
        if bet is None:
            raise BetNotFoundError(bet_id)
        stats = await self._repo.get_stats(db, bet.id)
        return BetStatsResponse.from_domain(bet.id, stats)
