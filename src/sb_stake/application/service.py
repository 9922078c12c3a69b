"""StakeService: place a stake on a bet.

One transaction per call (run_atomic). Lock order, identical for every
writer, so stakes cannot deadlock with each other or with settlement:

    bet row   FOR SHARE    concurrent stakes by different users proceed;
                           settlement's FOR UPDATE waits until they commit
    user row  FOR UPDATE   serializes debits of one user, so the balance
                           read below already reflects every earlier stake
    advisory  per bet      only for capped bets, around the participant count

The balance that gates the debit is read from PostgreSQL inside this
transaction, never from the display cache.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_bet.domain.repository import BetRepositoryProtocol
from src.sb_bet.infrastructure.persistence import BetRepository
from src.sb_common.datetime_utils import utc_now
from src.sb_common.enums import LedgerEntryType, Side, enum_value
from src.sb_common.errors import SideConflictError
from src.sb_common.transactions import run_atomic
from src.sb_gateway.user.models import Identity
from src.sb_gateway.user.repository import UserRepository, UserRepositoryProtocol
from src.sb_ledger.domain.repository import LedgerRepositoryProtocol
from src.sb_ledger.infrastructure.cache import BalanceCache
from src.sb_ledger.infrastructure.persistence import LedgerRepository
from src.sb_stake.application.schemas import StakeResponse
from src.sb_stake.domain.repository import StakeRepositoryProtocol
from src.sb_stake.domain.rules import (
    check_amount,
    check_balance,
    check_bet_accepts_stakes,
    check_participant_capacity,
    check_side,
    check_user_active,
)
from src.sb_stake.infrastructure.persistence import StakeRepository

logger = logging.getLogger(__name__)


def _opposite(side: str) -> str:
    return Side.AGAINST.value if side == Side.FOR.value else Side.FOR.value


class StakeService:
    def __init__(
        self,
        bet_repo: BetRepositoryProtocol | None = None,
        stake_repo: StakeRepositoryProtocol | None = None,
        ledger_repo: LedgerRepositoryProtocol | None = None,
        user_repo: UserRepositoryProtocol | None = None,
        cache: BalanceCache | None = None,
    ) -> None:
        self._bets: BetRepositoryProtocol = bet_repo or BetRepository()
        self._stakes: StakeRepositoryProtocol = stake_repo or StakeRepository()
        self._ledger: LedgerRepositoryProtocol = ledger_repo or LedgerRepository()
        self._users: UserRepositoryProtocol = user_repo or UserRepository()
        self._cache = cache or BalanceCache()

    async def place_stake(
        self,
        db: AsyncSession,
        bet_id: str,
        caller: Identity,
        side: Side | str,
        amount: int,
    ) -> StakeResponse:
        side_value = enum_value(side)

        async def work() -> StakeResponse:
            now = utc_now()
            bet = check_bet_accepts_stakes(
                await self._bets.get_for_share(db, bet_id), bet_id, now
            )
            check_user_active(await self._users.get_for_update(db, caller.user_id))
            stake = check_amount(amount)
            balance = await self._ledger.get_balance(db, caller.user_id)
            check_balance(stake, balance)

            existing = await self._stakes.get_entry(db, bet.id, caller.user_id)
            check_side(existing, side_value)
            if bet.max_participants is not None and existing is None:
                await self._stakes.lock_participants(db, bet.id)
                current = await self._stakes.count_participants(db, bet.id)
                check_participant_capacity(bet.max_participants, current)

            entry = await self._stakes.upsert_entry(
                db, bet.id, caller.user_id, side_value, stake
            )
            if entry is None:
                raise SideConflictError(_opposite(side_value), side_value)

            ledger_entry = await self._ledger.append(
                db,
                caller.user_id,
                -stake,
                LedgerEntryType.BET_STAKE,
                bet_id=bet.id,
                metadata={"side": side_value},
            )
            return StakeResponse.from_result(
                bet_id=bet.id,
                side=side_value,
                amount=stake,
                position=entry.stake,
                balance=balance - stake,
                ledger_entry_id=ledger_entry.id,
            )

        result = await run_atomic(db, work)
        await self._cache.invalidate(caller.user_id)
        logger.info(
            "Stake placed: bet=%s user=%s side=%s amount=%d position=%d",
            result.bet_id, caller.user_id, result.side, result.amount, result.position,
        )
        return result
