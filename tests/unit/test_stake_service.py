"""Unit tests for StakeService with mocked repositories."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from src.sb_bet.domain.models import Bet
from src.sb_common.errors import (
    BetLockedError,
    InsufficientBalanceError,
    InvalidAmountError,
    ParticipantLimitReachedError,
    SideConflictError,
    UserNotActiveError,
)
from src.sb_gateway.user.models import Identity, User
from src.sb_ledger.domain.models import LedgerEntry
from src.sb_stake.application.service import StakeService
from src.sb_stake.domain.models import BetEntry

USER_ID = "11111111-1111-1111-1111-111111111111"
BET_ID = "22222222-2222-2222-2222-222222222222"


def _bet(max_participants: int | None = None, end_in: timedelta = timedelta(days=1)) -> Bet:
    return Bet(
        id=BET_ID, creator_id="creator", title="Will it rain?", description=None,
        category=None, end_at=datetime.now(timezone.utc) + end_in,
        max_participants=max_participants, visibility="PUBLIC", audience="PUBLIC",
        group_id=None, invite_code_enabled=False, invite_salt=0, hide_participants=False,
        status="OPEN", resolution=None, resolved_by_id=None, resolved_at=None, hidden=False,
    )


def _user(status: str = "ACTIVE") -> User:
    return User(id=USER_ID, username="alice", status=status, is_admin=False)


def _entry(side: str, stake: int) -> BetEntry:
    return BetEntry(id=1, bet_id=BET_ID, user_id=USER_ID, side=side, stake=stake)


def _make_service(
    bet: Bet | None = None,
    user: User | None = None,
    balance: int = 100,
    existing: BetEntry | None = None,
    upserted: BetEntry | None = None,
    participants: int = 0,
):
    bets = AsyncMock()
    bets.get_for_share.return_value = bet or _bet()
    stakes = AsyncMock()
    stakes.get_entry.return_value = existing
    stakes.upsert_entry.return_value = upserted
    stakes.count_participants.return_value = participants
    ledger = AsyncMock()
    ledger.get_balance.return_value = balance
    ledger.append.return_value = LedgerEntry(id=501, user_id=USER_ID, amount=-1, entry_type="BET_STAKE")
    users = AsyncMock()
    users.get_for_update.return_value = user or _user()
    cache = AsyncMock()
    service = StakeService(
        bet_repo=bets, stake_repo=stakes, ledger_repo=ledger, user_repo=users, cache=cache
    )
    return service, bets, stakes, ledger, users, cache


CALLER = Identity(user_id=USER_ID, status="ACTIVE")


class TestPlaceStake:
    async def test_first_stake_debits_ledger(self) -> None:
        service, _, stakes, ledger, _, cache = _make_service(upserted=_entry("FOR", 60))
        db = AsyncMock()

        result = await service.place_stake(db, BET_ID, CALLER, "FOR", 60)

        assert result.position == 60
        assert result.balance == 40
        assert result.balance_display == "40 Neos"
        assert result.ledger_entry_id == 501
        stakes.upsert_entry.assert_awaited_once_with(db, BET_ID, USER_ID, "FOR", 60)
        args, kwargs = ledger.append.call_args
        assert args[1:4] == (USER_ID, -60, "BET_STAKE")
        assert kwargs["bet_id"] == BET_ID
        assert kwargs["metadata"] == {"side": "FOR"}
        db.commit.assert_awaited_once()
        cache.invalidate.assert_awaited_once_with(USER_ID)

    async def test_insufficient_balance_writes_nothing(self) -> None:
        service, _, stakes, ledger, _, cache = _make_service(balance=50)
        db = AsyncMock()

        with pytest.raises(InsufficientBalanceError):
            await service.place_stake(db, BET_ID, CALLER, "FOR", 60)

        stakes.upsert_entry.assert_not_awaited()
        ledger.append.assert_not_awaited()
        db.commit.assert_not_awaited()
        db.rollback.assert_awaited_once()
        cache.invalidate.assert_not_awaited()

    async def test_add_to_existing_position(self) -> None:
        service, _, stakes, _, _, _ = _make_service(
            existing=_entry("FOR", 30), upserted=_entry("FOR", 70)
        )
        result = await service.place_stake(AsyncMock(), BET_ID, CALLER, "FOR", 40)
        assert result.position == 70
        stakes.lock_participants.assert_not_awaited()

    async def test_side_switch_rejected(self) -> None:
        service, _, stakes, ledger, _, _ = _make_service(existing=_entry("FOR", 30))
        with pytest.raises(SideConflictError):
            await service.place_stake(AsyncMock(), BET_ID, CALLER, "AGAINST", 10)
        stakes.upsert_entry.assert_not_awaited()
        ledger.append.assert_not_awaited()

    async def test_side_conflict_from_concurrent_insert(self) -> None:
        # Row appeared with the other side between get_entry and the upsert.
        service, _, _, ledger, _, _ = _make_service(upserted=None)
        with pytest.raises(SideConflictError):
            await service.place_stake(AsyncMock(), BET_ID, CALLER, "FOR", 10)
        ledger.append.assert_not_awaited()

    async def test_participant_limit(self) -> None:
        service, _, stakes, _, _, _ = _make_service(bet=_bet(max_participants=2), participants=2)
        with pytest.raises(ParticipantLimitReachedError):
            await service.place_stake(AsyncMock(), BET_ID, CALLER, "FOR", 10)
        stakes.lock_participants.assert_awaited_once()
        stakes.upsert_entry.assert_not_awaited()

    async def test_existing_participant_ignores_cap(self) -> None:
        service, _, stakes, _, _, _ = _make_service(
            bet=_bet(max_participants=2), participants=2,
            existing=_entry("FOR", 5), upserted=_entry("FOR", 15),
        )
        result = await service.place_stake(AsyncMock(), BET_ID, CALLER, "FOR", 10)
        assert result.position == 15
        stakes.count_participants.assert_not_awaited()

    async def test_locked_bet_checked_before_user(self) -> None:
        service, _, _, _, users, _ = _make_service(
            bet=_bet(end_in=timedelta(seconds=-1)), user=_user("BANNED")
        )
        with pytest.raises(BetLockedError):
            await service.place_stake(AsyncMock(), BET_ID, CALLER, "FOR", 10)
        users.get_for_update.assert_not_awaited()

    async def test_inactive_user_checked_before_amount(self) -> None:
        service, _, _, ledger, _, _ = _make_service(user=_user("PENDING"))
        with pytest.raises(UserNotActiveError):
            await service.place_stake(AsyncMock(), BET_ID, CALLER, "FOR", 0)
        ledger.get_balance.assert_not_awaited()

    async def test_zero_amount(self) -> None:
        service, _, _, ledger, _, _ = _make_service()
        with pytest.raises(InvalidAmountError):
            await service.place_stake(AsyncMock(), BET_ID, CALLER, "FOR", 0)
        ledger.get_balance.assert_not_awaited()

    async def test_balance_read_from_db_not_cache(self) -> None:
        service, _, _, ledger, _, cache = _make_service(upserted=_entry("AGAINST", 10))
        await service.place_stake(AsyncMock(), BET_ID, CALLER, "AGAINST", 10)
        ledger.get_balance.assert_awaited_once()
        cache.get.assert_not_awaited()
