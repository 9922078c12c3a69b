"""Unit tests for AdminService with mocked repositories."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.sb_admin.application.service import AdminService
from src.sb_common.errors import (
    AdminRequiredError,
    BetNotFoundError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidUserStatusError,
    UserNotFoundError,
)
from src.sb_gateway.user.models import Identity, User
from src.sb_ledger.domain.models import LedgerEntry

ADMIN_ID = "aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa"
USER_ID = "bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb"
ADMIN = Identity(user_id=ADMIN_ID, status="ACTIVE", is_admin=True)


def _user(status: str = "ACTIVE") -> User:
    return User(id=USER_ID, username="bob", status=status, is_admin=False)


def _make_service(user: User | None = None, balance: int = 0):
    users = AsyncMock()
    users.get.return_value = user
    users.get_for_update.return_value = user
    ledger = AsyncMock()
    ledger.get_balance.return_value = balance
    ledger.append.return_value = LedgerEntry(id=900, user_id=USER_ID, amount=1, entry_type="X")
    bets = AsyncMock()
    audit = AsyncMock()
    cache = AsyncMock()
    service = AdminService(
        user_repo=users, ledger_repo=ledger, bet_repo=bets, audit_repo=audit, cache=cache
    )
    return service, users, ledger, bets, audit, cache


@patch("src.sb_admin.application.service.publish_event", new_callable=AsyncMock)
class TestGrantFunds:
    async def test_credit(self, mock_publish: AsyncMock) -> None:
        service, _, ledger, _, audit, cache = _make_service(_user(), balance=10)
        db = AsyncMock()

        resp = await service.grant_funds(db, USER_ID, 50, "promo", ADMIN)

        assert resp.balance == 60
        assert resp.ledger_entry_id == 900
        args = ledger.append.call_args.args
        assert args[1:4] == (USER_ID, 50, "ADMIN_ADJUSTMENT")
        assert audit.record.call_args.args[2] == "GRANT_FUNDS"
        db.commit.assert_awaited_once()
        cache.invalidate.assert_awaited_once_with(USER_ID)
        mock_publish.assert_awaited_once()

    async def test_debit_within_balance(self, mock_publish: AsyncMock) -> None:
        service, *_ = _make_service(_user(), balance=30)
        resp = await service.grant_funds(AsyncMock(), USER_ID, -30, "correction", ADMIN)
        assert resp.balance == 0

    async def test_debit_cannot_overdraw(self, mock_publish: AsyncMock) -> None:
        service, _, ledger, _, _, _ = _make_service(_user(), balance=20)
        with pytest.raises(InsufficientBalanceError):
            await service.grant_funds(AsyncMock(), USER_ID, -21, None, ADMIN)
        ledger.append.assert_not_awaited()
        mock_publish.assert_not_awaited()

    async def test_zero_amount(self, mock_publish: AsyncMock) -> None:
        service, users, *_ = _make_service(_user())
        with pytest.raises(InvalidAmountError):
            await service.grant_funds(AsyncMock(), USER_ID, 0, None, ADMIN)
        users.get_for_update.assert_not_awaited()

    async def test_unknown_user(self, mock_publish: AsyncMock) -> None:
        service, *_ = _make_service(None)
        with pytest.raises(UserNotFoundError):
            await service.grant_funds(AsyncMock(), USER_ID, 5, None, ADMIN)

    async def test_requires_admin(self, mock_publish: AsyncMock) -> None:
        service, *_ = _make_service(_user())
        with pytest.raises(AdminRequiredError):
            await service.grant_funds(
                AsyncMock(), USER_ID, 5, None, Identity(user_id=USER_ID, status="ACTIVE")
            )


class TestApproveUser:
    async def test_grants_starter_bonus(self) -> None:
        service, users, ledger, _, audit, cache = _make_service(_user("PENDING"))

        resp = await service.approve_user(AsyncMock(), USER_ID, ADMIN)

        assert resp.changed
        assert resp.status == "ACTIVE"
        assert resp.starter_bonus == 100
        users.approve.assert_awaited_once()
        assert ledger.append.call_args.args[1:4] == (USER_ID, 100, "STARTER")
        assert audit.record.call_args.args[2] == "APPROVE_USER"
        cache.invalidate.assert_awaited_once_with(USER_ID)

    async def test_already_active(self) -> None:
        service, _, ledger, *_ = _make_service(_user("ACTIVE"))
        with pytest.raises(InvalidUserStatusError):
            await service.approve_user(AsyncMock(), USER_ID, ADMIN)
        ledger.append.assert_not_awaited()


class TestSetUserStatus:
    async def test_ban(self) -> None:
        service, users, _, _, audit, _ = _make_service(_user("ACTIVE"))
        resp = await service.set_user_status(AsyncMock(), USER_ID, "BANNED", "spam", ADMIN)
        assert resp.changed
        assert resp.previous_status == "ACTIVE"
        users.set_status.assert_awaited_once()
        assert audit.record.call_args.kwargs["detail"] == {"from": "ACTIVE", "to": "BANNED", "reason": "spam"}

    async def test_unban(self) -> None:
        service, *_ = _make_service(_user("BANNED"))
        resp = await service.set_user_status(AsyncMock(), USER_ID, "ACTIVE", None, ADMIN)
        assert resp.status == "ACTIVE"

    async def test_pending_to_active_approves(self) -> None:
        service, users, ledger, *_ = _make_service(_user("PENDING"))
        resp = await service.set_user_status(AsyncMock(), USER_ID, "ACTIVE", None, ADMIN)
        assert resp.starter_bonus == 100
        users.approve.assert_awaited_once()
        users.set_status.assert_not_awaited()

    async def test_same_status_is_noop(self) -> None:
        service, users, _, _, audit, _ = _make_service(_user("BANNED"))
        resp = await service.set_user_status(AsyncMock(), USER_ID, "BANNED", None, ADMIN)
        assert not resp.changed
        users.set_status.assert_not_awaited()
        audit.record.assert_not_awaited()

    async def test_back_to_pending_not_allowed(self) -> None:
        service, *_ = _make_service(_user("ACTIVE"))
        with pytest.raises(InvalidUserStatusError):
            await service.set_user_status(AsyncMock(), USER_ID, "PENDING", None, ADMIN)

    async def test_self_change_rejected(self) -> None:
        service, users, *_ = _make_service(_user())
        with pytest.raises(InvalidUserStatusError):
            await service.set_user_status(AsyncMock(), ADMIN_ID, "BANNED", None, ADMIN)
        users.get.assert_not_awaited()

    async def test_unknown_user(self) -> None:
        service, *_ = _make_service(None)
        with pytest.raises(UserNotFoundError):
            await service.set_user_status(AsyncMock(), USER_ID, "BANNED", None, ADMIN)


class TestModeration:
    async def test_hide_bet(self) -> None:
        service, _, _, bets, audit, _ = _make_service()
        resp = await service.set_bet_hidden(AsyncMock(), "bet-1", True, ADMIN)
        assert resp.hidden
        bets.set_hidden.assert_awaited_once()
        assert audit.record.call_args.args[2] == "HIDE_BET"

    async def test_unhide_bet(self) -> None:
        service, _, _, _, audit, _ = _make_service()
        await service.set_bet_hidden(AsyncMock(), "bet-1", False, ADMIN)
        assert audit.record.call_args.args[2] == "UNHIDE_BET"

    async def test_missing_bet_rolls_back(self) -> None:
        service, _, _, bets, audit, _ = _make_service()
        bets.set_hidden.side_effect = BetNotFoundError("bet-1")
        db = AsyncMock()
        with pytest.raises(BetNotFoundError):
            await service.set_bet_hidden(db, "bet-1", True, ADMIN)
        audit.record.assert_not_awaited()
        db.rollback.assert_awaited_once()


class TestVerifyInvariants:
    async def test_report(self) -> None:
        service, *_ = _make_service()
        db = AsyncMock()
        empty = MagicMock()
        empty.fetchall.return_value = []
        db.execute.return_value = empty
        report = await service.verify_invariants(db)
        assert report.ok
        assert report.violations == []
