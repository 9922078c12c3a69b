"""Unit tests for InviteService."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from src.sb_bet.domain.models import Bet
from src.sb_common.errors import BetNotFoundError, InviteCodeDisabledError, NotBetCreatorError
from src.sb_gateway.user.models import Identity
from src.sb_invite.application.service import InviteService, code_for

BET_ID = "55555555-5555-5555-5555-555555555555"
CREATOR = Identity(user_id="creator", status="ACTIVE")
STRANGER = Identity(user_id="stranger", status="ACTIVE")
ADMIN = Identity(user_id="admin", status="ACTIVE", is_admin=True)


def _bet(enabled: bool = True, salt: int = 0) -> Bet:
    return Bet(
        id=BET_ID, creator_id="creator", title="Secret bet", description=None, category=None,
        end_at=datetime.now(timezone.utc) + timedelta(days=1), max_participants=None,
        visibility="PRIVATE", audience="INVITE_ONLY", group_id=None,
        invite_code_enabled=enabled, invite_salt=salt, hide_participants=False, status="OPEN",
        resolution=None, resolved_by_id=None, resolved_at=None, hidden=False,
    )


class TestGetCode:
    async def test_creator_gets_code(self) -> None:
        repo = AsyncMock()
        repo.get.return_value = _bet()
        resp = await InviteService(repo).get_code(AsyncMock(), BET_ID, CREATOR)
        assert resp.invite_code == code_for(_bet())

    async def test_admin_gets_code(self) -> None:
        repo = AsyncMock()
        repo.get.return_value = _bet()
        resp = await InviteService(repo).get_code(AsyncMock(), BET_ID, ADMIN)
        assert resp.bet_id == BET_ID

    async def test_stranger_rejected(self) -> None:
        repo = AsyncMock()
        repo.get.return_value = _bet()
        with pytest.raises(NotBetCreatorError):
            await InviteService(repo).get_code(AsyncMock(), BET_ID, STRANGER)

    async def test_disabled(self) -> None:
        repo = AsyncMock()
        repo.get.return_value = _bet(enabled=False)
        with pytest.raises(InviteCodeDisabledError):
            await InviteService(repo).get_code(AsyncMock(), BET_ID, CREATOR)

    async def test_missing_bet(self) -> None:
        repo = AsyncMock()
        repo.get.return_value = None
        with pytest.raises(BetNotFoundError):
            await InviteService(repo).get_code(AsyncMock(), BET_ID, CREATOR)


class TestRotate:
    async def test_rotation_invalidates_old_code(self) -> None:
        repo = AsyncMock()
        repo.get_for_update.return_value = _bet(salt=0)
        repo.bump_invite_salt.return_value = 1
        db = AsyncMock()

        resp = await InviteService(repo).rotate(db, BET_ID, CREATOR)

        assert resp.invite_code == code_for(_bet(salt=1))
        assert resp.invite_code != code_for(_bet(salt=0))
        db.commit.assert_awaited_once()

    async def test_stranger_cannot_rotate(self) -> None:
        repo = AsyncMock()
        repo.get_for_update.return_value = _bet()
        with pytest.raises(NotBetCreatorError):
            await InviteService(repo).rotate(AsyncMock(), BET_ID, STRANGER)
        repo.bump_invite_salt.assert_not_awaited()


class TestValidate:
    async def test_valid(self) -> None:
        repo = AsyncMock()
        repo.get.return_value = _bet(salt=2)
        code = code_for(_bet(salt=2))
        resp = await InviteService(repo).validate(AsyncMock(), BET_ID, code.lower())
        assert resp.valid

    async def test_stale_code(self) -> None:
        repo = AsyncMock()
        repo.get.return_value = _bet(salt=2)
        resp = await InviteService(repo).validate(AsyncMock(), BET_ID, code_for(_bet(salt=1)))
        assert not resp.valid

    async def test_disabled_is_invalid(self) -> None:
        repo = AsyncMock()
        repo.get.return_value = _bet(enabled=False)
        resp = await InviteService(repo).validate(AsyncMock(), BET_ID, code_for(_bet()))
        assert not resp.valid
