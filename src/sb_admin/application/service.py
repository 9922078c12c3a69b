"""Admin application service: funds, user lifecycle, moderation, invariants.

Every mutating operation runs in one transaction together with its
admin_actions audit row. Cache invalidation and events happen after commit.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sb_admin.application.schemas import (
    BetHiddenResponse,
    GrantFundsResponse,
    InvariantReport,
    UserStatusResponse,
)
from src.sb_audit.domain.repository import AuditRepositoryProtocol
from src.sb_audit.infrastructure.persistence import AuditRepository
from src.sb_bet.domain.repository import BetRepositoryProtocol
from src.sb_bet.infrastructure.persistence import BetRepository
from src.sb_common.enums import (
    AdminActionType,
    AuditTargetType,
    LedgerEntryType,
    UserStatus,
    enum_value,
)
from src.sb_common.errors import (
    AdminRequiredError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidUserStatusError,
    UserNotFoundError,
)
from src.sb_common.events import FUNDS_GRANTED, publish_event
from src.sb_common.ids import parse_uuid
from src.sb_common.transactions import run_atomic
from src.sb_gateway.user.models import Identity
from src.sb_gateway.user.repository import UserRepository, UserRepositoryProtocol
from src.sb_ledger.domain.repository import LedgerRepositoryProtocol
from src.sb_ledger.infrastructure.cache import BalanceCache
from src.sb_ledger.infrastructure.persistence import LedgerRepository
from src.sb_settlement.domain.invariants import verify_ledger_invariants

logger = logging.getLogger(__name__)

# (from, to) pairs handled by set_user_status itself; PENDING -> ACTIVE goes
# through approve_user so the starter bonus is granted exactly once.
_STATUS_TRANSITIONS = {
    (UserStatus.ACTIVE.value, UserStatus.BANNED.value),
    (UserStatus.BANNED.value, UserStatus.ACTIVE.value),
    (UserStatus.PENDING.value, UserStatus.BANNED.value),
}


def _require_admin(admin: Identity) -> None:
    if not admin.is_admin:
        raise AdminRequiredError()


class AdminService:
    def __init__(
        self,
        user_repo: UserRepositoryProtocol | None = None,
        ledger_repo: LedgerRepositoryProtocol | None = None,
        bet_repo: BetRepositoryProtocol | None = None,
        audit_repo: AuditRepositoryProtocol | None = None,
        cache: BalanceCache | None = None,
    ) -> None:
        self._users: UserRepositoryProtocol = user_repo or UserRepository()
        self._ledger: LedgerRepositoryProtocol = ledger_repo or LedgerRepository()
        self._bets: BetRepositoryProtocol = bet_repo or BetRepository()
        self._audit: AuditRepositoryProtocol = audit_repo or AuditRepository()
        self._cache = cache or BalanceCache()

    async def grant_funds(
        self,
        db: AsyncSession,
        target_user_id: str,
        amount: int,
        reason: str | None,
        admin: Identity,
    ) -> GrantFundsResponse:
        """Credit (or, with a negative amount, debit) a user via ADMIN_ADJUSTMENT.

        A debit may not take the balance below zero.
        """
        _require_admin(admin)
        if isinstance(amount, bool) or not isinstance(amount, int) or amount == 0:
            raise InvalidAmountError(f"adjustment must be a non-zero whole number, got {amount!r}")

        async def work() -> GrantFundsResponse:
            user = await self._users.get_for_update(db, target_user_id)
            if user is None:
                raise UserNotFoundError(target_user_id)
            balance = await self._ledger.get_balance(db, user.id)
            if balance + amount < 0:
                raise InsufficientBalanceError(required=-amount, available=balance)
            entry = await self._ledger.append(
                db,
                user.id,
                amount,
                LedgerEntryType.ADMIN_ADJUSTMENT,
                metadata={"reason": reason, "admin_id": admin.user_id},
            )
            await self._audit.record(
                db,
                admin.user_id,
                AdminActionType.GRANT_FUNDS,
                AuditTargetType.USER,
                user.id,
                detail={"amount": amount, "reason": reason, "ledger_entry_id": entry.id},
            )
            return GrantFundsResponse.from_result(user.id, amount, balance + amount, entry.id)

        result = await run_atomic(db, work)
        await self._cache.invalidate(result.user_id)
        logger.info(
            "Admin %s adjusted %s by %d (reason=%s)", admin.user_id, result.user_id, amount, reason
        )
        await publish_event(
            FUNDS_GRANTED,
            {"user_id": result.user_id, "amount": amount, "admin_id": admin.user_id},
        )
        return result

    async def approve_user(
        self, db: AsyncSession, target_user_id: str, admin: Identity
    ) -> UserStatusResponse:
        """PENDING -> ACTIVE, plus exactly one STARTER credit."""
        _require_admin(admin)
        bonus = settings.STARTER_BONUS_NEOS

        async def work() -> UserStatusResponse:
            user = await self._users.get_for_update(db, target_user_id)
            if user is None:
                raise UserNotFoundError(target_user_id)
            if user.status != UserStatus.PENDING:
                raise InvalidUserStatusError(f"only PENDING users can be approved (status={user.status})")
            await self._users.approve(db, user.id, admin.user_id)
            await self._ledger.append(
                db, user.id, bonus, LedgerEntryType.STARTER, metadata={"approved_by": admin.user_id}
            )
            await self._audit.record(
                db,
                admin.user_id,
                AdminActionType.APPROVE_USER,
                AuditTargetType.USER,
                user.id,
                detail={"starter_bonus": bonus},
            )
            return UserStatusResponse(
                user_id=user.id,
                previous_status=user.status,
                status=UserStatus.ACTIVE.value,
                changed=True,
                starter_bonus=bonus,
            )

        result = await run_atomic(db, work)
        await self._cache.invalidate(result.user_id)
        logger.info("Admin %s approved user %s", admin.user_id, result.user_id)
        return result

    async def set_user_status(
        self,
        db: AsyncSession,
        target_user_id: str,
        new_status: UserStatus | str,
        reason: str | None,
        admin: Identity,
    ) -> UserStatusResponse:
        _require_admin(admin)
        status = enum_value(new_status)
        if str(parse_uuid(target_user_id)) == admin.user_id:
            raise InvalidUserStatusError("admins cannot change their own status")

        current = await self._users.get(db, target_user_id)
        if current is None:
            raise UserNotFoundError(target_user_id)
        if current.status == UserStatus.PENDING and status == UserStatus.ACTIVE:
            return await self.approve_user(db, target_user_id, admin)

        async def work() -> UserStatusResponse:
            user = await self._users.get_for_update(db, target_user_id)
            if user is None:
                raise UserNotFoundError(target_user_id)
            if user.status == status:
                return UserStatusResponse(
                    user_id=user.id, previous_status=user.status, status=status, changed=False
                )
            if (user.status, status) not in _STATUS_TRANSITIONS:
                raise InvalidUserStatusError(f"{user.status} -> {status} is not allowed")
            await self._users.set_status(db, user.id, status)
            await self._audit.record(
                db,
                admin.user_id,
                AdminActionType.SET_USER_STATUS,
                AuditTargetType.USER,
                user.id,
                detail={"from": user.status, "to": status, "reason": reason},
            )
            return UserStatusResponse(
                user_id=user.id, previous_status=user.status, status=status, changed=True
            )

        result = await run_atomic(db, work)
        if result.changed:
            logger.info(
                "Admin %s set user %s status %s -> %s",
                admin.user_id, result.user_id, result.previous_status, result.status,
            )
        return result

    async def set_bet_hidden(
        self, db: AsyncSession, bet_id: str, hidden: bool, admin: Identity
    ) -> BetHiddenResponse:
        """Moderation flag; independent of the bet's lifecycle status."""
        _require_admin(admin)

        async def work() -> BetHiddenResponse:
            await self._bets.set_hidden(db, bet_id, hidden)
            await self._audit.record(
                db,
                admin.user_id,
                AdminActionType.HIDE_BET if hidden else AdminActionType.UNHIDE_BET,
                AuditTargetType.BET,
                bet_id,
            )
            return BetHiddenResponse(bet_id=bet_id, hidden=hidden)

        return await run_atomic(db, work)

    async def verify_invariants(self, db: AsyncSession) -> InvariantReport:
        violations = await verify_ledger_invariants(db)
        return InvariantReport(ok=len(violations) == 0, violations=violations)
