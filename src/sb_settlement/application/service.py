"""SettlementService: resolve and void bets, exactly once.

Flow inside one transaction (run_atomic):
    1. lock the bet row FOR UPDATE (waits for in-flight stakes holding FOR SHARE)
    2. settlement marker already present -> already_settled, no side effects
    3. bet not OPEN -> InvalidStateError
    4. plan payouts/refunds from the stake book (pure, sb_settlement.domain.payout)
    5. insert the marker (ON CONFLICT DO NOTHING); losing a race rolls back
    6. ledger credits, then one FEE entry for everything retained
    7. bet -> RESOLVED / VOID, audit row
After commit: balance cache invalidation and a settlement.completed event.

Every settled bet nets to zero across ledger_entries:
    stakes (-total_pot) + credits (+paid_out) + FEE (+retained) == 0
"""

import logging
from collections.abc import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_audit.domain.repository import AuditRepositoryProtocol
from src.sb_audit.infrastructure.persistence import AuditRepository
from src.sb_bet.domain.models import Bet
from src.sb_bet.domain.repository import BetRepositoryProtocol
from src.sb_bet.infrastructure.persistence import BetRepository
from src.sb_common.datetime_utils import utc_now
from src.sb_common.enums import (
    AdminActionType,
    AuditTargetType,
    BetStatus,
    LedgerEntryType,
)
from src.sb_common.errors import (
    AdminRequiredError,
    BetNotFoundError,
    InvalidFeeError,
    InvalidStateError,
)
from src.sb_common.events import SETTLEMENT_COMPLETED, publish_event
from src.sb_common.neos import validate_fee_bps
from src.sb_common.transactions import run_atomic
from src.sb_gateway.user.models import Identity
from src.sb_ledger.domain.models import PLATFORM_FEE_ACCOUNT
from src.sb_ledger.domain.repository import LedgerRepositoryProtocol
from src.sb_ledger.infrastructure.cache import BalanceCache
from src.sb_ledger.infrastructure.persistence import LedgerRepository
from src.sb_settlement.application.schemas import SettlementResult
from src.sb_settlement.domain.models import Settlement
from src.sb_settlement.domain.payout import SettlementPlan, plan_refunds, plan_resolution
from src.sb_settlement.domain.repository import SettlementRepositoryProtocol
from src.sb_settlement.infrastructure.persistence import SettlementRepository
from src.sb_stake.domain.repository import StakeRepositoryProtocol
from src.sb_stake.infrastructure.persistence import StakeRepository

logger = logging.getLogger(__name__)


class _AlreadySettledRace(Exception):
    """The marker insert found an existing row; the transaction must not commit."""


class SettlementService:
    def __init__(
        self,
        bet_repo: BetRepositoryProtocol | None = None,
        stake_repo: StakeRepositoryProtocol | None = None,
        ledger_repo: LedgerRepositoryProtocol | None = None,
        settlement_repo: SettlementRepositoryProtocol | None = None,
        audit_repo: AuditRepositoryProtocol | None = None,
        cache: BalanceCache | None = None,
    ) -> None:
        self._bets: BetRepositoryProtocol = bet_repo or BetRepository()
        self._stakes: StakeRepositoryProtocol = stake_repo or StakeRepository()
        self._ledger: LedgerRepositoryProtocol = ledger_repo or LedgerRepository()
        self._settlements: SettlementRepositoryProtocol = settlement_repo or SettlementRepository()
        self._audit: AuditRepositoryProtocol = audit_repo or AuditRepository()
        self._cache = cache or BalanceCache()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def resolve(
        self,
        db: AsyncSession,
        bet_id: str,
        outcome: bool,
        fee_bps: int,
        admin: Identity,
    ) -> SettlementResult:
        if not admin.is_admin:
            raise AdminRequiredError()
        try:
            validate_fee_bps(fee_bps)
        except ValueError:
            raise InvalidFeeError(fee_bps) from None

        async def plan(bet: Bet) -> SettlementPlan:
            entries = await self._stakes.list_entries(db, bet.id)
            return plan_resolution(entries, outcome, fee_bps)

        return await self._settle(db, bet_id, admin, plan, AdminActionType.RESOLVE_BET)

    async def void(self, db: AsyncSession, bet_id: str, admin: Identity) -> SettlementResult:
        if not admin.is_admin:
            raise AdminRequiredError()

        async def plan(bet: Bet) -> SettlementPlan:
            entries = await self._stakes.list_entries(db, bet.id)
            return plan_refunds(entries)

        return await self._settle(db, bet_id, admin, plan, AdminActionType.VOID_BET)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _settle(
        self,
        db: AsyncSession,
        bet_id: str,
        admin: Identity,
        make_plan: Callable[[Bet], Awaitable[SettlementPlan]],
        action: AdminActionType,
    ) -> SettlementResult:
        applied: list[SettlementPlan] = []

        async def work() -> SettlementResult:
            applied.clear()
            bet = await self._bets.get_for_update(db, bet_id)
            if bet is None:
                raise BetNotFoundError(bet_id)
            existing = await self._settlements.get(db, bet.id)
            if existing is not None:
                return SettlementResult.already(existing)
            if bet.status != BetStatus.OPEN:
                raise InvalidStateError(bet.id, bet.status)

            plan = await make_plan(bet)
            await self._apply(db, bet, plan, admin, action)
            applied.append(plan)
            return SettlementResult.from_plan(bet.id, plan)

        try:
            result = await run_atomic(db, work)
        except _AlreadySettledRace:
            existing = await self._settlements.get(db, bet_id)
            await db.rollback()
            if existing is None:
                raise
            logger.info("Settlement of bet %s lost a race; already settled", bet_id)
            return SettlementResult.already(existing)

        if result.already_settled:
            logger.info("Bet %s already settled (%s); no-op", result.bet_id, result.kind)
            return result

        plan = applied[0]
        logger.info(
            "Bet %s settled: kind=%s outcome=%s auto_voided=%s pot=%d paid_out=%d "
            "fee=%d residual=%d credits=%d by=%s",
            result.bet_id, plan.kind, plan.outcome, plan.auto_voided, plan.total_pot,
            plan.paid_out, plan.fee, plan.residual, len(plan.credits), admin.user_id,
        )
        await self._after_commit(result, plan)
        return result

    async def _apply(
        self,
        db: AsyncSession,
        bet: Bet,
        plan: SettlementPlan,
        admin: Identity,
        action: AdminActionType,
    ) -> None:
        marker = Settlement(
            bet_id=bet.id,
            kind=plan.kind,
            outcome=plan.outcome,
            fee_bps=plan.fee_bps,
            auto_voided=plan.auto_voided,
            settled_by_id=admin.user_id,
            total_pot=plan.total_pot,
            paid_out=plan.paid_out,
            retained=plan.retained,
        )
        if not await self._settlements.insert(db, marker):
            raise _AlreadySettledRace(bet.id)

        entry_type = LedgerEntryType.BET_REFUND if plan.is_void else LedgerEntryType.BET_PAYOUT
        for credit in plan.credits:
            await self._ledger.append(
                db,
                credit.user_id,
                credit.amount,
                entry_type,
                bet_id=bet.id,
                metadata={"stake": credit.stake},
            )
        if plan.retained > 0:
            await self._ledger.append(
                db,
                PLATFORM_FEE_ACCOUNT,
                plan.retained,
                LedgerEntryType.FEE,
                bet_id=bet.id,
                metadata={"fee": plan.fee, "residual": plan.residual, "fee_bps": plan.fee_bps},
            )

        now = utc_now()
        if plan.is_void:
            await self._bets.mark_voided(db, bet.id, admin.user_id, now)
        else:
            await self._bets.mark_resolved(db, bet.id, bool(plan.outcome), admin.user_id, now)

        await self._audit.record(
            db,
            admin.user_id,
            action,
            AuditTargetType.BET,
            bet.id,
            detail={
                "kind": plan.kind,
                "outcome": plan.outcome,
                "auto_voided": plan.auto_voided,
                "fee_bps": plan.fee_bps,
                "total_pot": plan.total_pot,
                "paid_out": plan.paid_out,
                "retained": plan.retained,
            },
        )

    async def _after_commit(self, result: SettlementResult, plan: SettlementPlan) -> None:
        user_ids = [c.user_id for c in plan.credits]
        if plan.retained > 0:
            user_ids.append(PLATFORM_FEE_ACCOUNT)
        await self._cache.invalidate(*user_ids)
        await publish_event(SETTLEMENT_COMPLETED, result.model_dump())
