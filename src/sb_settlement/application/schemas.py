"""Pydantic schemas for settlement endpoints."""

from pydantic import BaseModel

from src.sb_common.enums import BetStatus, SettlementKind
from src.sb_settlement.domain.models import Settlement
from src.sb_settlement.domain.payout import SettlementPlan


class ResolveRequest(BaseModel):
    outcome: bool                    # True: FOR wins, False: AGAINST wins
    # Range is validated by the service so the error carries its own code.
    fee_bps: int = 0


class SettlementResult(BaseModel):
    bet_id: str
    kind: str
    status: str                      # bet status after settlement
    outcome: bool | None
    voided: bool
    auto_voided: bool
    already_settled: bool
    fee_bps: int
    total_pot: int
    fee: int | None                  # None when reconstructed from an earlier settlement
    paid_out: int
    retained: int
    credits: int                     # number of ledger credits written

    @classmethod
    def from_plan(cls, bet_id: str, plan: SettlementPlan) -> "SettlementResult":
        return cls(
            bet_id=bet_id,
            kind=plan.kind,
            status=BetStatus.VOID.value if plan.is_void else BetStatus.RESOLVED.value,
            outcome=plan.outcome,
            voided=plan.is_void,
            auto_voided=plan.auto_voided,
            already_settled=False,
            fee_bps=plan.fee_bps,
            total_pot=plan.total_pot,
            fee=plan.fee,
            paid_out=plan.paid_out,
            retained=plan.retained,
            credits=len(plan.credits),
        )

    @classmethod
    def already(cls, s: Settlement) -> "SettlementResult":
        is_void = s.kind == SettlementKind.VOID
        return cls(
            bet_id=s.bet_id,
            kind=s.kind,
            status=BetStatus.VOID.value if is_void else BetStatus.RESOLVED.value,
            outcome=s.outcome,
            voided=is_void,
            auto_voided=s.auto_voided,
            already_settled=True,
            fee_bps=s.fee_bps,
            total_pot=s.total_pot,
            fee=None,
            paid_out=s.paid_out,
            retained=s.retained,
            credits=0,
        )
