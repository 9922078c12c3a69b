"""Pure settlement arithmetic: no I/O, integers only.

Resolve (outcome True means FOR wins):
    total_pot      = sum of all stakes
    winning_total  = sum of stakes on the winning side
    fee            = floor(total_pot * fee_bps / 10000)
    net_pot        = total_pot - fee
    payout_i       = floor(stake_i * net_pot / winning_total)   (winners only)
    retained       = total_pot - sum(payout_i) = fee + residual

If nobody backed the winning side (winning_total == 0) the bet is
auto-voided: every stake is refunded in full and no fee is taken.

Guarantees (checked by tests):
    sum(payouts) <= net_pot <= total_pot
    0 <= residual < number of winning stakers
    void: sum(refunds) == total_pot
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from src.sb_common.enums import SettlementKind, Side
from src.sb_common.neos import calculate_fee, validate_fee_bps
from src.sb_stake.domain.models import BetEntry


@dataclass(frozen=True)
class Credit:
    user_id: str
    amount: int
    stake: int


@dataclass
class SettlementPlan:
    kind: str                        # SettlementKind value
    outcome: bool | None             # requested outcome; None for an explicit void
    auto_voided: bool
    fee_bps: int
    total_pot: int
    for_total: int
    against_total: int
    fee: int
    credits: list[Credit] = field(default_factory=list)

    @property
    def net_pot(self) -> int:
        return self.total_pot - self.fee

    @property
    def paid_out(self) -> int:
        return sum(c.amount for c in self.credits)

    @property
    def retained(self) -> int:
        return self.total_pot - self.paid_out

    @property
    def residual(self) -> int:
        return self.retained - self.fee

    @property
    def is_void(self) -> bool:
        return self.kind == SettlementKind.VOID


def winning_side(outcome: bool) -> str:
    return Side.FOR.value if outcome else Side.AGAINST.value


def side_totals(entries: Iterable[BetEntry]) -> tuple[int, int]:
    for_total = 0
    against_total = 0
    for e in entries:
        if e.side == Side.FOR:
            for_total += e.stake
        else:
            against_total += e.stake
    return for_total, against_total


def proportional_payout(stake: int, net_pot: int, winning_total: int) -> int:
    """floor(stake * net_pot / winning_total), exact integer arithmetic."""
    if winning_total <= 0:
        raise ValueError("winning_total must be positive")
    return (stake * net_pot) // winning_total


def plan_refunds(
    entries: list[BetEntry], outcome: bool | None = None, auto_voided: bool = False
) -> SettlementPlan:
    for_total, against_total = side_totals(entries)
    return SettlementPlan(
        kind=SettlementKind.VOID.value,
        outcome=outcome,
        auto_voided=auto_voided,
        fee_bps=0,
        total_pot=for_total + against_total,
        for_total=for_total,
        against_total=against_total,
        fee=0,
        credits=[Credit(e.user_id, e.stake, e.stake) for e in entries if e.stake > 0],
    )


def plan_resolution(entries: list[BetEntry], outcome: bool, fee_bps: int) -> SettlementPlan:
    validate_fee_bps(fee_bps)
    for_total, against_total = side_totals(entries)
    winner = winning_side(outcome)
    winning_total = for_total if outcome else against_total
    if winning_total == 0:
        return plan_refunds(entries, outcome=outcome, auto_voided=True)

    total_pot = for_total + against_total
    fee = calculate_fee(total_pot, fee_bps)
    net_pot = total_pot - fee
    credits = []
    for e in entries:
        if e.side != winner:
            continue
        amount = proportional_payout(e.stake, net_pot, winning_total)
        if amount > 0:
            credits.append(Credit(e.user_id, amount, e.stake))
    return SettlementPlan(
        kind=SettlementKind.RESOLVE.value,
        outcome=outcome,
        auto_voided=False,
        fee_bps=fee_bps,
        total_pot=total_pot,
        for_total=for_total,
        against_total=against_total,
        fee=fee,
        credits=credits,
    )
