"""Unit tests for settlement payout arithmetic (pure functions, no DB)."""

import pytest

from src.sb_common.enums import SettlementKind, Side
from src.sb_settlement.domain.payout import (
    plan_refunds,
    plan_resolution,
    proportional_payout,
    side_totals,
    winning_side,
)
from src.sb_stake.domain.models import BetEntry


def _entry(user_id: str, side: Side, stake: int, entry_id: int = 1) -> BetEntry:
    return BetEntry(id=entry_id, bet_id="bet-1", user_id=user_id, side=side.value, stake=stake)


def _credits(plan) -> dict[str, int]:
    return {c.user_id: c.amount for c in plan.credits}


class TestScenarios:
    def test_winner_takes_whole_pot_without_fee(self) -> None:
        entries = [_entry("A", Side.FOR, 60), _entry("B", Side.AGAINST, 40)]
        plan = plan_resolution(entries, outcome=True, fee_bps=0)
        assert plan.kind == SettlementKind.RESOLVE
        assert _credits(plan) == {"A": 100}
        assert plan.fee == 0
        assert plan.retained == 0

    def test_ten_percent_fee(self) -> None:
        entries = [_entry("A", Side.FOR, 60), _entry("B", Side.AGAINST, 40)]
        plan = plan_resolution(entries, outcome=True, fee_bps=1000)
        assert plan.fee == 10
        assert plan.net_pot == 90
        assert _credits(plan) == {"A": 90}
        assert plan.retained == 10
        assert plan.residual == 0

    def test_no_winning_stake_auto_voids(self) -> None:
        entries = [_entry("A", Side.FOR, 30), _entry("B", Side.FOR, 20)]
        plan = plan_resolution(entries, outcome=False, fee_bps=500)
        assert plan.is_void
        assert plan.auto_voided
        assert plan.outcome is False
        assert plan.fee == 0
        assert plan.fee_bps == 0
        assert _credits(plan) == {"A": 30, "B": 20}


class TestFlooring:
    def test_residual_goes_to_retained(self) -> None:
        # net_pot 100 split 1:1:1 -> 33 each, 1 Neo residual
        entries = [
            _entry("A", Side.FOR, 10),
            _entry("B", Side.FOR, 10),
            _entry("C", Side.FOR, 10),
            _entry("D", Side.AGAINST, 70),
        ]
        plan = plan_resolution(entries, outcome=True, fee_bps=0)
        assert _credits(plan) == {"A": 33, "B": 33, "C": 33}
        assert plan.paid_out == 99
        assert plan.retained == 1
        assert plan.residual == 1

    def test_zero_payout_is_skipped(self) -> None:
        # 100% fee leaves nothing to pay out
        entries = [_entry("A", Side.FOR, 5), _entry("B", Side.AGAINST, 5)]
        plan = plan_resolution(entries, outcome=True, fee_bps=10000)
        assert plan.credits == []
        assert plan.retained == 10
        assert plan.fee == 10

    @pytest.mark.parametrize("fee_bps", [0, 1, 250, 999, 3333, 10000])
    def test_conservation(self, fee_bps: int) -> None:
        entries = [
            _entry("A", Side.FOR, 7),
            _entry("B", Side.FOR, 13),
            _entry("C", Side.FOR, 1),
            _entry("D", Side.AGAINST, 97),
            _entry("E", Side.AGAINST, 3),
        ]
        plan = plan_resolution(entries, outcome=True, fee_bps=fee_bps)
        assert plan.paid_out + plan.retained == plan.total_pot
        assert plan.paid_out <= plan.net_pot <= plan.total_pot
        assert 0 <= plan.residual < 3

    def test_invalid_fee_raises(self) -> None:
        with pytest.raises(ValueError):
            plan_resolution([_entry("A", Side.FOR, 1)], outcome=True, fee_bps=10001)


class TestRefunds:
    def test_refund_is_exact(self) -> None:
        entries = [_entry("A", Side.FOR, 25), _entry("B", Side.AGAINST, 75)]
        plan = plan_refunds(entries)
        assert plan.is_void
        assert not plan.auto_voided
        assert plan.outcome is None
        assert _credits(plan) == {"A": 25, "B": 75}
        assert plan.paid_out == plan.total_pot
        assert plan.retained == 0

    def test_empty_book(self) -> None:
        plan = plan_refunds([])
        assert plan.total_pot == 0
        assert plan.credits == []

    def test_resolve_empty_book_auto_voids(self) -> None:
        plan = plan_resolution([], outcome=True, fee_bps=100)
        assert plan.auto_voided
        assert plan.credits == []


class TestHelpers:
    def test_winning_side(self) -> None:
        assert winning_side(True) == "FOR"
        assert winning_side(False) == "AGAINST"

    def test_side_totals(self) -> None:
        entries = [_entry("A", Side.FOR, 3), _entry("B", Side.AGAINST, 4), _entry("C", Side.FOR, 5)]
        assert side_totals(entries) == (8, 4)

    def test_proportional_payout_requires_winners(self) -> None:
        with pytest.raises(ValueError):
            proportional_payout(10, 100, 0)

    def test_proportional_payout_floors(self) -> None:
        assert proportional_payout(1, 100, 3) == 33
