"""Pydantic schemas for the stake endpoint."""

from pydantic import BaseModel

from src.sb_common.enums import Side
from src.sb_common.neos import neos_to_display


class StakeRequest(BaseModel):
    side: Side
    # Positivity is enforced by the service so it is reported in check order.
    amount: int


class StakeResponse(BaseModel):
    bet_id: str
    side: str
    amount: int
    position: int                   # cumulative stake on this bet after the call
    balance: int                    # caller's balance after the debit
    balance_display: str
    ledger_entry_id: int

    @classmethod
    def from_result(
        cls,
        bet_id: str,
        side: str,
        amount: int,
        position: int,
        balance: int,
        ledger_entry_id: int,
    ) -> "StakeResponse":
        return cls(
            bet_id=bet_id,
            side=side,
            amount=amount,
            position=position,
            balance=balance,
            balance_display=neos_to_display(balance),
            ledger_entry_id=ledger_entry_id,
        )
