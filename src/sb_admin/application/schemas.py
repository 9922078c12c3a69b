"""Pydantic schemas for admin endpoints."""

from pydantic import BaseModel, Field

from src.sb_common.enums import UserStatus
from src.sb_common.neos import neos_to_display


class GrantFundsRequest(BaseModel):
    # Non-zero is enforced by the service (InvalidAmountError).
    amount: int
    reason: str | None = Field(None, max_length=500)


class SetUserStatusRequest(BaseModel):
    status: UserStatus
    reason: str | None = Field(None, max_length=500)


class SetHiddenRequest(BaseModel):
    hidden: bool


class GrantFundsResponse(BaseModel):
    user_id: str
    amount: int
    balance: int
    balance_display: str
    ledger_entry_id: int

    @classmethod
    def from_result(
        cls, user_id: str, amount: int, balance: int, entry_id: int
    ) -> "GrantFundsResponse":
        return cls(
            user_id=user_id,
            amount=amount,
            balance=balance,
            balance_display=neos_to_display(balance),
            ledger_entry_id=entry_id,
        )


class UserStatusResponse(BaseModel):
    user_id: str
    previous_status: str
    status: str
    changed: bool
    starter_bonus: int = 0


class BetHiddenResponse(BaseModel):
    bet_id: str
    hidden: bool


class InvariantReport(BaseModel):
    ok: bool
    violations: list[str]
