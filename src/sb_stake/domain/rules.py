"""Stake preconditions, evaluated in a fixed order; the first failure wins.

    1. bet exists                      BetNotFoundError
    2. bet is OPEN                     BetNotOpenError
    3. bet is not past end_at          BetLockedError
    4. user is ACTIVE                  UserNotActiveError
    5. amount is a positive integer    InvalidAmountError
    6. amount <= balance               InsufficientBalanceError
    7. same side as existing stake     SideConflictError
    8. participant cap not reached     ParticipantLimitReachedError

Each check is a pure function so the order can be tested without a database.
The service calls them in this order as it acquires the data each one needs.
"""

from datetime import datetime

from src.sb_bet.domain.models import Bet
from src.sb_common.enums import BetStatus, UserStatus
from src.sb_common.errors import (
    BetLockedError,
    BetNotFoundError,
    BetNotOpenError,
    InsufficientBalanceError,
    InvalidAmountError,
    ParticipantLimitReachedError,
    SideConflictError,
    UserNotActiveError,
)
from src.sb_common.neos import is_positive_amount
from src.sb_gateway.user.models import User
from src.sb_stake.domain.models import BetEntry


def check_bet_accepts_stakes(bet: Bet | None, bet_id: str, now: datetime) -> Bet:
    if bet is None:
        raise BetNotFoundError(bet_id)
    if bet.status != BetStatus.OPEN:
        raise BetNotOpenError(bet.id, bet.status)
    if bet.is_locked(now):
        raise BetLockedError(bet.id)
    return bet


def check_user_active(user: User | None) -> User:
    # A token for a since-deleted user is indistinguishable from an inactive one.
    if user is None:
        raise UserNotActiveError("UNKNOWN")
    if user.status != UserStatus.ACTIVE:
        raise UserNotActiveError(user.status)
    return user


def check_amount(amount: object) -> int:
    if not is_positive_amount(amount):
        raise InvalidAmountError(f"stake must be a positive whole number of Neos, got {amount!r}")
    return amount  # type: ignore[return-value]


def check_balance(amount: int, balance: int) -> None:
    if amount > balance:
        raise InsufficientBalanceError(required=amount, available=balance)


def check_side(existing: BetEntry | None, side: str) -> None:
    if existing is not None and existing.side != side:
        raise SideConflictError(existing.side, side)


def check_participant_capacity(max_participants: int | None, current: int) -> None:
    if max_participants is not None and current >= max_participants:
        raise ParticipantLimitReachedError(max_participants)
