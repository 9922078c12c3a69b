"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Ledger
  3xxx: Bet
  4xxx: Stake
  5xxx: Settlement
  6xxx: Invite
  9xxx: System

Every error also carries a machine-readable ``kind`` (see ErrorKind) so callers
can branch on the category without parsing codes.
"""

from src.sb_common.enums import ErrorKind


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        kind: ErrorKind = ErrorKind.INTERNAL,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.kind = kind
        super().__init__(message)


# --- 1xxx: Auth/User ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401, ErrorKind.AUTHORIZATION)


class UserNotActiveError(AppError):
    def __init__(self, status: str) -> None:
        super().__init__(
            1004, f"User is not active (status={status})", 403, ErrorKind.AUTHORIZATION
        )


class UserNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1006, f"User not found: {user_id}", 404, ErrorKind.NOT_FOUND)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "Admin privileges required", 403, ErrorKind.AUTHORIZATION)


class InvalidUserStatusError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1008, f"Invalid user status change: {detail}", 409, ErrorKind.STATE_CONFLICT)


# --- 2xxx: Ledger ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required} Neos, available {available} Neos",
            422,
            ErrorKind.INSUFFICIENT_RESOURCE,
        )


class InvalidAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2003, f"Invalid amount: {detail}", 422, ErrorKind.VALIDATION)


# --- 3xxx: Bet ---

class BetNotFoundError(AppError):
    def __init__(self, bet_id: str) -> None:
        super().__init__(3001, f"Bet not found: {bet_id}", 404, ErrorKind.NOT_FOUND)


class BetNotOpenError(AppError):
    def __init__(self, bet_id: str, status: str) -> None:
        super().__init__(
            3002, f"Bet {bet_id} is not open (status={status})", 409, ErrorKind.STATE_CONFLICT
        )


class BetLockedError(AppError):
    def __init__(self, bet_id: str) -> None:
        super().__init__(
            3003, f"This bet is locked: {bet_id} has passed its end time", 409,
            ErrorKind.STATE_CONFLICT,
        )


class InvalidBetError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3004, f"Invalid bet: {detail}", 422, ErrorKind.VALIDATION)


# --- 4xxx: Stake ---

class SideConflictError(AppError):
    def __init__(self, existing_side: str, requested_side: str) -> None:
        super().__init__(
            4001,
            f"Cannot switch sides: existing stake is {existing_side}, requested {requested_side}",
            409,
            ErrorKind.STATE_CONFLICT,
        )


class ParticipantLimitReachedError(AppError):
    def __init__(self, max_participants: int) -> None:
        super().__init__(
            4002,
            f"Participant limit reached ({max_participants})",
            409,
            ErrorKind.STATE_CONFLICT,
        )


# --- 5xxx: Settlement ---

class InvalidStateError(AppError):
    def __init__(self, bet_id: str, status: str) -> None:
        super().__init__(
            5001,
            f"Bet {bet_id} cannot be settled from status {status}",
            409,
            ErrorKind.STATE_CONFLICT,
        )


class InvalidFeeError(AppError):
    def __init__(self, fee_bps: int) -> None:
        super().__init__(
            5002, f"Fee must be between 0 and 10000 bps, got {fee_bps}", 422, ErrorKind.VALIDATION
        )


# --- 6xxx: Invite ---

class InviteCodeDisabledError(AppError):
    def __init__(self, bet_id: str) -> None:
        super().__init__(
            6001, f"Invite codes are not enabled for bet {bet_id}", 422, ErrorKind.STATE_CONFLICT
        )


class NotBetCreatorError(AppError):
    def __init__(self) -> None:
        super().__init__(
            6002, "Only the bet creator or an admin can manage invite codes", 403,
            ErrorKind.AUTHORIZATION,
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500, ErrorKind.INTERNAL)


class ConcurrencyError(AppError):
    """Lock timeout / serialization conflict that outlived the retry budget."""

    def __init__(self, detail: str = "Concurrent update conflict, please retry") -> None:
        super().__init__(9003, detail, 503, ErrorKind.CONCURRENCY)
