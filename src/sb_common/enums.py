"""Global enums. Values must match the DB CHECK constraints exactly.

Ref: alembic/versions/002..007
"""

from enum import Enum


class UserStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    BANNED = "BANNED"


class BetStatus(str, Enum):
    OPEN = "OPEN"
    RESOLVED = "RESOLVED"
    VOID = "VOID"


class DerivedBetStatus(str, Enum):
    """BetStatus plus the implicit LOCKED state (OPEN and past end_at). Never stored."""
    OPEN = "OPEN"
    LOCKED = "LOCKED"
    RESOLVED = "RESOLVED"
    VOID = "VOID"


class BetVisibility(str, Enum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class BetAudience(str, Enum):
    PUBLIC = "PUBLIC"
    FRIENDS = "FRIENDS"
    GROUP = "GROUP"
    INVITE_ONLY = "INVITE_ONLY"


class Side(str, Enum):
    FOR = "FOR"
    AGAINST = "AGAINST"


class LedgerEntryType(str, Enum):
    STARTER = "STARTER"
    BET_STAKE = "BET_STAKE"
    BET_PAYOUT = "BET_PAYOUT"
    BET_REFUND = "BET_REFUND"
    FEE = "FEE"
    ADMIN_ADJUSTMENT = "ADMIN_ADJUSTMENT"


class SettlementKind(str, Enum):
    RESOLVE = "RESOLVE"
    VOID = "VOID"


class AdminActionType(str, Enum):
    RESOLVE_BET = "RESOLVE_BET"
    VOID_BET = "VOID_BET"
    HIDE_BET = "HIDE_BET"
    UNHIDE_BET = "UNHIDE_BET"
    GRANT_FUNDS = "GRANT_FUNDS"
    APPROVE_USER = "APPROVE_USER"
    SET_USER_STATUS = "SET_USER_STATUS"


class AuditTargetType(str, Enum):
    BET = "BET"
    USER = "USER"


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION"
    STATE_CONFLICT = "STATE_CONFLICT"
    AUTHORIZATION = "AUTHORIZATION"
    INSUFFICIENT_RESOURCE = "INSUFFICIENT_RESOURCE"
    NOT_FOUND = "NOT_FOUND"
    CONCURRENCY = "CONCURRENCY"
    INTERNAL = "INTERNAL"


def enum_value(value: object) -> str:
    """Plain string for an enum member or string; str() of a str-Enum is 'Cls.NAME' on 3.11+."""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)
