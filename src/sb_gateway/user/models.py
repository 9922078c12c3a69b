"""Domain models for users: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.sb_common.enums import UserStatus


@dataclass
class User:
    id: str
    username: str
    status: str                      # UserStatus value
    is_admin: bool
    approved_at: datetime | None = None
    approved_by_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as resolved from the bearer token."""

    user_id: str
    status: str
    is_admin: bool = False

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE
