"""UserRepository: ORM access to the users table.

Transaction ownership: the caller (application service via run_atomic)
commits or rolls back. get_for_update takes a row lock that serializes
every balance-debiting operation for that user.
"""

import uuid
from typing import Protocol

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.datetime_utils import utc_now
from src.sb_common.enums import UserStatus
from src.sb_common.ids import parse_uuid
from src.sb_gateway.user.db_models import UserModel
from src.sb_gateway.user.models import User


class UserRepositoryProtocol(Protocol):
    async def get(self, db: AsyncSession, user_id: str) -> User | None: ...

    async def get_for_update(self, db: AsyncSession, user_id: str) -> User | None: ...

    async def set_status(self, db: AsyncSession, user_id: str, status: str) -> None: ...

    async def approve(self, db: AsyncSession, user_id: str, admin_id: str) -> None: ...


def _model_to_user(m: UserModel) -> User:
    return User(
        id=str(m.id),
        username=m.username,
        status=m.status,
        is_admin=m.is_admin,
        approved_at=m.approved_at,
        approved_by_id=str(m.approved_by_id) if m.approved_by_id else None,
        created_at=m.created_at,
        updated_at=m.updated_at,
    )


class UserRepository:
    async def get(self, db: AsyncSession, user_id: str) -> User | None:
        uid = parse_uuid(user_id)
        if uid is None:
            return None
        result = await db.execute(select(UserModel).where(UserModel.id == uid))
        model = result.scalar_one_or_none()
        return _model_to_user(model) if model is not None else None

    async def get_for_update(self, db: AsyncSession, user_id: str) -> User | None:
        uid = parse_uuid(user_id)
        if uid is None:
            return None
        result = await db.execute(
            select(UserModel)
            .where(UserModel.id == uid)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return _model_to_user(model) if model is not None else None

    async def set_status(self, db: AsyncSession, user_id: str, status: str) -> None:
        await db.execute(
            update(UserModel)
            .where(UserModel.id == uuid.UUID(user_id))
            .values(status=status, updated_at=utc_now())
        )

    async def approve(self, db: AsyncSession, user_id: str, admin_id: str) -> None:
        now = utc_now()
        await db.execute(
            update(UserModel)
            .where(UserModel.id == uuid.UUID(user_id))
            .values(
                status=UserStatus.ACTIVE.value,
                approved_at=now,
                approved_by_id=uuid.UUID(admin_id),
                updated_at=now,
            )
        )
