"""FastAPI dependencies: resolve the bearer token into an Identity.

Usage in any protected router:
    from src.sb_gateway.auth.dependencies import require_active_user

    @router.post("/bets/{bet_id}/stake")
    async def stake(caller: Identity = Depends(require_active_user)):
        ...

get_current_user accepts any known user (PENDING and BANNED included) so that
read-only endpoints keep working; mutating endpoints that must reject
non-active users do so inside the service, in the documented check order.
"""

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.sb_common.database import get_db_session
from src.sb_common.errors import AdminRequiredError, InvalidCredentialsError, UserNotActiveError
from src.sb_gateway.auth.jwt_handler import decode_token
from src.sb_gateway.user.models import Identity
from src.sb_gateway.user.repository import UserRepository

# Tokens are issued by the external identity provider; tokenUrl is informational.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")

_users = UserRepository()


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Identity:
    """Validate the JWT bearer token and load the caller from the users table.

    Raises InvalidCredentialsError (401) if the token is invalid or the user is unknown.
    """
    payload = decode_token(token)
    user = await _users.get(db, payload["sub"])
    if user is None:
        raise InvalidCredentialsError()
    return Identity(user_id=user.id, status=user.status, is_admin=user.is_admin)


async def require_active_user(
    caller: Identity = Depends(get_current_user),
) -> Identity:
    if not caller.is_active:
        raise UserNotActiveError(caller.status)
    return caller


async def require_admin(
    caller: Identity = Depends(get_current_user),
) -> Identity:
    """Admin endpoints: the caller must be an ACTIVE admin."""
    if not caller.is_admin:
        raise AdminRequiredError()
    if not caller.is_active:
        raise UserNotActiveError(caller.status)
    return caller
