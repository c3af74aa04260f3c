"""
Authentication and Authorization Module

Resolves the caller of a request from the magic link cookie and provides
role checks for the service layer.

SECURITY NOTE:
- The cookie holds the raw magic link; it is hashed before lookup and the
  raw value is never logged or stored
- Role checks raise AuthorizationError before any mutation happens
"""

import logging

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import AuthorizationError
from app.core.security import hash_magic_link
from app.modules.users.models import User, UserRole
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

STAFF_ROLES = (UserRole.ORGANIZER, UserRole.ADMIN)


def ensure_role(user: User, *roles: UserRole) -> None:
    """
    Check that a user holds one of the given roles.

    Args:
        user: The caller
        *roles: Acceptable roles

    Raises:
        AuthorizationError: If the user's role is not one of `roles`
    """
    if user.role not in roles:
        logger.warning(
            f"Access denied: user {user.id} has role '{user.role.value}', "
            f"requires one of {[r.value for r in roles]}"
        )
        raise AuthorizationError()


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """
    FastAPI dependency returning the logged in user, or None.

    Reads the magic link cookie, hashes it and looks up the owner.
    """
    magic_link = request.cookies.get(settings.session_cookie_name)
    if not magic_link:
        return None
    return await UserRepository.get_by_magic_link(db, hash_magic_link(magic_link))


async def get_current_user(
    user: User | None = Depends(get_optional_user),
) -> User:
    """
    FastAPI dependency that requires a logged in user.

    Usage:
        @router.post("/me/verify")
        async def verify(user: User = Depends(get_current_user)):
            ...

    Raises:
        HTTPException 401: If no valid magic link cookie was presented
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "NOT_AUTHENTICATED",
                "message": "Please log in with your magic link.",
            },
        )
    return user


__all__ = [
    "STAFF_ROLES",
    "ensure_role",
    "get_current_user",
    "get_optional_user",
]
