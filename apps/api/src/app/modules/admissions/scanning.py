"""
Hacker ID scanning.

Organizers scan hacker IDs at check-in, meals and workshops. Each scan adds
one to the hacker's counter for that action; scans are never deduplicated.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import STAFF_ROLES, ensure_role
from app.core.exceptions import UserNotFoundError
from app.modules.users.models import User
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


async def record_scan(db: AsyncSession, caller: User, user_id: int, action: str) -> int:
    """
    Record one scan of a user for an action.

    Args:
        db: Database session
        caller: The logged in organizer or admin
        user_id: The scanned user
        action: Action name, e.g. "checkin" or "lunch"

    Returns:
        The user's count for the action after this scan

    Raises:
        AuthorizationError: If the caller is not an organizer or admin
        UserNotFoundError: If the user does not exist
    """
    ensure_role(caller, *STAFF_ROLES)

    if await UserRepository.get_by_id(db, user_id) is None:
        raise UserNotFoundError(user_id)

    count = await UserRepository.increment_scan(db, user_id, action)
    await db.commit()

    logger.info(f"User {caller.id} scanned user {user_id} for '{action}' (count={count})")
    return count


async def count_scanned(db: AsyncSession, caller: User, action: str) -> int:
    """Number of hackers scanned at least once for an action."""
    ensure_role(caller, *STAFF_ROLES)
    return await UserRepository.count_scanned(db, action)


async def get_user_by_link(db: AsyncSession, caller: User, magic_link_hash: str) -> User:
    """
    Look up the user behind a hacker ID.

    Hacker IDs encode the hash of the owner's magic link.

    Raises:
        UserNotFoundError: If no user has that link
    """
    ensure_role(caller, *STAFF_ROLES)
    user = await UserRepository.get_by_magic_link(db, magic_link_hash)
    if user is None:
        raise UserNotFoundError()
    return user
