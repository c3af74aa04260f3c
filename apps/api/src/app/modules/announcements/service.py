"""Announcements Service."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import ensure_role
from app.core.exceptions import AnnouncementNotFoundError
from app.modules.announcements import repository
from app.modules.announcements.models import Announcement
from app.modules.users.models import User, UserRole

logger = logging.getLogger(__name__)


async def get_announcements(db: AsyncSession) -> list[Announcement]:
    return await repository.list_announcements(db)


async def announce(db: AsyncSession, caller: User, body: str) -> Announcement:
    """
    Publish an announcement.

    Raises:
        AuthorizationError: If the caller is not an admin
    """
    ensure_role(caller, UserRole.ADMIN)
    announcement = await repository.create_announcement(db, body)
    await db.commit()
    logger.info(f"Admin {caller.id} published announcement {announcement.id}")
    return announcement


async def delete_announcement(db: AsyncSession, caller: User, announcement_id: int) -> None:
    """
    Delete an announcement.

    Raises:
        AuthorizationError: If the caller is not an admin
        AnnouncementNotFoundError: If the announcement does not exist
    """
    ensure_role(caller, UserRole.ADMIN)
    if not await repository.delete_announcement(db, announcement_id):
        raise AnnouncementNotFoundError(announcement_id)
    await db.commit()
    logger.info(f"Admin {caller.id} deleted announcement {announcement_id}")
