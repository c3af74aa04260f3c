"""
Announcements Repository

Writes flush but do not commit; the service owns the transaction.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.announcements.models import Announcement


async def list_announcements(db: AsyncSession) -> list[Announcement]:
    """All announcements, newest first."""
    result = await db.execute(
        select(Announcement).order_by(Announcement.published.desc(), Announcement.id.desc())
    )
    return list(result.scalars().all())


async def create_announcement(db: AsyncSession, body: str) -> Announcement:
    announcement = Announcement(body=body)
    db.add(announcement)
    await db.flush()
    await db.refresh(announcement)
    return announcement


async def delete_announcement(db: AsyncSession, announcement_id: int) -> bool:
    """Returns True if an announcement was deleted."""
    result = await db.execute(delete(Announcement).where(Announcement.id == announcement_id))
    return result.rowcount > 0
