"""
Schedule Repository

Writes flush but do not commit; the service owns the transaction.
"""

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.schedule.models import ScheduleEvent


async def list_events(db: AsyncSession) -> list[ScheduleEvent]:
    """All events ordered by start time."""
    result = await db.execute(
        select(ScheduleEvent).order_by(ScheduleEvent.start.asc(), ScheduleEvent.id.asc())
    )
    return list(result.scalars().all())


async def get_event(db: AsyncSession, event_id: int) -> ScheduleEvent | None:
    return await db.get(ScheduleEvent, event_id)


async def create_event(db: AsyncSession, values: dict[str, Any]) -> ScheduleEvent:
    event = ScheduleEvent(**values)
    db.add(event)
    await db.flush()
    await db.refresh(event)
    return event


async def delete_event(db: AsyncSession, event_id: int) -> bool:
    """Returns True if an event was deleted."""
    result = await db.execute(delete(ScheduleEvent).where(ScheduleEvent.id == event_id))
    return result.rowcount > 0
