"""
Schedule Service

Anyone may read the schedule; only admins manage it.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import ensure_role
from app.core.exceptions import EventNotFoundError
from app.modules.schedule import repository
from app.modules.schedule.models import ScheduleEvent
from app.modules.users.models import User, UserRole

logger = logging.getLogger(__name__)


async def get_schedule(db: AsyncSession) -> list[ScheduleEvent]:
    return await repository.list_events(db)


async def get_event(db: AsyncSession, caller: User, event_id: int) -> ScheduleEvent:
    """
    Get one event.

    Raises:
        AuthorizationError: If the caller is not an admin
        EventNotFoundError: If the event does not exist
    """
    ensure_role(caller, UserRole.ADMIN)
    event = await repository.get_event(db, event_id)
    if event is None:
        raise EventNotFoundError(event_id)
    return event


async def add_event(db: AsyncSession, caller: User, values: dict[str, Any]) -> ScheduleEvent:
    ensure_role(caller, UserRole.ADMIN)
    event = await repository.create_event(db, values)
    await db.commit()
    logger.info(f"Admin {caller.id} added event {event.id}: {event.name}")
    return event


async def delete_event(db: AsyncSession, caller: User, event_id: int) -> None:
    """
    Delete an event.

    Raises:
        AuthorizationError: If the caller is not an admin
        EventNotFoundError: If the event does not exist
    """
    ensure_role(caller, UserRole.ADMIN)
    if not await repository.delete_event(db, event_id):
        raise EventNotFoundError(event_id)
    await db.commit()
    logger.info(f"Admin {caller.id} deleted event {event_id}")
