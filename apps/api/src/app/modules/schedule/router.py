"""
Schedule Router

Endpoints:
- GET /schedule - All events by start time (public)
- GET /schedule/{id} - One event (admin)
- POST /schedule - Add an event (admin)
- DELETE /schedule/{id} - Delete an event (admin)
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_db
from app.core.exceptions import ServiceError, raise_http_error
from app.modules.schedule import service
from app.modules.schedule.schemas import EventCreate, EventResponse
from app.modules.users.models import User

router = APIRouter()


@router.get("", response_model=list[EventResponse], summary="Get Schedule")
async def get_schedule(db: AsyncSession = Depends(get_db)) -> list[EventResponse]:
    return [EventResponse.model_validate(event) for event in await service.get_schedule(db)]


@router.get("/{event_id}", response_model=EventResponse, summary="Get Event")
async def get_event(
    event_id: int,
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> EventResponse:
    try:
        event = await service.get_event(db, caller, event_id)
    except ServiceError as e:
        raise_http_error(e)
    return EventResponse.model_validate(event)


@router.post(
    "",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Event",
)
async def add_event(
    data: EventCreate,
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> EventResponse:
    try:
        event = await service.add_event(db, caller, data.model_dump())
    except ServiceError as e:
        raise_http_error(e)
    return EventResponse.model_validate(event)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Event")
async def delete_event(
    event_id: int,
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> None:
    try:
        await service.delete_event(db, caller, event_id)
    except ServiceError as e:
        raise_http_error(e)
