"""
Announcements Router

Endpoints:
- GET /announcements - List announcements (public)
- POST /announcements - Publish an announcement (admin)
- DELETE /announcements/{id} - Delete an announcement (admin)
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_db
from app.core.exceptions import ServiceError, raise_http_error
from app.modules.announcements import service
from app.modules.announcements.schemas import AnnouncementCreate, AnnouncementResponse
from app.modules.users.models import User

router = APIRouter()


@router.get("", response_model=list[AnnouncementResponse], summary="List Announcements")
async def list_announcements(db: AsyncSession = Depends(get_db)) -> list[AnnouncementResponse]:
    announcements = await service.get_announcements(db)
    return [AnnouncementResponse.model_validate(a) for a in announcements]


@router.post(
    "",
    response_model=AnnouncementResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Publish Announcement",
)
async def create_announcement(
    data: AnnouncementCreate,
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> AnnouncementResponse:
    try:
        announcement = await service.announce(db, caller, data.body)
    except ServiceError as e:
        raise_http_error(e)
    return AnnouncementResponse.model_validate(announcement)


@router.delete(
    "/{announcement_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Announcement",
)
async def delete_announcement(
    announcement_id: int,
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> None:
    try:
        await service.delete_announcement(db, caller, announcement_id)
    except ServiceError as e:
        raise_http_error(e)
