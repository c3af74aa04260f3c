"""
Admissions Router - Applicant Self-Service

Endpoints:
- PATCH /applications/me - Save application answers
- POST /applications/me/submit - Submit the application
- POST /applications/me/verify - Verify a newly created account
- POST /applications/me/rsvp - Confirm or decline an acceptance
- GET /applications/settings - Public admissions settings
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_db
from app.core.exceptions import ServiceError, raise_http_error
from app.modules.admissions import admin_service, service
from app.modules.admissions.schemas import (
    ApplicationUpdate,
    PublicSettingsResponse,
    RsvpRequest,
    SubmitResponse,
    UserResponse,
)
from app.modules.users.models import User, UserStatus

logger = logging.getLogger(__name__)

router = APIRouter()


def _internal_error(e: Exception) -> HTTPException:
    logger.exception(f"Unexpected admissions error: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


@router.patch(
    "/me",
    response_model=UserResponse,
    summary="Save Application",
    description="""
Save some or all application answers.

Saving returns an applied user to VERIFIED, so the application must be
submitted again. Any decision staged for the user is discarded.
""",
    responses={
        409: {"description": "Applications are closed"},
    },
)
async def save_application(
    data: ApplicationUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> UserResponse:
    try:
        updated = await service.edit_application(db, user, data.model_dump(exclude_unset=True))
        return UserResponse.model_validate(updated)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise _internal_error(e) from e


@router.post(
    "/me/submit",
    response_model=SubmitResponse,
    summary="Submit Application",
    description="""
Submit the saved application.

If any answer is missing or invalid the application is not submitted and
`errors` maps each question to its message.
""",
    responses={
        409: {"description": "Applications are closed or already submitted"},
    },
)
async def submit_application(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> SubmitResponse:
    try:
        errors = await service.submit_application(db, user)
        return SubmitResponse(
            submitted=user.status == UserStatus.APPLIED,
            errors=errors,
            user=UserResponse.model_validate(user),
        )
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise _internal_error(e) from e


@router.post("/me/verify", response_model=UserResponse, summary="Verify Account")
async def verify(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> UserResponse:
    """Mark a newly created account as verified. No-op for any other status."""
    try:
        return UserResponse.model_validate(await service.verify(db, user))
    except Exception as e:
        raise _internal_error(e) from e


@router.post(
    "/me/rsvp",
    response_model=UserResponse,
    summary="RSVP",
    description="""
Confirm or decline attendance after being accepted.

Confirming is only possible before the confirm-by deadline. Declining is
always possible, even after confirming.
""",
)
async def rsvp(
    data: RsvpRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> UserResponse:
    try:
        return UserResponse.model_validate(await service.rsvp(db, user, data.rsvp))
    except Exception as e:
        raise _internal_error(e) from e


@router.get("/settings", response_model=PublicSettingsResponse, summary="Admissions Settings")
async def get_settings(db: AsyncSession = Depends(get_db)) -> PublicSettingsResponse:
    """Whether applications are open, the RSVP deadline and general info."""
    return PublicSettingsResponse.model_validate(await admin_service.get_public_settings(db))
