"""Authentication router."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import ServiceError, raise_http_error
from app.core.rate_limit import RateLimitExceeded, check_rate_limit
from app.modules.admissions.schemas import UserResponse
from app.modules.auth import service
from app.modules.auth.schemas import MessageResponse, RegisterRequest
from app.modules.users.models import User

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/register",
    response_model=MessageResponse,
    summary="Register",
    description="""
Email a login link to the given address, creating the account if needed.

Registering again with the same email sends a new link and invalidates the
previous one.

**Rate Limiting:**
Returns 429 Too Many Requests if the same email registers too often.
""",
    responses={
        400: {"description": "Email outside the allowed domain"},
        429: {"description": "Rate limit exceeded"},
    },
)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    email = service.normalize_email(data.email)
    limit, window = settings.register_rate_limit, settings.register_rate_window_seconds
    if not await check_rate_limit(f"register:{email}", limit, window):
        logger.warning(f"Registration rate limit exceeded: {limit}/{window}s")
        raise RateLimitExceeded(limit, window)

    try:
        return MessageResponse(message=await service.register(db, email))
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Unexpected error during registration: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred. Please try again later.",
            },
        ) from e


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Log Out")
async def logout(response: Response) -> None:
    """Clear the magic link cookie."""
    response.delete_cookie(settings.session_cookie_name)


@router.get("/me", response_model=UserResponse, summary="Current User")
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(user)
