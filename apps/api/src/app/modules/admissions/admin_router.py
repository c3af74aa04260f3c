"""
Admissions Admin Router

API endpoints for organizers and admins.

Endpoints:
- GET /admin/users - All users with their staged decision
- POST /admin/users - Create a user (e.g. an organizer) and email their link
- GET /admin/users/next - Next applicant waiting for a decision
- GET /admin/users/by-link/{link_hash} - Look up a hacker ID
- GET /admin/decisions - Staged decisions grouped by outcome
- POST /admin/decisions/stage - Stage a decision for applicants
- POST /admin/decisions/release - Release staged decisions and notify
- POST /admin/decisions/remove - Remove staged decisions
- POST /admin/walk-ins - Confirm walk-in attendees
- GET /admin/settings - All admissions settings
- PATCH /admin/settings - Update admissions settings
- POST /admin/scans - Record a scan
- GET /admin/scans/{action} - Number of hackers scanned for an action

Security:
- Every endpoint requires a logged in user; the service layer enforces the
  ADMIN role (scanning also allows ORGANIZER)
- Release is rate limited per admin
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import ensure_role, get_current_user
from app.core.database import get_db
from app.core.exceptions import ServiceError, raise_http_error
from app.core.rate_limit import RateLimitExceeded, check_rate_limit
from app.modules.admissions import admin_service, scanning
from app.modules.admissions.models import Decision, DecisionStatus
from app.modules.admissions.release import ReleasePipeline, get_release_pipeline
from app.modules.admissions.schemas import (
    DecisionResponse,
    DecisionsResponse,
    ReleaseRequest,
    ReleaseSummaryResponse,
    RemoveDecisionsResponse,
    ScannedCountResponse,
    ScanRequest,
    ScanResponse,
    SettingsResponse,
    SettingsUpdate,
    StagedDecision,
    StageDecisionsRequest,
    UserIdsRequest,
    UserResponse,
    UserWithDecision,
)
from app.modules.auth import service as auth_service
from app.modules.auth.schemas import CreateUserRequest
from app.modules.users.models import User, UserRole

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================
# Rate Limiting Configuration
# ============================================

RATE_LIMIT_RELEASE = (5, 60)  # 5 releases per minute


async def _check_admin_rate_limit(admin: User, action: str, limit: int, window_seconds: int):
    """
    Check rate limit for an admin action.

    Raises:
        RateLimitExceeded: If rate limit is exceeded
    """
    key = f"admin:{action}:{admin.id}"
    if not await check_rate_limit(key, limit, window_seconds):
        logger.warning(
            f"Rate limit exceeded for admin {admin.id} on action '{action}': "
            f"{limit}/{window_seconds}s"
        )
        raise RateLimitExceeded(limit, window_seconds)


# ============================================
# Helper Functions
# ============================================


def _internal_error(e: Exception) -> HTTPException:
    logger.exception(f"Unexpected admin error: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )


def _to_staged(decision: Decision) -> StagedDecision:
    return StagedDecision(
        id=decision.id,
        status=decision.status,
        user=UserResponse.model_validate(decision.user),
    )


# Settings columns that may not be cleared
_REQUIRED_SETTINGS = {
    "application_open",
    "info",
    "rolling_admissions",
    "acceptance_template",
}


# ============================================
# Users
# ============================================


@router.get("/users", response_model=list[UserWithDecision], summary="List Users")
async def list_users(
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> list[UserWithDecision]:
    """All users ordered by ID, each with their staged decision."""
    try:
        rows = await admin_service.get_users(db, caller)
    except ServiceError as e:
        raise_http_error(e)
    return [
        UserWithDecision(
            user=UserResponse.model_validate(user),
            decision=decision.status if decision else None,
        )
        for user, decision in rows
    ]


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create User",
    responses={409: {"description": "Email already registered"}},
)
async def create_user(
    data: CreateUserRequest,
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> UserResponse:
    """Create a user with a role and email them a login link."""
    try:
        user = await auth_service.create_user(
            db, caller, full_name=data.full_name, email=data.email, role=data.role
        )
        return UserResponse.model_validate(user)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise _internal_error(e) from e


@router.get("/users/next", response_model=UserResponse | None, summary="Next Applicant")
async def next_applicant(
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> UserResponse | None:
    """An applicant with no staged decision, or null when the queue is empty."""
    try:
        user = await admin_service.get_next_applicant(db, caller)
    except ServiceError as e:
        raise_http_error(e)
    return UserResponse.model_validate(user) if user else None


@router.get(
    "/users/by-link/{link_hash}",
    response_model=UserResponse,
    summary="Look Up Hacker ID",
    responses={404: {"description": "No user with that link"}},
)
async def get_user_by_link(
    link_hash: str,
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> UserResponse:
    try:
        user = await scanning.get_user_by_link(db, caller, link_hash)
    except ServiceError as e:
        raise_http_error(e)
    return UserResponse.model_validate(user)


# ============================================
# Decisions
# ============================================


@router.get("/decisions", response_model=DecisionsResponse, summary="Staged Decisions")
async def list_decisions(
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> DecisionsResponse:
    try:
        grouped = await admin_service.get_decisions(db, caller)
    except ServiceError as e:
        raise_http_error(e)
    return DecisionsResponse(
        accepted=[_to_staged(d) for d in grouped[DecisionStatus.ACCEPTED]],
        rejected=[_to_staged(d) for d in grouped[DecisionStatus.REJECTED]],
        waitlisted=[_to_staged(d) for d in grouped[DecisionStatus.WAITLISTED]],
    )


@router.post(
    "/decisions/stage",
    response_model=list[DecisionResponse],
    summary="Stage Decisions",
    description="""
Stage a decision for each applicant. Nothing is sent and no status changes
until the decisions are released.

Users who are not APPLIED or WAITLISTED are skipped.
""",
    responses={404: {"description": "A user does not exist"}},
)
async def stage_decisions(
    data: StageDecisionsRequest,
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> list[DecisionResponse]:
    try:
        staged = await admin_service.stage_decisions(db, caller, data.ids, data.decision)
        return [DecisionResponse.model_validate(d) for d in staged]
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise _internal_error(e) from e


@router.post(
    "/decisions/release",
    response_model=ReleaseSummaryResponse,
    summary="Release Decisions",
    description="""
Apply staged decisions and email each applicant whose status changed.

Each decision is committed on its own; a failure for one user does not
affect the others. Emails that could not be delivered are listed in
`delivery_failures` and do not undo the release.
""",
    responses={
        404: {"description": "A user has no staged decision"},
        429: {"description": "Rate limit exceeded"},
    },
)
async def release_decisions(
    data: ReleaseRequest,
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
    pipeline: ReleasePipeline = Depends(get_release_pipeline),
) -> ReleaseSummaryResponse:
    try:
        ensure_role(caller, UserRole.ADMIN)
    except ServiceError as e:
        raise_http_error(e)
    await _check_admin_rate_limit(caller, "release", *RATE_LIMIT_RELEASE)
    try:
        if data.ids is None:
            summary = await pipeline.release_all(db, caller)
        else:
            summary = await pipeline.release_some(db, caller, data.ids)
        return ReleaseSummaryResponse.model_validate(summary)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise _internal_error(e) from e


@router.post(
    "/decisions/remove",
    response_model=RemoveDecisionsResponse,
    summary="Remove Staged Decisions",
)
async def remove_decisions(
    data: UserIdsRequest,
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> RemoveDecisionsResponse:
    try:
        removed = await admin_service.remove_decisions(db, caller, data.ids)
        return RemoveDecisionsResponse(removed=removed)
    except ServiceError as e:
        raise_http_error(e)


# ============================================
# Walk-ins
# ============================================


@router.post(
    "/walk-ins",
    response_model=list[UserResponse],
    summary="Confirm Walk-ins",
    description="""
Confirm attendance for users who show up without having been accepted.
Anyone who has at least applied becomes CONFIRMED. No email is sent.
""",
)
async def confirm_walk_ins(
    data: UserIdsRequest,
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> list[UserResponse]:
    try:
        confirmed = await admin_service.confirm_walk_ins(db, caller, data.ids)
        return [UserResponse.model_validate(user) for user in confirmed]
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise _internal_error(e) from e


# ============================================
# Settings
# ============================================


@router.get("/settings", response_model=SettingsResponse, summary="All Settings")
async def get_settings(
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> SettingsResponse:
    try:
        return SettingsResponse.model_validate(await admin_service.get_all_settings(db, caller))
    except ServiceError as e:
        raise_http_error(e)


@router.patch("/settings", response_model=SettingsResponse, summary="Update Settings")
async def update_settings(
    data: SettingsUpdate,
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> SettingsResponse:
    values = {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key not in _REQUIRED_SETTINGS
    }
    try:
        updated = await admin_service.update_settings(db, caller, values)
        return SettingsResponse.model_validate(updated)
    except ServiceError as e:
        raise_http_error(e)


# ============================================
# Scanning
# ============================================


@router.post("/scans", response_model=ScanResponse, summary="Record Scan")
async def record_scan(
    data: ScanRequest,
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> ScanResponse:
    """Add one to the user's counter for the action. Repeated scans all count."""
    try:
        count = await scanning.record_scan(db, caller, data.user_id, data.action)
        return ScanResponse(user_id=data.user_id, action=data.action, count=count)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        raise _internal_error(e) from e


@router.get("/scans/{action}", response_model=ScannedCountResponse, summary="Scanned Count")
async def scanned_count(
    action: str,
    db: AsyncSession = Depends(get_db),
    caller: User = Depends(get_current_user),
) -> ScannedCountResponse:
    """Number of hackers scanned at least once for the action."""
    try:
        count = await scanning.count_scanned(db, caller, action)
    except ServiceError as e:
        raise_http_error(e)
    return ScannedCountResponse(action=action, count=count)
