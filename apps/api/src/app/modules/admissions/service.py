"""
Admissions Service Layer - Applicant Self-Service

Business logic for the status changes an applicant makes on their own
record:

1. Verify: CREATED -> VERIFIED
2. Edit application: writes answers and "un-applies" (VERIFIED/APPLIED -> VERIFIED)
3. Submit application: validates answers, VERIFIED -> APPLIED
4. RSVP: ACCEPTED -> CONFIRMED (before the deadline), ACCEPTED/CONFIRMED -> DECLINED

Legality comes from the transition table in state_machine. Requests that are
not in the table are ignored rather than rejected, except for the explicit
business rules (applications closed, already submitted).

Every status change made here also discards the user's staged decision in
the same transaction: an admin's decision only applies to the application
they reviewed.
"""

import enum
import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AlreadySubmittedError, ApplicationsClosedError
from app.modules.admissions import repository
from app.modules.admissions.models import AdmissionSettings
from app.modules.admissions.state_machine import (
    EDITABLE_STATUSES,
    Action,
    GuardContext,
    InvalidStatusTransitionError,
    transition,
)
from app.modules.admissions.validation import validate_application
from app.modules.users.models import User, UserStatus
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


class RsvpChoice(str, enum.Enum):
    CONFIRMED = "CONFIRMED"
    DECLINED = "DECLINED"


def _guard_context(caller: User, admission_settings: AdmissionSettings | None = None, **extra):
    if admission_settings is None:
        return GuardContext(role=caller.role, **extra)
    return GuardContext(
        application_open=admission_settings.application_open,
        confirm_by=admission_settings.confirm_by,
        role=caller.role,
        now=datetime.now(UTC),
        **extra,
    )


async def _commit_status_change(
    db: AsyncSession,
    user: User,
    expected: Iterable[UserStatus],
    new_status: UserStatus,
    **fields: Any,
) -> bool:
    """
    Write a new status (and optional fields) and discard any staged decision.

    Both writes commit together. The status write is a compare-and-set on
    `expected`, so a concurrent change wins over this one.

    Returns:
        True if the status was written
    """
    changed = await UserRepository.compare_and_set_status(
        db, user.id, expected, new_status, **fields
    )
    if changed:
        await repository.delete_decision_for_user(db, user.id)
    await db.commit()
    await db.refresh(user)
    return changed


async def verify(db: AsyncSession, caller: User) -> User:
    """
    Mark a newly created user as verified.

    Args:
        db: Database session
        caller: The logged in user

    Returns:
        The (possibly unchanged) user
    """
    try:
        new_status = transition(caller.status, Action.VERIFY, _guard_context(caller))
    except InvalidStatusTransitionError:
        logger.debug(f"Ignoring verify for user {caller.id} in status {caller.status.value}")
        return caller

    if await _commit_status_change(db, caller, [UserStatus.CREATED], new_status):
        logger.info(f"User {caller.id} verified")
    return caller


async def edit_application(db: AsyncSession, caller: User, fields: dict[str, Any]) -> User:
    """
    Save application answers for the logged in user.

    Only users who have not received a decision (VERIFIED or APPLIED) may
    change their answers; saving always returns them to VERIFIED so the
    application has to be submitted again. Any staged decision is discarded
    on every accepted edit, whatever the status.

    Args:
        db: Database session
        caller: The logged in user
        fields: Partial set of application fields to write

    Returns:
        The updated user

    Raises:
        ApplicationsClosedError: If applications are closed
    """
    admission_settings = await repository.get_settings(db)
    if not admission_settings.application_open:
        logger.info(f"User {caller.id} tried to edit their application while closed")
        raise ApplicationsClosedError()

    try:
        new_status = transition(
            caller.status,
            Action.EDIT_APPLICATION,
            _guard_context(caller, admission_settings),
        )
    except InvalidStatusTransitionError:
        logger.debug(
            f"Ignoring application edit for user {caller.id} in status {caller.status.value}"
        )
    else:
        await UserRepository.compare_and_set_status(
            db, caller.id, EDITABLE_STATUSES, new_status, **fields
        )
        logger.info(f"User {caller.id} updated their application")

    removed = await repository.delete_decision_for_user(db, caller.id)
    if removed:
        logger.info(f"Discarded staged decision for user {caller.id} after application edit")

    await db.commit()
    await db.refresh(caller)
    return caller


async def submit_application(db: AsyncSession, caller: User) -> dict[str, str]:
    """
    Attempt to submit the logged in user's application.

    Args:
        db: Database session
        caller: The logged in user

    Returns:
        Mapping of question key to error message. Empty means the
        application was submitted and the user is now APPLIED.

    Raises:
        ApplicationsClosedError: If applications are closed
        AlreadySubmittedError: If the user is not VERIFIED
    """
    admission_settings = await repository.get_settings(db)
    if not admission_settings.application_open:
        raise ApplicationsClosedError()
    if caller.status != UserStatus.VERIFIED:
        raise AlreadySubmittedError()

    errors = validate_application(caller)
    if errors:
        logger.info(f"User {caller.id} submission has {len(errors)} validation error(s)")
        return errors

    new_status = transition(
        caller.status,
        Action.SUBMIT_APPLICATION,
        _guard_context(caller, admission_settings, application_errors=errors),
    )
    if await _commit_status_change(db, caller, [UserStatus.VERIFIED], new_status):
        logger.info(f"User {caller.id} submitted their application")
    else:
        logger.warning(f"User {caller.id} status changed during submission; not applied")

    return errors


async def rsvp(db: AsyncSession, caller: User, choice: RsvpChoice) -> User:
    """
    Confirm or decline the logged in user's acceptance.

    Confirming is only possible before the confirm-by deadline; declining is
    always possible once accepted, even after confirming.

    Args:
        db: Database session
        caller: The logged in user
        choice: CONFIRMED or DECLINED

    Returns:
        The (possibly unchanged) user
    """
    action = Action.RSVP_CONFIRM if choice == RsvpChoice.CONFIRMED else Action.RSVP_DECLINE
    admission_settings = await repository.get_settings(db)

    try:
        new_status = transition(
            caller.status, action, _guard_context(caller, admission_settings)
        )
    except InvalidStatusTransitionError as e:
        logger.info(f"Ignoring RSVP for user {caller.id}: {e}")
        return caller

    if await _commit_status_change(db, caller, [caller.status], new_status):
        logger.info(f"User {caller.id} RSVP: {new_status.value}")
    return caller
