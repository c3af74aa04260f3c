"""
Admissions Service Layer - Admin Operations

Business logic for organizers reviewing applicants:

1. Decision staging: stage, overwrite and remove pending decisions without
   touching the applicant's authoritative status
2. Walk-in confirmation: force CONFIRMED without a release or email
3. Review queries: all users, the next undecided applicant, staged decisions
4. Admissions settings

All operations require the ADMIN role. Role and existence checks run before
any write, so a rejected bulk request never leaves partial changes. Users
whose status no longer allows the operation are skipped silently, which
keeps bulk requests built from a stale list harmless.
"""

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import ensure_role
from app.core.exceptions import UserNotFoundError
from app.modules.admissions import repository
from app.modules.admissions.models import AdmissionSettings, Decision, DecisionStatus
from app.modules.admissions.state_machine import (
    Action,
    GuardContext,
    InvalidStatusTransitionError,
    transition,
)
from app.modules.users.models import User, UserRole
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


async def _get_users_or_raise(db: AsyncSession, user_ids: Iterable[int]) -> list[User]:
    """
    Load users for a bulk operation, preserving request order.

    Raises:
        UserNotFoundError: If any ID does not reference a user
    """
    ids = list(dict.fromkeys(user_ids))
    users = await UserRepository.get_by_ids(db, ids)
    for user_id in ids:
        if user_id not in users:
            logger.warning(f"Bulk operation references missing user {user_id}")
            raise UserNotFoundError(user_id)
    return [users[user_id] for user_id in ids]


# ============================================
# Decision Staging
# ============================================


async def stage_decisions(
    db: AsyncSession,
    caller: User,
    user_ids: Iterable[int],
    decision: DecisionStatus,
) -> list[Decision]:
    """
    Stage a decision for each of the given applicants.

    Staging never changes a user's status; it only records the decision to
    apply on release. Staging again for the same user overwrites.

    Args:
        db: Database session
        caller: The logged in admin
        user_ids: Applicants to decide
        decision: ACCEPTED, REJECTED or WAITLISTED

    Returns:
        The staged decisions (skipped users are not included)

    Raises:
        AuthorizationError: If the caller is not an admin
        UserNotFoundError: If any ID does not exist
    """
    ensure_role(caller, UserRole.ADMIN)
    users = await _get_users_or_raise(db, user_ids)
    ctx = GuardContext(role=caller.role)

    staged: list[Decision] = []
    for user in users:
        try:
            transition(user.status, Action.STAGE_DECISION, ctx)
        except InvalidStatusTransitionError:
            logger.info(f"Skipping decision for user {user.id} in status {user.status.value}")
            continue
        staged.append(await repository.upsert_decision(db, user.id, decision))

    await db.commit()
    logger.info(f"Admin {caller.id} staged {decision.value} for {len(staged)} user(s)")
    return staged


async def remove_decisions(db: AsyncSession, caller: User, user_ids: Iterable[int]) -> int:
    """
    Remove staged decisions for the given users.

    Returns:
        Number of decisions removed
    """
    ensure_role(caller, UserRole.ADMIN)
    removed = await repository.delete_decisions_for_users(db, user_ids)
    await db.commit()
    logger.info(f"Admin {caller.id} removed {removed} staged decision(s)")
    return removed


async def get_decisions(db: AsyncSession, caller: User) -> dict[DecisionStatus, list[Decision]]:
    """
    All staged decisions grouped by outcome.

    Returns:
        Mapping of each DecisionStatus to its staged decisions
    """
    ensure_role(caller, UserRole.ADMIN)
    grouped: dict[DecisionStatus, list[Decision]] = {status: [] for status in DecisionStatus}
    for decision in await repository.get_all_decisions(db):
        grouped[decision.status].append(decision)
    return grouped


# ============================================
# Walk-ins
# ============================================


async def confirm_walk_ins(db: AsyncSession, caller: User, user_ids: Iterable[int]) -> list[User]:
    """
    Confirm attendance for walk-in users.

    Any user who has at least applied is moved straight to CONFIRMED and
    their staged decision is discarded. No notification is sent.

    Args:
        db: Database session
        caller: The logged in admin
        user_ids: Users to confirm

    Returns:
        Users that were confirmed

    Raises:
        AuthorizationError: If the caller is not an admin
        UserNotFoundError: If any ID does not exist
    """
    ensure_role(caller, UserRole.ADMIN)
    users = await _get_users_or_raise(db, user_ids)
    ctx = GuardContext(role=caller.role)

    confirmed: list[User] = []
    for user in users:
        try:
            new_status = transition(user.status, Action.WALK_IN_CONFIRM, ctx)
        except InvalidStatusTransitionError:
            logger.info(f"Skipping walk-in for user {user.id} in status {user.status.value}")
            continue

        await repository.delete_decision_for_user(db, user.id)
        if await UserRepository.compare_and_set_status(db, user.id, [user.status], new_status):
            confirmed.append(user)

    await db.commit()
    for user in confirmed:
        await db.refresh(user)

    logger.info(f"Admin {caller.id} confirmed {len(confirmed)} walk-in(s)")
    return confirmed


# ============================================
# Review Queries
# ============================================


async def get_users(db: AsyncSession, caller: User) -> list[tuple[User, Decision | None]]:
    """All users with their staged decision, ordered by ID."""
    ensure_role(caller, UserRole.ADMIN)
    return await repository.get_users_with_decisions(db)


async def get_next_applicant(db: AsyncSession, caller: User) -> User | None:
    """An applicant still waiting for a decision to be staged, if any."""
    ensure_role(caller, UserRole.ADMIN)
    return await repository.get_next_undecided_applicant(db)


# ============================================
# Settings
# ============================================


async def get_public_settings(db: AsyncSession) -> AdmissionSettings:
    """Settings shown to everyone (the router exposes only the public fields)."""
    return await repository.get_settings(db)


async def get_all_settings(db: AsyncSession, caller: User) -> AdmissionSettings:
    ensure_role(caller, UserRole.ADMIN)
    return await repository.get_settings(db)


async def update_settings(
    db: AsyncSession,
    caller: User,
    values: dict[str, Any],
) -> AdmissionSettings:
    """
    Update some or all admissions settings.

    Args:
        db: Database session
        caller: The logged in admin
        values: Settings columns to write

    Returns:
        The updated settings
    """
    ensure_role(caller, UserRole.ADMIN)
    updated = await repository.upsert_settings(db, values)
    await db.commit()
    logger.info(f"Admin {caller.id} updated settings: {sorted(values)}")
    return updated
