"""
Admissions Repository

Database operations for staged decisions, decision release and the
admissions settings row.

Design Principles:
- All queries are parameterized (no SQL injection)
- Single responsibility - only database operations, no business logic
- Writes are not committed here; services own the transaction boundary
- Upserts are single statements so uniqueness holds under concurrency
"""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.admissions.models import (
    SETTINGS_ID,
    AdmissionSettings,
    Decision,
    DecisionStatus,
)
from app.modules.admissions.state_machine import DECIDABLE_STATUSES, RELEASABLE_STATUSES
from app.modules.users.models import User

# ============================================
# Settings
# ============================================


async def get_settings(db: AsyncSession) -> AdmissionSettings:
    """
    Get the admissions settings, creating the default row on first use.

    Returns:
        The singleton AdmissionSettings row
    """
    settings_row = await db.get(AdmissionSettings, SETTINGS_ID)
    if settings_row is not None:
        return settings_row

    await db.execute(
        insert(AdmissionSettings).values(id=SETTINGS_ID).on_conflict_do_nothing(
            index_elements=[AdmissionSettings.id]
        )
    )
    await db.flush()
    return await db.get(AdmissionSettings, SETTINGS_ID, populate_existing=True)


async def upsert_settings(db: AsyncSession, values: dict[str, Any]) -> AdmissionSettings:
    """Insert or update the singleton settings row with the given values."""
    stmt = insert(AdmissionSettings).values(id=SETTINGS_ID, **values)
    if values:
        stmt = stmt.on_conflict_do_update(index_elements=[AdmissionSettings.id], set_=values)
    else:
        stmt = stmt.on_conflict_do_nothing(index_elements=[AdmissionSettings.id])
    await db.execute(stmt)
    await db.flush()
    return await db.get(AdmissionSettings, SETTINGS_ID, populate_existing=True)


# ============================================
# Staged Decisions
# ============================================


async def get_decision_for_user(db: AsyncSession, user_id: int) -> Decision | None:
    """Get the staged decision for a user."""
    result = await db.execute(select(Decision).where(Decision.user_id == user_id))
    return result.scalar_one_or_none()


async def get_decisions_for_users(db: AsyncSession, user_ids: Iterable[int]) -> list[Decision]:
    """Get staged decisions for the given users (missing users are omitted)."""
    ids = set(user_ids)
    if not ids:
        return []
    result = await db.execute(select(Decision).where(Decision.user_id.in_(ids)))
    return list(result.scalars().all())


async def get_all_decisions(db: AsyncSession) -> list[Decision]:
    """Get every staged decision."""
    result = await db.execute(select(Decision).order_by(Decision.id.asc()))
    return list(result.scalars().all())


async def upsert_decision(db: AsyncSession, user_id: int, status: DecisionStatus) -> Decision:
    """
    Stage a decision for a user, replacing any existing one.

    Keyed by the unique user_id so a user never has two staged decisions.
    """
    stmt = (
        insert(Decision)
        .values(user_id=user_id, status=status)
        .on_conflict_do_update(index_elements=[Decision.user_id], set_={"status": status})
        .returning(Decision)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one()


async def delete_decisions_for_users(db: AsyncSession, user_ids: Iterable[int]) -> int:
    """
    Delete staged decisions for the given users.

    Returns:
        Number of decisions deleted
    """
    ids = set(user_ids)
    if not ids:
        return 0
    result = await db.execute(delete(Decision).where(Decision.user_id.in_(ids)))
    return result.rowcount


async def delete_decision_for_user(db: AsyncSession, user_id: int) -> int:
    """Delete the staged decision for one user, if any."""
    result = await db.execute(delete(Decision).where(Decision.user_id == user_id))
    return result.rowcount


async def apply_decision(db: AsyncSession, decision_id: int, user_id: int) -> User | None:
    """
    Apply a staged decision to its user and delete it.

    The decision row is deleted first and its status taken from the deleted
    row, so a decision re-staged or removed since it was read is honored.
    The user's status is then only written while they are still APPLIED or
    WAITLISTED. Both statements run on the caller's transaction.

    Args:
        db: Database session (inside a transaction)
        decision_id: ID of the staged decision
        user_id: The user the decision was staged for

    Returns:
        The updated user, or None if the decision was already gone or the
        user's status had moved
    """
    result = await db.execute(
        delete(Decision).where(Decision.id == decision_id).returning(Decision.status)
    )
    decision_status = result.scalar_one_or_none()
    if decision_status is None:
        return None

    result = await db.execute(
        update(User)
        .where(User.id == user_id, User.status.in_(list(RELEASABLE_STATUSES)))
        .values(status=decision_status.user_status)
        .returning(User)
        .execution_options(synchronize_session=False, populate_existing=True)
    )
    return result.scalar_one_or_none()


# ============================================
# Review Queries
# ============================================


async def get_users_with_decisions(db: AsyncSession) -> list[tuple[User, Decision | None]]:
    """All users ordered by ID, each with their staged decision if any."""
    result = await db.execute(
        select(User, Decision)
        .outerjoin(Decision, Decision.user_id == User.id)
        .order_by(User.id.asc())
    )
    return [(row[0], row[1]) for row in result.all()]


async def get_next_undecided_applicant(db: AsyncSession) -> User | None:
    """One APPLIED or WAITLISTED user with no staged decision, oldest first."""
    result = await db.execute(
        select(User)
        .outerjoin(Decision, Decision.user_id == User.id)
        .where(User.status.in_(list(DECIDABLE_STATUSES)), Decision.id.is_(None))
        .order_by(User.id.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()
