"""
Decision Release Pipeline

Turns staged decisions into authoritative statuses and notifies applicants.

Each staged decision is an independent unit of work:
1. In one transaction on its own session, delete the decision row and set
   the user's status to the status on that row (only while they are still
   APPLIED or WAITLISTED). A decision removed since it was read releases
   nothing.
2. After that commit, and only if the status changed, email the applicant.

Units for different users run concurrently and share nothing, so one
failure never blocks the rest. Within a unit the commit always happens
before the email: an applicant may end up released but not notified, never
notified without a durable release. Delivery failures are reported in the
summary and do not roll anything back. There are no retries here.
"""

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.auth import ensure_role
from app.core.config import settings
from app.core.database import async_session_maker
from app.core.email import send_status_update
from app.core.exceptions import DecisionNotFoundError
from app.modules.admissions import repository
from app.modules.admissions.models import Decision
from app.modules.users.models import User, UserRole

logger = logging.getLogger(__name__)

# (recipient email, preferred name, message template) -> delivered?
Notifier = Callable[[str, str | None, str], Awaitable[bool]]


class ReleaseResult(str, enum.Enum):
    RELEASED = "released"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class DeliveryFailure:
    """A released applicant whose notification could not be sent."""

    user_id: int
    email: str


@dataclass(frozen=True)
class ReleaseOutcome:
    """Result of releasing one staged decision."""

    user_id: int
    result: ReleaseResult
    email: str | None = None
    delivered: bool = False


@dataclass
class ReleaseSummary:
    """Aggregated results of a release request."""

    released: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    delivery_failures: list[DeliveryFailure] = field(default_factory=list)

    def add(self, outcome: ReleaseOutcome) -> None:
        if outcome.result == ReleaseResult.RELEASED:
            self.released.append(outcome.user_id)
            if not outcome.delivered:
                self.delivery_failures.append(
                    DeliveryFailure(user_id=outcome.user_id, email=outcome.email or "")
                )
        elif outcome.result == ReleaseResult.SKIPPED:
            self.skipped.append(outcome.user_id)
        else:
            self.failed.append(outcome.user_id)


class ReleasePipeline:
    """
    Releases staged decisions.

    Args:
        session_maker: Factory for the per-decision sessions
        notifier: Sends the status update email, returns delivery success
        concurrency: Maximum decisions processed at once
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession] = async_session_maker,
        notifier: Notifier = send_status_update,
        concurrency: int | None = None,
    ):
        self._session_maker = session_maker
        self._notifier = notifier
        self._concurrency = concurrency or settings.release_concurrency

    async def release_all(self, db: AsyncSession, caller: User) -> ReleaseSummary:
        """
        Release every staged decision.

        Raises:
            AuthorizationError: If the caller is not an admin
        """
        ensure_role(caller, UserRole.ADMIN)
        decisions = await repository.get_all_decisions(db)
        logger.info(f"Admin {caller.id} releasing all {len(decisions)} staged decision(s)")
        return await self._release(db, decisions)

    async def release_some(
        self,
        db: AsyncSession,
        caller: User,
        user_ids: Iterable[int],
    ) -> ReleaseSummary:
        """
        Release the staged decisions of the given users.

        Every user must have a staged decision; this is checked before any
        decision is released.

        Raises:
            AuthorizationError: If the caller is not an admin
            DecisionNotFoundError: If a user has no staged decision
        """
        ensure_role(caller, UserRole.ADMIN)

        ids = list(dict.fromkeys(user_ids))
        by_user = {d.user_id: d for d in await repository.get_decisions_for_users(db, ids)}
        for user_id in ids:
            if user_id not in by_user:
                logger.warning(f"Release requested for user {user_id} without a staged decision")
                raise DecisionNotFoundError(user_id)

        logger.info(f"Admin {caller.id} releasing {len(ids)} staged decision(s)")
        return await self._release(db, [by_user[user_id] for user_id in ids])

    async def _release(self, db: AsyncSession, decisions: list[Decision]) -> ReleaseSummary:
        summary = ReleaseSummary()
        if not decisions:
            return summary

        template = (await repository.get_settings(db)).acceptance_template
        semaphore = asyncio.Semaphore(self._concurrency)

        async def run(decision: Decision) -> ReleaseOutcome:
            async with semaphore:
                return await self._release_one(decision, template)

        for outcome in await asyncio.gather(*(run(d) for d in decisions)):
            summary.add(outcome)

        logger.info(
            f"Release finished: released={len(summary.released)}, "
            f"skipped={len(summary.skipped)}, failed={len(summary.failed)}, "
            f"delivery_failures={len(summary.delivery_failures)}"
        )
        return summary

    async def _release_one(self, decision: Decision, template: str) -> ReleaseOutcome:
        """Commit one decision, then notify its applicant."""
        user_id = decision.user_id

        try:
            async with self._session_maker() as session, session.begin():
                user = await repository.apply_decision(session, decision.id, user_id)
        except Exception as e:
            logger.error(f"Failed to release decision for user {user_id}: {e}", exc_info=True)
            return ReleaseOutcome(user_id=user_id, result=ReleaseResult.FAILED)

        if user is None:
            logger.info(f"Nothing released for user {user_id}: decision removed or status moved")
            return ReleaseOutcome(user_id=user_id, result=ReleaseResult.SKIPPED)

        logger.info(f"Released {user.status.value} for user {user_id}")

        try:
            delivered = await self._notifier(user.email, user.preferred_name, template)
        except Exception as e:
            logger.error(f"Failed to send status update to user {user_id}: {e}", exc_info=True)
            delivered = False

        if not delivered:
            logger.error(f"Status update for user {user_id} was not delivered")

        return ReleaseOutcome(
            user_id=user_id,
            result=ReleaseResult.RELEASED,
            email=user.email,
            delivered=delivered,
        )


def get_release_pipeline() -> ReleasePipeline:
    """FastAPI dependency providing the default pipeline."""
    return ReleasePipeline()
