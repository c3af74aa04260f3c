"""
User Repository

Database operations for users and their scan counters.

Write methods execute and flush but do not commit; the calling service owns
the transaction so that multi-statement changes commit together.
"""

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.users.models import ScanCount, User, UserRole, UserStatus

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> User | None:
        """Get a user by ID."""
        return await db.get(User, user_id)

    @staticmethod
    async def get_by_ids(db: AsyncSession, user_ids: Iterable[int]) -> dict[int, User]:
        """
        Get users by ID.

        Returns:
            Mapping of user ID to User for the IDs that exist
        """
        ids = set(user_ids)
        if not ids:
            return {}
        result = await db.execute(select(User).where(User.id.in_(ids)))
        return {user.id: user for user in result.scalars().all()}

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        """Get a user by (normalized) email address."""
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_magic_link(db: AsyncSession, magic_link_hash: str) -> User | None:
        """
        Get a user by the hash of their magic link.

        Args:
            db: Database session
            magic_link_hash: SHA-256 hash of the link, never the raw link

        Returns:
            User instance or None if not found
        """
        result = await db.execute(select(User).where(User.magic_link == magic_link_hash))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_all(db: AsyncSession) -> list[User]:
        """All users ordered by ID."""
        result = await db.execute(select(User).order_by(User.id.asc()))
        return list(result.scalars().all())

    @staticmethod
    async def upsert_magic_link(db: AsyncSession, email: str, magic_link_hash: str) -> User:
        """
        Create a user for an email, or rotate the magic link if one exists.

        A single INSERT .. ON CONFLICT statement, so concurrent registrations
        of the same email never produce two rows.

        Args:
            db: Database session
            email: Normalized email address
            magic_link_hash: Hash of the newly generated link

        Returns:
            The created or updated User
        """
        stmt = (
            insert(User)
            .values(
                email=email,
                magic_link=magic_link_hash,
                role=UserRole.HACKER,
                status=UserStatus.CREATED,
            )
            .on_conflict_do_update(
                index_elements=[User.email],
                set_={"magic_link": magic_link_hash, "updated_at": func.now()},
            )
            .returning(User)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return result.scalar_one()

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        email: str,
        magic_link_hash: str,
        full_name: str | None = None,
        role: UserRole = UserRole.HACKER,
    ) -> User:
        """
        Create a new user record.

        Raises:
            IntegrityError: If the email is already registered
        """
        user = User(
            email=email,
            magic_link=magic_link_hash,
            full_name=full_name,
            role=role,
            status=UserStatus.CREATED,
        )

        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info(f"Created user: {user.id} ({user.role.value})")
        return user

    @staticmethod
    async def compare_and_set_status(
        db: AsyncSession,
        user_id: int,
        expected: Iterable[UserStatus],
        new_status: UserStatus,
        **fields: Any,
    ) -> bool:
        """
        Set a user's status only if it is still one of the expected values.

        Guards against a concurrent request having already moved the status
        between the caller's read and this write.

        Args:
            db: Database session
            user_id: User ID
            expected: Statuses the user must currently be in
            new_status: Status to write
            **fields: Additional columns to write in the same statement

        Returns:
            True if the row was updated
        """
        result = await db.execute(
            update(User)
            .where(User.id == user_id, User.status.in_(list(expected)))
            .values(status=new_status, **fields)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount > 0

    # ============================================
    # Scan Counters
    # ============================================

    @staticmethod
    async def increment_scan(db: AsyncSession, user_id: int, action: str) -> int:
        """
        Increment a user's scan counter for an action by one.

        Atomic read-modify-write at the database: concurrent scans of the same
        user and action each land.

        Returns:
            The counter value after the increment
        """
        stmt = (
            insert(ScanCount)
            .values(user_id=user_id, action=action, count=1)
            .on_conflict_do_update(
                index_elements=[ScanCount.user_id, ScanCount.action],
                set_={"count": ScanCount.__table__.c.count + 1},
            )
            .returning(ScanCount.count)
        )
        result = await db.execute(stmt)
        return result.scalar_one()

    @staticmethod
    async def count_scanned(db: AsyncSession, action: str) -> int:
        """Number of hackers scanned at least once for an action."""
        result = await db.execute(
            select(func.count(func.distinct(ScanCount.user_id)))
            .join(User, User.id == ScanCount.user_id)
            .where(
                User.role == UserRole.HACKER,
                ScanCount.action == action,
                ScanCount.count > 0,
            )
        )
        return result.scalar() or 0
