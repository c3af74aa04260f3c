"""
Registration Service

Magic link registration and admin-created accounts.

Security:
- Magic links are generated with `secrets` and only their SHA-256 hash is
  stored; registering again rotates the link and invalidates the old one
- Raw links are never logged
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import ensure_role
from app.core.config import settings
from app.core.email import send_login_link
from app.core.exceptions import InvalidEmailDomainError, UserAlreadyExistsError
from app.core.security import generate_magic_link, hash_magic_link
from app.modules.users.models import User, UserRole
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

REGISTERED_MESSAGE = "Please check your inbox for your login link."
EMAIL_FAILED_MESSAGE = "There was an error sending the email. Please try again later."


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _check_domain(email: str) -> None:
    """
    Reject emails outside the allowed domain, when one is configured.

    Subdomains of the allowed domain are accepted.
    """
    domain = settings.allowed_email_domain
    if not domain:
        return
    email_domain = email.rsplit("@", 1)[-1]
    if email_domain != domain and not email_domain.endswith(f".{domain}"):
        logger.info(f"Registration rejected for domain '{email_domain}'")
        raise InvalidEmailDomainError(domain)


async def register(db: AsyncSession, email: str) -> str:
    """
    Register an email, or issue a new login link for an existing one.

    Args:
        db: Database session
        email: Email address as entered

    Returns:
        Message to show the user

    Raises:
        InvalidEmailDomainError: If the email is outside the allowed domain
    """
    email = normalize_email(email)
    _check_domain(email)

    magic_link = generate_magic_link()
    user = await UserRepository.upsert_magic_link(db, email, hash_magic_link(magic_link))
    await db.commit()
    logger.info(f"Issued login link for user {user.id}")

    if not await send_login_link(email, magic_link):
        logger.error(f"Failed to deliver login link to user {user.id}")
        return EMAIL_FAILED_MESSAGE
    return REGISTERED_MESSAGE


async def create_user(
    db: AsyncSession,
    caller: User,
    *,
    full_name: str,
    email: str,
    role: UserRole,
) -> User:
    """
    Create an account on someone's behalf and email them a login link.

    Args:
        db: Database session
        caller: The logged in admin
        full_name: Name of the new user
        email: Email of the new user
        role: Role of the new user

    Returns:
        The created user

    Raises:
        AuthorizationError: If the caller is not an admin
        UserAlreadyExistsError: If the email is already registered
    """
    ensure_role(caller, UserRole.ADMIN)
    email = normalize_email(email)

    magic_link = generate_magic_link()
    try:
        user = await UserRepository.create(
            db,
            email=email,
            magic_link_hash=hash_magic_link(magic_link),
            full_name=full_name,
            role=role,
        )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.info(f"Admin {caller.id} tried to create an existing user")
        raise UserAlreadyExistsError() from e

    logger.info(f"Admin {caller.id} created user {user.id} ({role.value})")

    if not await send_login_link(email, magic_link):
        logger.error(f"Failed to deliver login link to new user {user.id}")
    return user
