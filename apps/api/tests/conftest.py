"""
Shared fixtures for API tests.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.modules.admissions.models import AdmissionSettings, Decision, DecisionStatus
from app.modules.users.models import User, UserRole, UserStatus


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.flush = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def make_user():
    """Factory for mock users with a given id, role and status."""

    def _make(
        user_id: int = 1,
        role: UserRole = UserRole.HACKER,
        status: UserStatus = UserStatus.CREATED,
        email: str | None = None,
        preferred_name: str | None = "Hacker",
    ):
        user = MagicMock(spec=User)
        user.id = user_id
        user.role = role
        user.status = status
        user.email = email or f"user{user_id}@utexas.edu"
        user.preferred_name = preferred_name
        return user

    return _make


@pytest.fixture
def admin(make_user):
    return make_user(user_id=100, role=UserRole.ADMIN, status=UserStatus.CREATED)


@pytest.fixture
def organizer(make_user):
    return make_user(user_id=200, role=UserRole.ORGANIZER, status=UserStatus.CREATED)


@pytest.fixture
def hacker(make_user):
    return make_user(user_id=1, role=UserRole.HACKER, status=UserStatus.VERIFIED)


@pytest.fixture
def make_decision():
    """Factory for staged decisions."""

    def _make(user_id: int, status: DecisionStatus = DecisionStatus.ACCEPTED, decision_id=None):
        decision = MagicMock(spec=Decision)
        decision.id = decision_id or user_id + 1000
        decision.user_id = user_id
        decision.status = status
        return decision

    return _make


@pytest.fixture
def open_settings():
    """Admissions settings with applications open and no RSVP deadline."""
    return AdmissionSettings(
        id=0,
        application_open=True,
        confirm_by=None,
        info="",
        rolling_admissions=False,
        acceptance_template="<p>Your status has changed.</p>",
    )


@pytest.fixture
def closed_settings():
    """Admissions settings with applications closed and an RSVP deadline in the past."""
    return AdmissionSettings(
        id=0,
        application_open=False,
        confirm_by=datetime(2020, 1, 1, tzinfo=UTC),
        info="",
        rolling_admissions=False,
        acceptance_template="",
    )
