"""
Tests for applicant self-service operations.

These tests verify the business logic for:
- Verifying a new account
- Saving the application (and un-applying)
- Submitting the application
- RSVP before and after the deadline
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest

from app.core.exceptions import AlreadySubmittedError, ApplicationsClosedError
from app.modules.admissions.service import (
    RsvpChoice,
    edit_application,
    rsvp,
    submit_application,
    verify,
)
from app.modules.users.models import UserStatus

SERVICE = "app.modules.admissions.service"


class TestVerify:
    """Tests for verify."""

    @pytest.mark.asyncio
    async def test_created_user_becomes_verified(self, mock_db, make_user):
        """CREATED users are moved to VERIFIED and their decision discarded."""
        user = make_user(status=UserStatus.CREATED)

        with (
            patch(f"{SERVICE}.UserRepository") as mock_users,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_users.compare_and_set_status = AsyncMock(return_value=True)
            mock_repo.delete_decision_for_user = AsyncMock(return_value=0)

            result = await verify(mock_db, user)

        assert result is user
        mock_users.compare_and_set_status.assert_awaited_once_with(
            mock_db, user.id, [UserStatus.CREATED], UserStatus.VERIFIED
        )
        mock_repo.delete_decision_for_user.assert_awaited_once_with(mock_db, user.id)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_verify_is_noop_for_other_statuses(self, mock_db, make_user):
        """Verifying again changes nothing."""
        user = make_user(status=UserStatus.APPLIED)

        with patch(f"{SERVICE}.UserRepository") as mock_users:
            mock_users.compare_and_set_status = AsyncMock()
            result = await verify(mock_db, user)

        assert result is user
        mock_users.compare_and_set_status.assert_not_called()
        mock_db.commit.assert_not_called()


class TestEditApplication:
    """Tests for edit_application."""

    @pytest.mark.asyncio
    async def test_closed_applications_rejected(self, mock_db, make_user, closed_settings):
        user = make_user(status=UserStatus.VERIFIED)

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.UserRepository") as mock_users,
        ):
            mock_repo.get_settings = AsyncMock(return_value=closed_settings)
            mock_users.compare_and_set_status = AsyncMock()

            with pytest.raises(ApplicationsClosedError):
                await edit_application(mock_db, user, {"major": "CS"})

        mock_users.compare_and_set_status.assert_not_called()
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_applied_user_is_unapplied(self, mock_db, make_user, open_settings):
        """Saving an APPLIED application writes the fields and returns to VERIFIED."""
        user = make_user(status=UserStatus.APPLIED)

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.UserRepository") as mock_users,
        ):
            mock_repo.get_settings = AsyncMock(return_value=open_settings)
            mock_repo.delete_decision_for_user = AsyncMock(return_value=1)
            mock_users.compare_and_set_status = AsyncMock(return_value=True)

            await edit_application(mock_db, user, {"major": "CS"})

        args, kwargs = mock_users.compare_and_set_status.call_args
        assert args[1] == user.id
        assert set(args[2]) == {UserStatus.VERIFIED, UserStatus.APPLIED}
        assert args[3] == UserStatus.VERIFIED
        assert kwargs == {"major": "CS"}
        mock_repo.delete_decision_for_user.assert_awaited_once_with(mock_db, user.id)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_decided_user_keeps_status_but_loses_decision(
        self, mock_db, make_user, open_settings
    ):
        """Users past APPLIED cannot edit, but any staged decision is still discarded."""
        user = make_user(status=UserStatus.WAITLISTED)

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.UserRepository") as mock_users,
        ):
            mock_repo.get_settings = AsyncMock(return_value=open_settings)
            mock_repo.delete_decision_for_user = AsyncMock(return_value=1)
            mock_users.compare_and_set_status = AsyncMock()

            await edit_application(mock_db, user, {"major": "CS"})

        mock_users.compare_and_set_status.assert_not_called()
        mock_repo.delete_decision_for_user.assert_awaited_once_with(mock_db, user.id)
        mock_db.commit.assert_awaited_once()


class TestSubmitApplication:
    """Tests for submit_application."""

    @pytest.mark.asyncio
    async def test_closed_applications_rejected(self, mock_db, make_user, closed_settings):
        user = make_user(status=UserStatus.VERIFIED)

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_settings = AsyncMock(return_value=closed_settings)

            with pytest.raises(ApplicationsClosedError):
                await submit_application(mock_db, user)

    @pytest.mark.asyncio
    async def test_already_submitted(self, mock_db, make_user, open_settings):
        user = make_user(status=UserStatus.APPLIED)

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_settings = AsyncMock(return_value=open_settings)

            with pytest.raises(AlreadySubmittedError):
                await submit_application(mock_db, user)

    @pytest.mark.asyncio
    async def test_validation_errors_returned_without_writing(
        self, mock_db, make_user, open_settings
    ):
        user = make_user(status=UserStatus.VERIFIED)
        errors = {"major": "Please provide your major."}

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.UserRepository") as mock_users,
            patch(f"{SERVICE}.validate_application", return_value=errors),
        ):
            mock_repo.get_settings = AsyncMock(return_value=open_settings)
            mock_users.compare_and_set_status = AsyncMock()

            result = await submit_application(mock_db, user)

        assert result == errors
        mock_users.compare_and_set_status.assert_not_called()
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_valid_application_is_applied(self, mock_db, make_user, open_settings):
        user = make_user(status=UserStatus.VERIFIED)

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.UserRepository") as mock_users,
            patch(f"{SERVICE}.validate_application", return_value={}),
        ):
            mock_repo.get_settings = AsyncMock(return_value=open_settings)
            mock_repo.delete_decision_for_user = AsyncMock(return_value=0)
            mock_users.compare_and_set_status = AsyncMock(return_value=True)

            result = await submit_application(mock_db, user)

        assert result == {}
        mock_users.compare_and_set_status.assert_awaited_once_with(
            mock_db, user.id, [UserStatus.VERIFIED], UserStatus.APPLIED
        )
        mock_db.commit.assert_awaited_once()


class TestRsvp:
    """Tests for rsvp."""

    @pytest.mark.asyncio
    async def test_confirm_before_deadline(self, mock_db, make_user, open_settings):
        user = make_user(status=UserStatus.ACCEPTED)
        open_settings.confirm_by = datetime.now(UTC) + timedelta(days=1)

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.UserRepository") as mock_users,
        ):
            mock_repo.get_settings = AsyncMock(return_value=open_settings)
            mock_repo.delete_decision_for_user = AsyncMock(return_value=0)
            mock_users.compare_and_set_status = AsyncMock(return_value=True)

            await rsvp(mock_db, user, RsvpChoice.CONFIRMED)

        mock_users.compare_and_set_status.assert_awaited_once_with(
            mock_db, user.id, [UserStatus.ACCEPTED], UserStatus.CONFIRMED
        )

    @pytest.mark.asyncio
    async def test_confirm_after_deadline_is_noop(self, mock_db, make_user, closed_settings):
        user = make_user(status=UserStatus.ACCEPTED)

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.UserRepository") as mock_users,
        ):
            mock_repo.get_settings = AsyncMock(return_value=closed_settings)
            mock_users.compare_and_set_status = AsyncMock()

            result = await rsvp(mock_db, user, RsvpChoice.CONFIRMED)

        assert result.status == UserStatus.ACCEPTED
        mock_users.compare_and_set_status.assert_not_called()

    @pytest.mark.asyncio
    async def test_decline_after_deadline(self, mock_db, make_user, closed_settings):
        user = make_user(status=UserStatus.CONFIRMED)

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.UserRepository") as mock_users,
        ):
            mock_repo.get_settings = AsyncMock(return_value=closed_settings)
            mock_repo.delete_decision_for_user = AsyncMock(return_value=0)
            mock_users.compare_and_set_status = AsyncMock(return_value=True)

            await rsvp(mock_db, user, RsvpChoice.DECLINED)

        mock_users.compare_and_set_status.assert_awaited_once_with(
            mock_db, user.id, [UserStatus.CONFIRMED], UserStatus.DECLINED
        )

    @pytest.mark.asyncio
    async def test_rsvp_without_acceptance_is_noop(self, mock_db, make_user, open_settings):
        user = make_user(status=UserStatus.APPLIED)

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.UserRepository") as mock_users,
        ):
            mock_repo.get_settings = AsyncMock(return_value=open_settings)
            mock_users.compare_and_set_status = AsyncMock()

            await rsvp(mock_db, user, RsvpChoice.DECLINED)

        mock_users.compare_and_set_status.assert_not_called()
