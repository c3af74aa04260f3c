"""
Tests for announcements.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import ValidationError

from app.core.exceptions import AnnouncementNotFoundError, AuthorizationError
from app.modules.announcements.schemas import AnnouncementCreate
from app.modules.announcements.service import announce, delete_announcement

ANNOUNCEMENTS = "app.modules.announcements.service"


class TestAnnounce:
    @pytest.mark.asyncio
    async def test_admin_publishes(self, mock_db, admin):
        announcement = MagicMock(id=1, body="Dinner is served")

        with patch(f"{ANNOUNCEMENTS}.repository") as mock_repo:
            mock_repo.create_announcement = AsyncMock(return_value=announcement)

            result = await announce(mock_db, admin, "Dinner is served")

        assert result is announcement
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_organizer_cannot_publish(self, mock_db, organizer):
        with pytest.raises(AuthorizationError):
            await announce(mock_db, organizer, "Hello")

    def test_empty_body_rejected(self):
        with pytest.raises(ValidationError):
            AnnouncementCreate(body="")


class TestDeleteAnnouncement:
    @pytest.mark.asyncio
    async def test_deletes(self, mock_db, admin):
        with patch(f"{ANNOUNCEMENTS}.repository") as mock_repo:
            mock_repo.delete_announcement = AsyncMock(return_value=True)

            await delete_announcement(mock_db, admin, 3)

        mock_repo.delete_announcement.assert_awaited_once_with(mock_db, 3)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing(self, mock_db, admin):
        with patch(f"{ANNOUNCEMENTS}.repository") as mock_repo:
            mock_repo.delete_announcement = AsyncMock(return_value=False)

            with pytest.raises(AnnouncementNotFoundError):
                await delete_announcement(mock_db, admin, 3)

        mock_db.commit.assert_not_called()
