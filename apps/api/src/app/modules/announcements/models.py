"""Announcement models."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.modules.shared import BaseModel


class Announcement(BaseModel):
    """A message shown to every hacker on the dashboard."""

    __tablename__ = "announcements"

    body: Mapped[str] = mapped_column(Text, nullable=False)
    published: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    __table_args__ = (CheckConstraint("length(body) > 0", name="ck_announcements_body_not_empty"),)
