"""
Admissions Models

Staged decisions and the singleton admissions settings row.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.modules.shared import BaseModel
from app.modules.users.models import User, UserStatus

SETTINGS_ID = 0


class DecisionStatus(str, enum.Enum):
    """Outcomes an admin can stage for an applicant."""

    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WAITLISTED = "WAITLISTED"

    @property
    def user_status(self) -> UserStatus:
        return UserStatus(self.value)


class Decision(BaseModel):
    """
    A decision staged by an admin but not yet released.

    At most one per user. Releasing, removing or the applicant editing their
    application deletes the row.
    """

    __tablename__ = "decisions"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    status: Mapped[DecisionStatus] = mapped_column(
        Enum(DecisionStatus, name="decision_status"), nullable=False
    )

    user: Mapped["User"] = relationship("User", lazy="selectin")


class AdmissionSettings(Base):
    """
    Admissions window and messaging settings.

    Singleton keyed by SETTINGS_ID. Upserted, never deleted.
    """

    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SETTINGS_ID)
    application_open: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    confirm_by: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    info: Mapped[str] = mapped_column(Text, nullable=False, default="")
    rolling_admissions: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    acceptance_template: Mapped[str] = mapped_column(Text, nullable=False, default="")
