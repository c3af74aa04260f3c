"""
User Models

Database models for hackers, organizers and admins, their application
form answers, and per-action scan counters.
"""

from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import ENUM, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.modules.shared import BaseModel


class UserRole(str, Enum):
    """User roles in the system."""

    HACKER = "HACKER"
    ORGANIZER = "ORGANIZER"
    ADMIN = "ADMIN"


class UserStatus(str, Enum):
    """Admissions lifecycle status of a user."""

    CREATED = "CREATED"
    VERIFIED = "VERIFIED"
    APPLIED = "APPLIED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WAITLISTED = "WAITLISTED"
    CONFIRMED = "CONFIRMED"
    DECLINED = "DECLINED"


# Application form fields a hacker may edit about themselves
APPLICATION_FIELDS = (
    "full_name",
    "preferred_name",
    "gender",
    "race",
    "pronouns",
    "photo_release_agreed",
    "liability_waiver_agreed",
    "code_of_conduct_agreed",
    "major",
    "classification",
    "graduation",
    "first_generation",
    "international",
    "hackathons_attended",
    "workshops",
    "referrer",
    "excited_about",
    "resume",
    "github",
    "linkedin",
    "website",
    "lunch",
    "dietary_restrictions",
    "allergies",
    "accommodations",
    "other",
)


class User(BaseModel):
    """
    A registered person.

    `email` is the registration key and `magic_link` (a hash, never the raw
    link) is the self-service identity key. Both are unique.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    magic_link: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)

    role: Mapped[UserRole] = mapped_column(
        ENUM(UserRole, name="user_role", create_type=True),
        nullable=False,
        default=UserRole.HACKER,
    )
    status: Mapped[UserStatus] = mapped_column(
        ENUM(UserStatus, name="user_status", create_type=True),
        nullable=False,
        default=UserStatus.CREATED,
    )

    # Personal information
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    preferred_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(100), nullable=True)
    race: Mapped[list | None] = mapped_column(JSON, nullable=True)
    pronouns: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Agreements
    photo_release_agreed: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    liability_waiver_agreed: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    code_of_conduct_agreed: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Education
    major: Mapped[str | None] = mapped_column(String(200), nullable=True)
    classification: Mapped[str | None] = mapped_column(String(100), nullable=True)
    graduation: Mapped[str | None] = mapped_column(String(100), nullable=True)
    first_generation: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    international: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Experience
    hackathons_attended: Mapped[int | None] = mapped_column(Integer, nullable=True)
    workshops: Mapped[list | None] = mapped_column(JSON, nullable=True)
    referrer: Mapped[str | None] = mapped_column(String(200), nullable=True)
    excited_about: Mapped[str | None] = mapped_column(Text, nullable=True)
    resume: Mapped[str | None] = mapped_column(String(500), nullable=True)
    github: Mapped[str | None] = mapped_column(String(500), nullable=True)
    linkedin: Mapped[str | None] = mapped_column(String(500), nullable=True)
    website: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Logistics
    lunch: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    dietary_restrictions: Mapped[list | None] = mapped_column(JSON, nullable=True)
    allergies: Mapped[str | None] = mapped_column(Text, nullable=True)
    accommodations: Mapped[str | None] = mapped_column(Text, nullable=True)
    other: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    scans: Mapped[list["ScanCount"]] = relationship(
        "ScanCount",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (Index("ix_users_role_status", "role", "status"),)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, status={self.status.value})>"

    @property
    def scan_count(self) -> dict[str, int]:
        """Scan counts keyed by action name."""
        return {scan.action: scan.count for scan in self.scans}


class ScanCount(Base):
    """
    Number of times a user has been scanned for an action.

    One row per (user, action); increments are single-statement upserts.
    """

    __tablename__ = "scan_counts"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    action: Mapped[str] = mapped_column(String(100), primary_key=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    user: Mapped["User"] = relationship("User", back_populates="scans")

    __table_args__ = (
        CheckConstraint("count >= 0", name="ck_scan_counts_non_negative"),
        Index("ix_scan_counts_action", "action"),
    )
