"""
Admissions Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# Re-use enums from models
from app.modules.admissions.models import DecisionStatus
from app.modules.admissions.service import RsvpChoice
from app.modules.users.models import UserRole, UserStatus


# ============================================
# Users
# ============================================


class ApplicationFields(BaseModel):
    """Application form answers. Every field is optional on save."""

    full_name: str | None = Field(None, max_length=200)
    preferred_name: str | None = Field(None, max_length=200)
    gender: str | None = Field(None, max_length=100)
    race: list[str] | None = None
    pronouns: str | None = Field(None, max_length=100)

    photo_release_agreed: bool | None = None
    liability_waiver_agreed: bool | None = None
    code_of_conduct_agreed: bool | None = None

    major: str | None = Field(None, max_length=200)
    classification: str | None = Field(None, max_length=100)
    graduation: str | None = Field(None, max_length=100)
    first_generation: bool | None = None
    international: bool | None = None

    hackathons_attended: int | None = Field(None, ge=0)
    workshops: list[str] | None = None
    referrer: str | None = Field(None, max_length=200)
    excited_about: str | None = None
    resume: str | None = Field(None, max_length=500)
    github: str | None = Field(None, max_length=500)
    linkedin: str | None = Field(None, max_length=500)
    website: str | None = Field(None, max_length=500)

    lunch: bool | None = None
    dietary_restrictions: list[str] | None = None
    allergies: str | None = None
    accommodations: str | None = None
    other: str | None = None


class ApplicationUpdate(ApplicationFields):
    """Request body for PATCH /applications/me. Only sent fields are written."""


class UserResponse(ApplicationFields):
    """A user with their application and scan counts."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: UserRole
    status: UserStatus
    scan_count: dict[str, int] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime


class UserWithDecision(BaseModel):
    """A user as seen by admins, with their staged decision."""

    user: UserResponse
    decision: DecisionStatus | None = None


# ============================================
# Applicant Self-Service
# ============================================


class SubmitResponse(BaseModel):
    """
    Response for POST /applications/me/submit.

    `errors` maps question keys to messages; empty when submitted.
    """

    submitted: bool
    errors: dict[str, str] = Field(default_factory=dict)
    user: UserResponse


class RsvpRequest(BaseModel):
    """Request body for POST /applications/me/rsvp."""

    rsvp: RsvpChoice


# ============================================
# Decisions
# ============================================


class StageDecisionsRequest(BaseModel):
    """Request body for POST /admin/decisions/stage."""

    ids: list[int] = Field(..., min_length=1)
    decision: DecisionStatus


class UserIdsRequest(BaseModel):
    """Request body naming a set of users."""

    ids: list[int] = Field(..., min_length=1)


class ReleaseRequest(BaseModel):
    """
    Request body for POST /admin/decisions/release.

    Omit `ids` to release every staged decision.
    """

    ids: list[int] | None = None


class DecisionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    status: DecisionStatus


class StagedDecision(BaseModel):
    """A staged decision with the user it applies to."""

    id: int
    status: DecisionStatus
    user: UserResponse


class DecisionsResponse(BaseModel):
    """Staged decisions grouped by outcome."""

    accepted: list[StagedDecision]
    rejected: list[StagedDecision]
    waitlisted: list[StagedDecision]


class RemoveDecisionsResponse(BaseModel):
    removed: int


class DeliveryFailureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    email: str


class ReleaseSummaryResponse(BaseModel):
    """Outcome of a release request."""

    model_config = ConfigDict(from_attributes=True)

    released: list[int]
    skipped: list[int]
    failed: list[int]
    delivery_failures: list[DeliveryFailureResponse]


# ============================================
# Scanning
# ============================================


class ScanRequest(BaseModel):
    """Request body for POST /admin/scans."""

    user_id: int
    action: str = Field(..., min_length=1, max_length=100)


class ScanResponse(BaseModel):
    user_id: int
    action: str
    count: int


class ScannedCountResponse(BaseModel):
    action: str
    count: int


# ============================================
# Settings
# ============================================


class PublicSettingsResponse(BaseModel):
    """Settings visible to everyone."""

    model_config = ConfigDict(from_attributes=True)

    application_open: bool
    confirm_by: datetime | None
    info: str


class SettingsResponse(PublicSettingsResponse):
    """All settings, for admins."""

    rolling_admissions: bool
    acceptance_template: str


class SettingsUpdate(BaseModel):
    """Request body for PATCH /admin/settings. Only sent fields are written."""

    application_open: bool | None = None
    confirm_by: datetime | None = None
    info: str | None = None
    rolling_admissions: bool | None = None
    acceptance_template: str | None = None
