"""Authentication schemas."""

from pydantic import BaseModel, EmailStr, Field

from app.modules.users.models import UserRole


class RegisterRequest(BaseModel):
    """Register request schema."""

    email: EmailStr


class MessageResponse(BaseModel):
    message: str


class CreateUserRequest(BaseModel):
    """Request body for POST /admin/users."""

    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    role: UserRole = UserRole.HACKER
