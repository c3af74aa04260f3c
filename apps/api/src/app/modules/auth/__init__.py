"""Authentication module."""

from app.modules.auth.router import router
from app.modules.auth.schemas import CreateUserRequest, MessageResponse, RegisterRequest

__all__ = ["router", "CreateUserRequest", "MessageResponse", "RegisterRequest"]
