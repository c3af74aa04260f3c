"""
Users module - Hackers, organizers and admins, and their scan counters.
"""

from app.modules.users.models import ScanCount, User, UserRole, UserStatus
from app.modules.users.repository import UserRepository

__all__ = ["ScanCount", "User", "UserRole", "UserStatus", "UserRepository"]
