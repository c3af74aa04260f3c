"""Announcements module - messages shown to all hackers."""

from .router import router

__all__ = ["router"]
