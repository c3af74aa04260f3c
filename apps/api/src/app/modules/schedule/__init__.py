"""Schedule module - the hackathon's event schedule."""

from .router import router

__all__ = ["router"]
