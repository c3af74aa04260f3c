"""
Admissions Module

Handles the hackathon admissions workflow:
1. Applicant self-service: verify, save and submit the application, RSVP
2. Decision staging: admins stage, overwrite and remove decisions
3. Decision release: apply staged decisions and email applicants
4. Walk-in confirmation and hacker ID scanning at the event

API Endpoints:
- PATCH /applications/me - Save application answers
- POST /applications/me/submit - Submit the application
- POST /applications/me/verify - Verify account
- POST /applications/me/rsvp - Confirm or decline
- GET /applications/settings - Public settings
- /admin/* - Review, decisions, release, walk-ins, settings, scanning

Status changes follow the transition table in state_machine. Status writes
are compare-and-set, so concurrent requests never overwrite each other's
transition.
"""

from .admin_router import router as admin_router
from .router import router

__all__ = ["router", "admin_router"]
