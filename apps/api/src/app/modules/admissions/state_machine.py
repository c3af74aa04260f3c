"""
Applicant Status State Machine

Pure transition logic for the admissions lifecycle:

    CREATED -> VERIFIED -> APPLIED -> ACCEPTED | REJECTED | WAITLISTED
    ACCEPTED -> CONFIRMED | DECLINED,  CONFIRMED -> DECLINED
    WAITLISTED -> ACCEPTED | REJECTED | WAITLISTED (via a new decision)

Every legal move is an entry in TRANSITIONS keyed by (status, action). The
entry names a guard over GuardContext and the resulting status. Nothing here
touches storage; services look up the new status and then persist it with a
compare-and-set write.
"""

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from app.modules.admissions.models import DecisionStatus
from app.modules.users.models import UserRole, UserStatus


class Action(str, enum.Enum):
    """Requests that may move a user's status."""

    VERIFY = "verify"
    EDIT_APPLICATION = "edit_application"
    SUBMIT_APPLICATION = "submit_application"
    STAGE_DECISION = "stage_decision"
    RELEASE_DECISION = "release_decision"
    RSVP_CONFIRM = "rsvp_confirm"
    RSVP_DECLINE = "rsvp_decline"
    WALK_IN_CONFIRM = "walk_in_confirm"


@dataclass(frozen=True)
class GuardContext:
    """Facts the guards are evaluated against."""

    application_open: bool = False
    confirm_by: datetime | None = None
    role: UserRole = UserRole.HACKER
    decision: DecisionStatus | None = None
    application_errors: dict[str, str] = field(default_factory=dict)
    now: datetime = field(default_factory=lambda: datetime.now(UTC))


Guard = Callable[[GuardContext], bool]
Target = Callable[[UserStatus, GuardContext], UserStatus]


@dataclass(frozen=True)
class Transition:
    guard: Guard
    target: Target
    description: str


class InvalidStatusTransitionError(ValueError):
    """Raised when no transition exists for a (status, action) pair."""

    def __init__(self, current_status: UserStatus, action: Action, message: str | None = None):
        self.current_status = current_status
        self.action = action
        if message is None:
            valid_actions = allowed_actions(current_status)
            message = (
                f"Invalid transition: {action.value} from {current_status.value}. "
                f"Valid actions: {[a.value for a in valid_actions]}"
            )
        super().__init__(message)


class TransitionGuardError(InvalidStatusTransitionError):
    """Raised when the transition exists but its guard is not satisfied."""

    def __init__(self, current_status: UserStatus, action: Action, reason: str):
        self.reason = reason
        super().__init__(
            current_status,
            action,
            f"Guard failed for {action.value} from {current_status.value}: {reason}",
        )


# ============================================
# Guards
# ============================================


def _always(_ctx: GuardContext) -> bool:
    return True


def _application_open(ctx: GuardContext) -> bool:
    return ctx.application_open


def _application_open_and_valid(ctx: GuardContext) -> bool:
    return ctx.application_open and not ctx.application_errors


def _is_admin(ctx: GuardContext) -> bool:
    return ctx.role == UserRole.ADMIN


def _has_decision(ctx: GuardContext) -> bool:
    return ctx.decision is not None


def _before_confirm_deadline(ctx: GuardContext) -> bool:
    return ctx.confirm_by is None or ctx.now < ctx.confirm_by


# ============================================
# Targets
# ============================================


def _to(status: UserStatus) -> Target:
    return lambda _current, _ctx: status


def _unchanged(current: UserStatus, _ctx: GuardContext) -> UserStatus:
    return current


def _released_decision(_current: UserStatus, ctx: GuardContext) -> UserStatus:
    # Guarded by _has_decision
    return ctx.decision.user_status  # type: ignore[union-attr]


# ============================================
# Transition Table
# ============================================

DECIDABLE_STATUSES = frozenset({UserStatus.APPLIED, UserStatus.WAITLISTED})
EDITABLE_STATUSES = frozenset({UserStatus.VERIFIED, UserStatus.APPLIED})
RSVP_DECLINABLE_STATUSES = frozenset({UserStatus.ACCEPTED, UserStatus.CONFIRMED})
WALK_IN_EXCLUDED_STATUSES = frozenset({UserStatus.CREATED, UserStatus.VERIFIED})

TRANSITIONS: dict[tuple[UserStatus, Action], Transition] = {
    (UserStatus.CREATED, Action.VERIFY): Transition(
        _always, _to(UserStatus.VERIFIED), "email verified"
    ),
    (UserStatus.VERIFIED, Action.SUBMIT_APPLICATION): Transition(
        _application_open_and_valid, _to(UserStatus.APPLIED), "application submitted"
    ),
    (UserStatus.ACCEPTED, Action.RSVP_CONFIRM): Transition(
        _before_confirm_deadline, _to(UserStatus.CONFIRMED), "attendance confirmed"
    ),
}

for _status in EDITABLE_STATUSES:
    # Editing un-applies the user
    TRANSITIONS[(_status, Action.EDIT_APPLICATION)] = Transition(
        _application_open, _to(UserStatus.VERIFIED), "application edited"
    )

for _status in DECIDABLE_STATUSES:
    TRANSITIONS[(_status, Action.STAGE_DECISION)] = Transition(
        _is_admin, _unchanged, "decision staged"
    )
    TRANSITIONS[(_status, Action.RELEASE_DECISION)] = Transition(
        _has_decision, _released_decision, "decision released"
    )

for _status in RSVP_DECLINABLE_STATUSES:
    TRANSITIONS[(_status, Action.RSVP_DECLINE)] = Transition(
        _always, _to(UserStatus.DECLINED), "attendance declined"
    )

for _status in UserStatus:
    if _status not in WALK_IN_EXCLUDED_STATUSES:
        TRANSITIONS[(_status, Action.WALK_IN_CONFIRM)] = Transition(
            _is_admin, _to(UserStatus.CONFIRMED), "walk-in confirmed"
        )


def source_statuses(action: Action) -> frozenset[UserStatus]:
    """Statuses that have a transition for the given action."""
    return frozenset(from_status for (from_status, a) in TRANSITIONS if a == action)


# Statuses a release may move out of; enforced in SQL by the release write
RELEASABLE_STATUSES = source_statuses(Action.RELEASE_DECISION)


def allowed_actions(status: UserStatus) -> list[Action]:
    """Actions that have a transition from the given status."""
    return [action for (from_status, action) in TRANSITIONS if from_status == status]


def transition(current: UserStatus, action: Action, ctx: GuardContext) -> UserStatus:
    """
    Compute the status that results from applying an action.

    Args:
        current: The user's current status
        action: The requested action
        ctx: Guard facts (application window, deadline, role, decision)

    Returns:
        The new status

    Raises:
        InvalidStatusTransitionError: If the action is not legal from current
        TransitionGuardError: If the action is legal but its guard fails
    """
    entry = TRANSITIONS.get((current, action))
    if entry is None:
        raise InvalidStatusTransitionError(current, action)

    if not entry.guard(ctx):
        raise TransitionGuardError(current, action, f"guard '{entry.guard.__name__}' not met")

    return entry.target(current, ctx)


def can_transition(current: UserStatus, action: Action, ctx: GuardContext) -> bool:
    """Return True if `transition` would succeed."""
    try:
        transition(current, action, ctx)
    except InvalidStatusTransitionError:
        return False
    return True
