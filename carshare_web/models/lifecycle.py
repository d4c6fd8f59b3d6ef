"""
Trip lifecycle state machine.

Every view that offers or submits a trip action asks this module instead
of comparing status strings itself:

    PENDING ──start──▶ IN_PROGRESS ──complete──▶ COMPLETED ──rate──▶ (COMPLETED)
       │
       └──cancel──▶ CANCELLED          CONFIRMED ──cancel──▶ CANCELLED

``CONFIRMED`` is accepted from the backend and honoured for cancellation
eligibility, but the client never produces it and the dashboard never
offers an action for it.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Union

from carshare_web.exceptions import InvalidTransitionError, PermissionDeniedError
from carshare_web.utils.constants import Role


class TripStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @classmethod
    def parse(cls, value) -> Optional["TripStatus"]:
        """Return the member for *value*, or None for unknown/missing statuses."""
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").upper())
        except ValueError:
            return None


# State machine: maps current status -> set of valid next statuses
TRIP_TRANSITIONS: dict[TripStatus, set[TripStatus]] = {
    TripStatus.PENDING: {TripStatus.IN_PROGRESS, TripStatus.CANCELLED},
    TripStatus.CONFIRMED: {TripStatus.IN_PROGRESS, TripStatus.CANCELLED},
    TripStatus.IN_PROGRESS: {TripStatus.COMPLETED},
    TripStatus.COMPLETED: set(),
    TripStatus.CANCELLED: set(),
}


class TripAction(str, enum.Enum):
    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"
    RATE = "rate"


@dataclass(frozen=True)
class Transition:
    """One user-triggered trip action.

    ``eligible_from`` is where the backend accepts the request and the
    transition view lets the user submit; ``offered_from`` is the (possibly
    narrower) set where the dashboard shows a control for it. An empty
    ``roles`` set means any signed-in role may act.
    """

    action: TripAction
    eligible_from: frozenset[TripStatus]
    offered_from: frozenset[TripStatus]
    target: Optional[TripStatus]
    roles: frozenset[str]
    required_fields: tuple[str, ...]


TRANSITIONS: dict[TripAction, Transition] = {
    TripAction.START: Transition(
        action=TripAction.START,
        eligible_from=frozenset({TripStatus.PENDING}),
        offered_from=frozenset({TripStatus.PENDING}),
        target=TripStatus.IN_PROGRESS,
        roles=frozenset({Role.RENTER}),
        required_fields=("startOdometerReading",),
    ),
    TripAction.COMPLETE: Transition(
        action=TripAction.COMPLETE,
        eligible_from=frozenset({TripStatus.IN_PROGRESS}),
        offered_from=frozenset({TripStatus.IN_PROGRESS}),
        target=TripStatus.COMPLETED,
        roles=frozenset({Role.RENTER}),
        required_fields=("endOdometerReading", "fuelLevel"),
    ),
    TripAction.CANCEL: Transition(
        action=TripAction.CANCEL,
        eligible_from=frozenset({TripStatus.PENDING, TripStatus.CONFIRMED}),
        offered_from=frozenset({TripStatus.PENDING}),
        target=TripStatus.CANCELLED,
        roles=frozenset({Role.RENTER}),
        required_fields=("reason",),
    ),
    # Rating leaves the status unchanged; the rating field depends on who rates.
    TripAction.RATE: Transition(
        action=TripAction.RATE,
        eligible_from=frozenset({TripStatus.COMPLETED}),
        offered_from=frozenset({TripStatus.COMPLETED}),
        target=None,
        roles=frozenset(),
        required_fields=(),
    ),
}

StatusLike = Union[TripStatus, str, None]


def transition_to(current: StatusLike, new_status: StatusLike) -> TripStatus:
    """Return *new_status* if moving there from *current* is legal, else raise."""
    src = TripStatus.parse(current)
    dst = TripStatus.parse(new_status)
    allowed = TRIP_TRANSITIONS.get(src, set()) if src else set()
    if dst is None or dst not in allowed:
        raise InvalidTransitionError(f"Cannot transition from {current} to {new_status}")
    return dst


def _role_allowed(transition: Transition, role: Optional[str]) -> bool:
    if not role:
        return False
    return not transition.roles or role in transition.roles


def is_eligible(status: StatusLike, action: TripAction) -> bool:
    """True when the trip's status lets *action* be submitted at all."""
    parsed = TripStatus.parse(status)
    return parsed is not None and parsed in TRANSITIONS[action].eligible_from


def allowed_actions(status: StatusLike, role: Optional[str]) -> tuple[TripAction, ...]:
    """Actions the dashboard offers for a trip in *status* viewed by *role*."""
    parsed = TripStatus.parse(status)
    if parsed is None:
        return ()
    return tuple(
        t.action
        for t in TRANSITIONS.values()
        if parsed in t.offered_from and _role_allowed(t, role)
    )


def check_action(status: StatusLike, role: Optional[str], action: TripAction) -> Transition:
    """Raise unless *role* may submit *action* on a trip in *status*."""
    transition = TRANSITIONS[action]
    if not role:
        raise PermissionDeniedError("Please login first")
    if not _role_allowed(transition, role):
        raise PermissionDeniedError(f"Only renters can {action.value} a trip.")
    if not is_eligible(status, action):
        raise InvalidTransitionError(f"This trip cannot be {_PAST[action]} while it is {status or 'unknown'}.")
    return transition


_PAST = {
    TripAction.START: "started",
    TripAction.COMPLETE: "completed",
    TripAction.CANCEL: "cancelled",
    TripAction.RATE: "rated",
}
