from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from carshare_web.models.lifecycle import TripAction, allowed_actions
from carshare_web.models.trip import Trip
from carshare_web.models.user import User
from carshare_web.services.auth_service import AuthService
from carshare_web.services.session import SessionContext
from carshare_web.services.trip_service import TripService

logger = logging.getLogger(__name__)

# endpoint per action; labels for RATE depend on the trip
ACTION_ENDPOINTS = {
    TripAction.START: ("Start Trip", "trips.start_form"),
    TripAction.COMPLETE: ("Complete Trip", "trips.complete_form"),
    TripAction.CANCEL: ("Cancel", "trips.cancel_form"),
    TripAction.RATE: ("Rate Trip", "trips.rating_form"),
}


@dataclass
class ActionLink:
    action: TripAction
    label: str
    endpoint: str


@dataclass
class TripCard:
    trip: Trip
    actions: List[ActionLink] = field(default_factory=list)


@dataclass
class Dashboard:
    user: Optional[User]
    cards: List[TripCard] = field(default_factory=list)
    active: Optional[TripCard] = None
    error: Optional[str] = None


class DashboardService:
    """Composes the dashboard: fresh profile, trips newest first, and what each trip offers."""

    @staticmethod
    def action_links(trip: Trip, role: Optional[str]) -> List[ActionLink]:
        links = []
        for action in allowed_actions(trip.status, role):
            label, endpoint = ACTION_ENDPOINTS[action]
            if action is TripAction.RATE and trip.has_rating:
                label = "View Rating"
            links.append(ActionLink(action, label, endpoint))
        return links

    @staticmethod
    def build(identity: SessionContext) -> Dashboard:
        user = AuthService.refresh(identity)
        trips, error = TripService.my_trips(identity)
        cards = [TripCard(t, DashboardService.action_links(t, identity.role)) for t in trips]
        active = next((c for c in cards if c.trip.is_active), None)
        if error:
            logger.warning(f"Dashboard for {identity.user_id} loaded without trips: {error}")
        return Dashboard(user=user, cards=cards, active=active, error=error)
