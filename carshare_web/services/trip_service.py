"""Trip retrieval and lifecycle transitions (start, complete, cancel, rate)."""

from __future__ import annotations

import logging
import time
from typing import List, Optional, Tuple

from carshare_web.exceptions import ApiError, NotFoundError, ServiceUnavailableError
from carshare_web.models.lifecycle import (
    Transition,
    TripAction,
    TripStatus,
    check_action,
    transition_to,
)
from carshare_web.models.trip import Trip
from carshare_web.services import common
from carshare_web.services.forms import (
    CancelTripForm,
    CompleteTripForm,
    RatingForm,
    StartTripForm,
)
from carshare_web.services.session import SessionContext
from carshare_web.utils.constants import FULL_REFUND_NOTICE_HOURS

logger = logging.getLogger(__name__)

MS_PER_HOUR = 1000 * 60 * 60
TRIP_NOT_FOUND = "Trip not found or you don't have permission to view it."


class TripService:
    """
    Every transition follows the same steps: ask the lifecycle state
    machine whether this viewer may act on a trip in this status, validate
    the form, hold the per-form in-flight slot, send the request. Backend
    rejections come back as (False, message) with the form left intact.
    """

    # ---------- Retrieval ----------
    @staticmethod
    def get_trip(identity: SessionContext, trip_id: str) -> Tuple[Optional[Trip], Optional[str]]:
        """Returns (trip, error_message); trip is None when missing or unreadable."""
        try:
            body = common._api(identity).get_trip(trip_id)
        except NotFoundError:
            return None, TRIP_NOT_FOUND
        except (ApiError, ServiceUnavailableError) as e:
            return None, common.api_message(e, "Failed to load trip details")
        trip = Trip.from_dict(body)
        if trip is None:
            return None, TRIP_NOT_FOUND
        for problem in trip.check_invariants():
            logger.warning(f"Trip {trip.id}: {problem}")
        return trip, None

    @staticmethod
    def my_trips(identity: SessionContext) -> Tuple[List[Trip], Optional[str]]:
        """All trips for the viewer, newest booking first. A 404 means 'no trips'."""
        try:
            rows = common._api(identity).my_trips()
        except NotFoundError:
            return [], None
        except (ApiError, ServiceUnavailableError) as e:
            return [], common.api_message(e, "Failed to load trips")
        trips = [t for t in (Trip.from_dict(r) for r in rows or []) if t]
        trips.sort(key=lambda t: t.date_of_booking_epoch or 0, reverse=True)
        return trips, None

    @staticmethod
    def active_trip(identity: SessionContext) -> Optional[Trip]:
        """The viewer's IN_PROGRESS trip, if the backend reports one."""
        try:
            return Trip.from_dict(common._api(identity).active_trip())
        except (ApiError, ServiceUnavailableError) as e:
            logger.info(f"No active trip available: {e}")
            return None

    # ---------- Transitions ----------
    @staticmethod
    def _submit(identity: SessionContext, trip: Trip, transition: Transition, send, fallback: str):
        action = transition.action
        if transition.target is not None:
            transition_to(trip.status, transition.target)
        try:
            with common.submission_guard(identity, f"{action.value}:{trip.id}"):
                send()
        except (ApiError, ServiceUnavailableError) as e:
            return False, common.api_message(e, fallback)
        logger.info(f"Trip {trip.id}: {action.value} requested by {identity.user_id}")
        return True, None

    @staticmethod
    def start_trip(identity: SessionContext, trip: Trip, form: StartTripForm):
        """PENDING -> IN_PROGRESS. Returns (ok, message)."""
        transition = check_action(trip.status, identity.role, TripAction.START)
        form.validate()
        ok, msg = TripService._submit(
            identity, trip, transition,
            lambda: common._api(identity).start_trip(trip.id, form.to_payload()),
            "Failed to start trip",
        )
        return ok, msg or "Trip started successfully!"

    @staticmethod
    def complete_trip(identity: SessionContext, trip: Trip, form: CompleteTripForm):
        """IN_PROGRESS -> COMPLETED. Returns (ok, message)."""
        transition = check_action(trip.status, identity.role, TripAction.COMPLETE)
        form.min_reading = trip.start_odometer_reading or 0
        form.validate()
        ok, msg = TripService._submit(
            identity, trip, transition,
            lambda: common._api(identity).complete_trip(trip.id, form.to_payload()),
            "Failed to complete trip",
        )
        return ok, msg or "Trip completed successfully! Your security deposit will be refunded shortly."

    @staticmethod
    def cancel_trip(identity: SessionContext, trip: Trip, form: CancelTripForm):
        """PENDING/CONFIRMED -> CANCELLED. Returns (ok, message)."""
        transition = check_action(trip.status, identity.role, TripAction.CANCEL)
        form.validate()
        ok, msg = TripService._submit(
            identity, trip, transition,
            lambda: common._api(identity).cancel_trip(trip.id, form.to_payload()),
            "Failed to cancel trip",
        )
        return ok, msg or (
            "Trip cancelled successfully. Your payment will be refunded "
            "according to our cancellation policy."
        )

    @staticmethod
    def submit_rating(identity: SessionContext, trip: Trip, form: RatingForm):
        """Rate a COMPLETED trip as its renter or its host. Returns (ok, message)."""
        transition = check_action(trip.status, identity.role, TripAction.RATE)
        as_renter = TripService.rates_as_renter(identity, trip)
        form.validate()
        ok, msg = TripService._submit(
            identity, trip, transition,
            lambda: common._api(identity).submit_rating(trip.id, form.to_payload(as_renter)),
            "Failed to submit rating",
        )
        return ok, msg or "Thank you! Your rating has been submitted."

    # ---------- Display helpers ----------
    @staticmethod
    def rates_as_renter(identity: SessionContext, trip: Trip) -> bool:
        """The trip's renter rates the host; anyone else (the host) rates the renter."""
        if trip.renter_id and identity.user_id:
            return trip.renter_id == identity.user_id
        return identity.is_renter

    @staticmethod
    def existing_rating(identity: SessionContext, trip: Trip) -> Optional[Tuple[int, Optional[str]]]:
        """(stars, comments) the viewer already gave this trip, or None."""
        if TripService.rates_as_renter(identity, trip):
            if trip.renter_rating:
                return trip.renter_rating, trip.renter_comments
        elif trip.owner_rating:
            return trip.owner_rating, trip.owner_comments
        return None

    @staticmethod
    def refund_estimate(trip: Trip, now_ms: Optional[int] = None) -> str:
        """
        Which tier of the published cancellation policy applies right now.
        Display only: the backend decides the actual refund.
          - trip started            -> no refund
          - >= 24h before start     -> full refund
          - within 24h of start     -> 50% refund
        The security deposit is always refunded.
        """
        now_ms = int(time.time() * 1000) if now_ms is None else now_ms
        if trip.actual_start_time_epoch is not None or trip.trip_status == TripStatus.IN_PROGRESS:
            return "No refund (trip already started)"
        if trip.planned_start_time_epoch is None:
            return "Full refund"
        notice_hours = (trip.planned_start_time_epoch - now_ms) / MS_PER_HOUR
        if notice_hours >= FULL_REFUND_NOTICE_HOURS:
            return "Full refund"
        if notice_hours >= 0:
            return "50% refund"
        return "No refund (trip already started)"
