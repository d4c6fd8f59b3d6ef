from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from carshare_web.exceptions import ApiError, PermissionDeniedError, ServiceUnavailableError
from carshare_web.models.vehicle import Vehicle
from carshare_web.services import common
from carshare_web.services.forms import BookingForm, VehicleForm
from carshare_web.services.session import SessionContext
from carshare_web.utils.locations import default_search_location, location_for

logger = logging.getLogger(__name__)


class VehicleService:
    """Vehicle directory: search, booking initiation, host registration."""

    @staticmethod
    def _fetch(identity: Optional[SessionContext], pickup: Optional[str] = None,
               drop: Optional[str] = None) -> List[Vehicle]:
        """Call the search endpoint; a ``success: false`` body raises ApiError with its message."""
        pickup_point = location_for(pickup) or default_search_location()
        drop_point = location_for(drop) or pickup_point
        body = common._api(identity).get_vehicles(pickup_point, drop_point) or {}
        if not body.get("success"):
            raise ApiError(body.get("message"))
        return [v for v in (Vehicle.from_dict(d) for d in body.get("vehicles") or []) if v]

    @staticmethod
    def search(identity: Optional[SessionContext], pickup: Optional[str] = None,
               drop: Optional[str] = None) -> Tuple[List[Vehicle], Optional[str]]:
        """
        Search vehicles around the chosen pickup/drop locations.
        Unknown or missing location names fall back to the city centre.

        Returns:
            (vehicles, error_message); error_message is None on success
        """
        try:
            return VehicleService._fetch(identity, pickup, drop), None
        except (ApiError, ServiceUnavailableError) as e:
            return [], common.api_message(e, "Failed to load vehicles")

    @staticmethod
    def find_vehicle(identity: SessionContext, license_plate: str) -> Optional[Vehicle]:
        """
        Re-read the directory and return the vehicle with this plate, or None
        if it is no longer listed. Backend failures propagate.
        """
        plate = (license_plate or "").strip().upper()
        for v in VehicleService._fetch(identity):
            if v.license_plate.upper() == plate:
                return v
        return None

    @staticmethod
    def booking_block_reason(identity: Optional[SessionContext], vehicle: Optional[Vehicle],
                             form: Optional[BookingForm] = None) -> Optional[str]:
        """
        Why this viewer can't book this vehicle right now, or None if they can.
        Checked in order: signed in, renter role, vehicle FREE + verified,
        then (when a form is given) both locations chosen.
        """
        if identity is None or not identity.is_authenticated:
            return "Please login to rent a vehicle"
        if not identity.is_renter:
            return "Only renters can rent vehicles"
        if vehicle is None or not vehicle.is_bookable:
            if vehicle is not None and not vehicle.is_verified:
                return "Vehicle is pending verification"
            return "Vehicle is not available for rent"
        if form is not None:
            problems = form.errors()
            if problems:
                return problems[0]
        return None

    @staticmethod
    def rent(identity: SessionContext, form: BookingForm):
        """
        Create a PENDING trip for this vehicle and the current renter.

        Returns:
            (ok: bool, message: str)
        """
        if not identity.is_authenticated or not identity.is_renter:
            raise PermissionDeniedError(VehicleService.booking_block_reason(identity, None))
        form.validate()

        try:
            vehicle = VehicleService.find_vehicle(identity, form.license_plate)
        except (ApiError, ServiceUnavailableError) as e:
            return False, common.api_message(e, "Failed to rent vehicle")
        reason = VehicleService.booking_block_reason(identity, vehicle, form)
        if reason:
            return False, reason

        try:
            with common.submission_guard(identity, f"rent:{vehicle.license_plate}"):
                common._api(identity).rent_vehicle(
                    vehicle.license_plate, form.pickup_location, form.drop_location
                )
        except (ApiError, ServiceUnavailableError) as e:
            return False, common.api_message(e, "Failed to rent vehicle")

        logger.info(f"Renter {identity.user_id} booked {vehicle.license_plate}")
        return True, "Vehicle rented successfully! Check your dashboard for trip details."

    @staticmethod
    def register_vehicle(identity: SessionContext, form: VehicleForm):
        """Host submits a new vehicle for verification. Returns (ok, message)."""
        if not identity.is_host:
            raise PermissionDeniedError("Only hosts can add vehicles. Please register as a host first.")
        if not identity.is_verified:
            raise PermissionDeniedError("Host account must be verified before registering vehicles.")
        form.validate()

        try:
            with common.submission_guard(identity, "register-vehicle"):
                common._api(identity).register_vehicle(form.to_payload())
        except (ApiError, ServiceUnavailableError) as e:
            return False, common.api_message(e, "Failed to register vehicle")

        logger.info(f"Host {identity.user_id} registered {form.license_plate}")
        return True, "Vehicle registered successfully! It will be available for rent once verified."
