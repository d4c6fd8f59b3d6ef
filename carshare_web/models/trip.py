from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from carshare_web.models.lifecycle import TripStatus

MS_PER_HOUR = 1000 * 60 * 60


def _to_decimal(value) -> Optional[Decimal]:
    """Money arrives as JSON numbers; keep it as Decimal, None if missing/invalid."""
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def _to_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# ── Value Object ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    lat: float
    lon: float

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> Optional["Location"]:
        """Accepts both the trip shape {lat, lon} and the search shape {latitude, longitude}."""
        if not d:
            return None
        lat = d.get("lat", d.get("latitude"))
        lon = d.get("lon", d.get("longitude"))
        if lat is None or lon is None:
            return None
        return cls(float(lat), float(lon))

    def to_search_dict(self) -> dict:
        return {"latitude": self.lat, "longitude": self.lon}


# ── Entity ────────────────────────────────────────────────────────────


@dataclass
class Trip:
    """
    One booking and its lifecycle, exactly as the backend reports it.
    The client never changes a trip locally; every change is a request.
    """
    id: str
    status: str
    vehicle_id: Optional[str] = None
    renter_id: Optional[str] = None
    owner_id: Optional[str] = None
    date_of_booking_epoch: Optional[int] = None
    planned_start_time_epoch: Optional[int] = None
    planned_end_time_epoch: Optional[int] = None
    actual_start_time_epoch: Optional[int] = None
    actual_end_time_epoch: Optional[int] = None
    start_odometer_reading: Optional[int] = None
    end_odometer_reading: Optional[int] = None
    fuel_level: Optional[float] = None
    total_amount: Optional[Decimal] = None
    security_deposit: Optional[Decimal] = None
    payment_status: Optional[str] = None
    special_instructions: Optional[str] = None
    pick_up_location: Optional[Location] = None
    drop_location: Optional[Location] = None
    renter_rating: Optional[int] = None
    owner_rating: Optional[int] = None
    renter_comments: Optional[str] = None
    owner_comments: Optional[str] = None

    @property
    def trip_status(self) -> Optional[TripStatus]:
        return TripStatus.parse(self.status)

    @property
    def is_active(self) -> bool:
        """PENDING and IN_PROGRESS trips are shown in the dashboard's active panel."""
        return self.trip_status in (TripStatus.PENDING, TripStatus.IN_PROGRESS)

    @property
    def has_rating(self) -> bool:
        return bool(self.renter_rating or self.owner_rating)

    @property
    def planned_duration_hours(self) -> Optional[float]:
        if self.planned_start_time_epoch is None or self.planned_end_time_epoch is None:
            return None
        return (self.planned_end_time_epoch - self.planned_start_time_epoch) / MS_PER_HOUR

    @property
    def actual_duration_hours(self) -> Optional[float]:
        if self.actual_start_time_epoch is None or self.actual_end_time_epoch is None:
            return None
        return (self.actual_end_time_epoch - self.actual_start_time_epoch) / MS_PER_HOUR

    @property
    def distance_travelled(self) -> Optional[int]:
        return distance_between(self.start_odometer_reading, self.end_odometer_reading)

    def check_invariants(self) -> List[str]:
        """Return human-readable descriptions of any broken trip invariants."""
        problems = []
        if self.actual_end_time_epoch is not None and self.actual_start_time_epoch is None:
            problems.append("Trip has an end time but no start time")
        if (
            self.actual_end_time_epoch is not None
            and self.actual_start_time_epoch is not None
            and self.actual_end_time_epoch < self.actual_start_time_epoch
        ):
            problems.append("Trip ends before it starts")
        if (
            self.start_odometer_reading is not None
            and self.end_odometer_reading is not None
            and self.end_odometer_reading < self.start_odometer_reading
        ):
            problems.append("End odometer reading is below the start reading")
        return problems

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> Optional["Trip"]:
        """Map a backend trip JSON object to a Trip."""
        if not d:
            return None
        fuel = d.get("fuelLevel")
        return cls(
            id=str(d.get("id") or ""),
            status=(d.get("status") or "").upper(),
            vehicle_id=d.get("vehicleId"),
            renter_id=d.get("renterId"),
            owner_id=d.get("ownerId"),
            date_of_booking_epoch=_to_int(d.get("dateOfBookingEpoch")),
            planned_start_time_epoch=_to_int(d.get("plannedStartTimeEpoch")),
            planned_end_time_epoch=_to_int(d.get("plannedEndTimeEpoch")),
            actual_start_time_epoch=_to_int(d.get("actualStartTimeEpoch")),
            actual_end_time_epoch=_to_int(d.get("actualEndTimeEpoch")),
            start_odometer_reading=_to_int(d.get("startOdometerReading")),
            end_odometer_reading=_to_int(d.get("endOdometerReading")),
            fuel_level=float(fuel) if fuel is not None else None,
            total_amount=_to_decimal(d.get("totalAmount")),
            security_deposit=_to_decimal(d.get("securityDeposit")),
            payment_status=d.get("paymentStatus"),
            special_instructions=d.get("specialInstructions"),
            pick_up_location=Location.from_dict(d.get("pickUpLocation")),
            drop_location=Location.from_dict(d.get("dropLocation")),
            renter_rating=_to_int(d.get("renterRating")),
            owner_rating=_to_int(d.get("ownerRating")),
            renter_comments=d.get("renterComments"),
            owner_comments=d.get("ownerComments"),
        )


def distance_between(start_reading: Optional[int], end_reading: Optional[int]) -> Optional[int]:
    """Odometer distance in km; None unless both readings are known."""
    if start_reading is None or end_reading is None:
        return None
    return end_reading - start_reading
