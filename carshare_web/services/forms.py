"""
Form objects for every page that submits to the backend.

Each form keeps the raw submitted strings (so a failed submission can be
re-rendered exactly as the user typed it), checks them with ``errors()``
before any request is made, and builds the backend JSON payload with
``to_payload()``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from carshare_web.exceptions import FormValidationError
from carshare_web.services.common import clean, is_checked, to_float_safe, to_int_safe
from carshare_web.utils.constants import (
    CANCELLATION_REASONS,
    DEFAULT_FUEL_LEVEL,
    DEFAULT_SEATING_CAPACITY,
    DEFAULT_TRANSMISSION,
    DEFAULT_VEHICLE_TYPE,
    FUEL_LEVELS,
    LOCATIONS,
    MAX_RATING,
    MIN_PASSWORD_LENGTH,
    MIN_RATING,
    MIN_VEHICLE_YEAR,
    Role,
    SEATING_CAPACITIES,
    TRANSMISSIONS,
    VEHICLE_TYPES,
)

# Compile once at module import
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class _Form:
    def errors(self) -> List[str]:
        raise NotImplementedError

    def validate(self) -> "_Form":
        """Raise FormValidationError listing every problem; return self when clean."""
        problems = self.errors()
        if problems:
            raise FormValidationError(problems)
        return self


# ---------------------------------------------------------------- auth


@dataclass
class LoginForm(_Form):
    email: str = ""
    password: str = ""

    @classmethod
    def from_form(cls, form) -> "LoginForm":
        return cls(email=clean(form.get("email")), password=form.get("password") or "")

    def errors(self) -> List[str]:
        if not self.email or not self.password:
            return ["Email and password are required."]
        return []


@dataclass
class RegisterForm(_Form):
    name: str = ""
    email: str = ""
    password: str = ""
    phone_number: str = ""
    role: str = Role.RENTER

    @classmethod
    def from_form(cls, form) -> "RegisterForm":
        return cls(
            name=clean(form.get("name")),
            email=clean(form.get("email")),
            password=form.get("password") or "",
            phone_number=clean(form.get("phoneNumber")),
            role=clean(form.get("role")).upper() or Role.RENTER,
        )

    def errors(self) -> List[str]:
        problems = []
        if not self.name:
            problems.append("Name is required.")
        if not EMAIL_PATTERN.match(self.email):
            problems.append("A valid email address is required.")
        if len(self.password) < MIN_PASSWORD_LENGTH:
            problems.append(f"Password must have at least {MIN_PASSWORD_LENGTH} characters.")
        if self.role not in (Role.RENTER, Role.HOST):
            problems.append("Invalid role.")
        return problems

    def to_payload(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "password": self.password,
            "phoneNumber": self.phone_number or None,
            "role": self.role,
        }


# ---------------------------------------------------------------- vehicles


@dataclass
class VehicleForm(_Form):
    license_plate: str = ""
    make: str = ""
    model: str = ""
    year: str = ""
    color: str = ""
    vehicle_type: str = DEFAULT_VEHICLE_TYPE
    transmission: str = DEFAULT_TRANSMISSION
    seating_capacity: str = str(DEFAULT_SEATING_CAPACITY)
    features: str = ""
    description: str = ""

    @classmethod
    def from_form(cls, form) -> "VehicleForm":
        return cls(
            license_plate=clean(form.get("licensePlate")).upper(),
            make=clean(form.get("make")),
            model=clean(form.get("model")),
            year=clean(form.get("year")),
            color=clean(form.get("color")),
            vehicle_type=clean(form.get("vehicleType")).upper() or DEFAULT_VEHICLE_TYPE,
            transmission=clean(form.get("transmission")).upper() or DEFAULT_TRANSMISSION,
            seating_capacity=clean(form.get("seatingCapacity")) or str(DEFAULT_SEATING_CAPACITY),
            features=clean(form.get("features")),
            description=clean(form.get("description")),
        )

    @staticmethod
    def max_year(today: Optional[date] = None) -> int:
        return (today or date.today()).year + 1

    def errors(self) -> List[str]:
        problems = []
        if not self.license_plate:
            problems.append("License plate is required.")
        if self.vehicle_type not in VEHICLE_TYPES:
            problems.append("Vehicle type must be ECONOMY, STANDARD or PREMIUM.")
        if self.transmission not in TRANSMISSIONS:
            problems.append("Transmission must be AUTO or MANUAL.")
        if to_int_safe(self.seating_capacity) not in SEATING_CAPACITIES:
            problems.append("Invalid seating capacity.")
        if self.year:
            year = to_int_safe(self.year)
            if year is None or not (MIN_VEHICLE_YEAR <= year <= self.max_year()):
                problems.append(f"Year must be between {MIN_VEHICLE_YEAR} and {self.max_year()}.")
        return problems

    def to_payload(self) -> dict:
        return {
            "licensePlate": self.license_plate,
            "make": self.make or None,
            "model": self.model or None,
            "year": to_int_safe(self.year),
            "color": self.color or None,
            "vehicleType": self.vehicle_type,
            "transmission": self.transmission,
            "seatingCapacity": to_int_safe(self.seating_capacity),
            "features": self.features or None,
            "description": self.description or None,
        }


@dataclass
class BookingForm(_Form):
    license_plate: str = ""
    pickup_location: str = ""
    drop_location: str = ""

    @classmethod
    def from_form(cls, form) -> "BookingForm":
        return cls(
            license_plate=clean(form.get("licensePlate")),
            pickup_location=clean(form.get("pickupLocation")),
            drop_location=clean(form.get("dropLocation")),
        )

    def errors(self) -> List[str]:
        if not self.pickup_location or not self.drop_location:
            return ["Please select both pickup and drop locations"]
        if self.pickup_location not in LOCATIONS or self.drop_location not in LOCATIONS:
            return ["Please choose pickup and drop locations from the list"]
        return []


# ---------------------------------------------------------------- trips


@dataclass
class _IssueReport:
    has_vehicle_issues: bool = False
    issue_description: str = ""
    notes: str = ""

    def issue_errors(self) -> List[str]:
        if self.has_vehicle_issues and not self.issue_description:
            return ["Please describe the vehicle issues you are reporting."]
        return []


@dataclass
class StartTripForm(_IssueReport, _Form):
    start_odometer_reading: str = ""

    @classmethod
    def from_form(cls, form) -> "StartTripForm":
        return cls(
            start_odometer_reading=clean(form.get("startOdometerReading")),
            has_vehicle_issues=is_checked(form.get("hasVehicleIssues")),
            issue_description=clean(form.get("issueDescription")),
            notes=clean(form.get("notes")),
        )

    @property
    def reading(self) -> Optional[int]:
        return to_int_safe(self.start_odometer_reading)

    def errors(self) -> List[str]:
        problems = []
        if self.reading is None or self.reading < 0:
            problems.append("Starting odometer reading must be a whole number of at least 0.")
        return problems + self.issue_errors()

    def to_payload(self) -> dict:
        return {
            "startOdometerReading": self.reading,
            "notes": self.notes,
            "hasVehicleIssues": self.has_vehicle_issues,
            "issueDescription": self.issue_description if self.has_vehicle_issues else "",
        }


@dataclass
class CompleteTripForm(_IssueReport, _Form):
    end_odometer_reading: str = ""
    fuel_level: str = str(DEFAULT_FUEL_LEVEL)
    requires_cleaning: bool = False
    # Lower bound for the end reading: the trip's start reading (0 if unknown).
    min_reading: int = 0

    @classmethod
    def from_form(cls, form, start_reading: Optional[int] = None) -> "CompleteTripForm":
        return cls(
            end_odometer_reading=clean(form.get("endOdometerReading")),
            fuel_level=clean(form.get("fuelLevel")) or str(DEFAULT_FUEL_LEVEL),
            requires_cleaning=is_checked(form.get("requiresCleaning")),
            has_vehicle_issues=is_checked(form.get("hasVehicleIssues")),
            issue_description=clean(form.get("issueDescription")),
            notes=clean(form.get("notes")),
            min_reading=start_reading or 0,
        )

    @property
    def reading(self) -> Optional[int]:
        return to_int_safe(self.end_odometer_reading)

    @property
    def fuel(self) -> Optional[float]:
        value = to_float_safe(self.fuel_level)
        return value if value in {level for level, _ in FUEL_LEVELS} else None

    def distance(self) -> Optional[int]:
        """Display-only distance; the backend computes the authoritative figure."""
        if self.reading is None or not self.min_reading or self.reading < self.min_reading:
            return None
        return self.reading - self.min_reading

    def errors(self) -> List[str]:
        problems = []
        if self.reading is None:
            problems.append("Ending odometer reading must be a whole number.")
        elif self.reading < self.min_reading:
            problems.append(
                f"Ending odometer reading must be greater than or equal to "
                f"the starting reading ({self.min_reading:,} km)."
            )
        if self.fuel is None:
            problems.append("Please choose a fuel level from the list.")
        return problems + self.issue_errors()

    def to_payload(self) -> dict:
        return {
            "endOdometerReading": self.reading,
            "fuelLevel": self.fuel,
            "requiresCleaning": self.requires_cleaning,
            "notes": self.notes,
            "hasVehicleIssues": self.has_vehicle_issues,
            "issueDescription": self.issue_description if self.has_vehicle_issues else "",
        }


@dataclass
class CancelTripForm(_Form):
    reason: str = ""
    additional_notes: str = ""

    @classmethod
    def from_form(cls, form) -> "CancelTripForm":
        return cls(
            reason=clean(form.get("reason")),
            additional_notes=clean(form.get("additionalNotes")),
        )

    def errors(self) -> List[str]:
        if not self.reason:
            return ["Please select a reason for cancellation."]
        if self.reason not in CANCELLATION_REASONS:
            return ["Please choose a cancellation reason from the list."]
        return []

    def to_payload(self) -> dict:
        reason = self.reason
        if self.additional_notes:
            reason += f"\nNotes: {self.additional_notes}"
        return {"reason": reason}


@dataclass
class RatingForm(_Form):
    rating: str = ""
    comments: str = ""

    @classmethod
    def from_form(cls, form) -> "RatingForm":
        return cls(rating=clean(form.get("rating")), comments=clean(form.get("comments")))

    @property
    def stars(self) -> Optional[int]:
        return to_int_safe(self.rating)

    def errors(self) -> List[str]:
        if self.stars is None or not (MIN_RATING <= self.stars <= MAX_RATING):
            return [f"Rating must be between {MIN_RATING} and {MAX_RATING} stars."]
        return []

    def to_payload(self, as_renter: bool) -> dict:
        if as_renter:
            return {"renterRating": self.stars, "renterComments": self.comments or None}
        return {"ownerRating": self.stars, "ownerComments": self.comments or None}
