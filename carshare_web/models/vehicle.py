from dataclasses import dataclass
from typing import List, Optional

from carshare_web.utils.constants import VEHICLE_STATUS_LABELS, VehicleStatus


@dataclass
class Vehicle:
    """
    A listed vehicle. The license plate is the key the booking endpoint uses.
    Only FREE + verified vehicles can be booked.
    """
    license_plate: str
    status: str  # "FREE" | "RENTED" | "RESTING" | "REPAIRING"
    is_verified: bool = False
    id: Optional[str] = None
    owner_id: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    color: Optional[str] = None
    vehicle_type: Optional[str] = None
    transmission: Optional[str] = None
    seating_capacity: Optional[int] = None
    features: Optional[str] = None
    description: Optional[str] = None

    @property
    def is_bookable(self) -> bool:
        return self.status == VehicleStatus.FREE and self.is_verified

    @property
    def status_label(self) -> str:
        return VEHICLE_STATUS_LABELS.get(self.status, self.status or "")

    @property
    def title(self) -> str:
        """'Make Model (Year)' when known, otherwise the plate."""
        if self.make and self.model:
            title = f"{self.make} {self.model}"
        else:
            title = self.license_plate
        if self.year:
            title += f" ({self.year})"
        return title

    @property
    def feature_list(self) -> List[str]:
        return [f.strip() for f in (self.features or "").split(",") if f.strip()]

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> Optional["Vehicle"]:
        """Map a backend vehicle JSON object to a Vehicle."""
        if not d:
            return None
        return cls(
            license_plate=d.get("licensePlate") or "",
            status=(d.get("status") or "").upper(),
            is_verified=bool(d.get("isVerified")),
            id=d.get("id"),
            owner_id=d.get("ownerId"),
            make=d.get("make"),
            model=d.get("model"),
            year=d.get("year"),
            color=d.get("color"),
            vehicle_type=d.get("vehicleType"),
            transmission=d.get("transmission"),
            seating_capacity=d.get("seatingCapacity"),
            features=d.get("features"),
            description=d.get("description"),
        )
