# carshare_web/utils/constants.py

"""
Global constants for roles, statuses, and the fixed option lists the
forms offer. These constants are imported by models, services and views.
"""


class Role:
    HOST = "HOST"
    RENTER = "RENTER"
    ADMIN = "ADMIN"


class VehicleStatus:
    FREE = "FREE"
    RENTED = "RENTED"
    RESTING = "RESTING"
    REPAIRING = "REPAIRING"


VEHICLE_STATUS_LABELS = {
    VehicleStatus.FREE: "Available",
    VehicleStatus.RENTED: "Rented",
    VehicleStatus.RESTING: "Not Available",
    VehicleStatus.REPAIRING: "Under Maintenance",
}

# --- Vehicle registration options ---
VEHICLE_TYPES = ("ECONOMY", "STANDARD", "PREMIUM")
DEFAULT_VEHICLE_TYPE = "STANDARD"
TRANSMISSIONS = ("AUTO", "MANUAL")
DEFAULT_TRANSMISSION = "AUTO"
SEATING_CAPACITIES = (2, 4, 5, 7, 8)
DEFAULT_SEATING_CAPACITY = 5
MIN_VEHICLE_YEAR = 2000

# --- Trip completion ---
# (value, label), most to least fuel
FUEL_LEVELS = (
    (1.0, "Full (100%)"),
    (0.75, "3/4 Tank (75%)"),
    (0.5, "Half Tank (50%)"),
    (0.25, "1/4 Tank (25%)"),
    (0.1, "Nearly Empty (10%)"),
)
DEFAULT_FUEL_LEVEL = 1.0

# --- Trip cancellation ---
CANCELLATION_REASONS = (
    "Change of plans",
    "Found alternative transportation",
    "Vehicle no longer needed",
    "Emergency situation",
    "Pricing concerns",
    "Vehicle condition concerns",
    "Other",
)
FULL_REFUND_NOTICE_HOURS = 24

# --- Ratings ---
MIN_RATING = 1
MAX_RATING = 5

# --- Locations ---
# name -> (latitude, longitude); order is the order shown in the pickers
LOCATIONS = {
    "Marina Bay Sands": (1.2834, 103.8607),
    "Orchard Road": (1.3048, 103.8318),
    "Changi Airport": (1.3644, 103.9915),
    "Jurong East": (1.3329, 103.7436),
    "Woodlands": (1.4382, 103.7890),
    "Tampines": (1.3496, 103.9568),
}
LOCATION_MATCH_TOLERANCE = 0.01
DEFAULT_SEARCH_POINT = (1.3521, 103.8198)  # Singapore centre

# --- Auth ---
MIN_PASSWORD_LENGTH = 6
