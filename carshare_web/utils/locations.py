"""Named pickup/drop locations and coordinate <-> label lookup."""

from typing import List, Optional

from carshare_web.models.trip import Location
from carshare_web.utils.constants import (
    DEFAULT_SEARCH_POINT,
    LOCATION_MATCH_TOLERANCE,
    LOCATIONS,
)


def location_names() -> List[str]:
    return list(LOCATIONS)


def location_for(name: Optional[str]) -> Optional[Location]:
    """Coordinates of a named location, or None if the name is not in the fixed set."""
    coords = LOCATIONS.get((name or "").strip())
    if coords is None:
        return None
    return Location(*coords)


def default_search_location() -> Location:
    return Location(*DEFAULT_SEARCH_POINT)


def location_label(location: Optional[Location]) -> Optional[str]:
    """
    Map coordinates back to a location name (approximate matching).
    Unknown points fall back to 'lat, lon' with 4 decimals.
    """
    if location is None:
        return None
    for name, (lat, lon) in LOCATIONS.items():
        if (abs(location.lat - lat) < LOCATION_MATCH_TOLERANCE
                and abs(location.lon - lon) < LOCATION_MATCH_TOLERANCE):
            return name
    return f"{location.lat:.4f}, {location.lon:.4f}"
