"""
HTTP client for the rental backend.

Attaches the bearer token, maps error statuses to the exceptions in
``carshare_web.exceptions`` and decodes JSON. It never retries: a failed
request surfaces immediately so the form that sent it stays resubmittable.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from carshare_web.exceptions import (
    ApiError,
    NotFoundError,
    ServiceUnavailableError,
    SessionExpiredError,
    TransitionConflictError,
)
from carshare_web.models.trip import Location

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def _error_message(response: requests.Response) -> Optional[str]:
    """Pull the backend's ``message`` out of an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message") or body.get("error")
    return None


class RentalApiClient:
    """Client for the rental backend's JSON API.

    One instance is built per request with the signed-in user's token
    (or none for anonymous pages).
    """

    def __init__(self, base_url: str, token: Optional[str] = None,
                 timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Content-Type": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, payload: Optional[Dict] = None) -> Any:
        """Send one request and return the decoded JSON body (None when empty).

        Raises:
            SessionExpiredError: on 401, from any endpoint
            NotFoundError: on 404
            TransitionConflictError: on 409
            ApiError: on any other 4xx/5xx
            ServiceUnavailableError: when the backend can't be reached or answers non-JSON
        """
        url = f"{self.base_url}{path}"
        logger.info(f"{method} {path}")

        try:
            response = self.session.request(
                method, url, json=payload, headers=self.headers, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Request to {path} failed: {e}")
            raise ServiceUnavailableError() from e

        status = response.status_code
        if status == 401:
            logger.warning(f"Unauthorized response from {path}")
            raise SessionExpiredError()
        if status >= 400:
            message = _error_message(response)
            logger.warning(f"Backend rejected {method} {path} ({status}): {message}")
            if status == 404:
                raise NotFoundError(message, status_code=status)
            if status == 409:
                raise TransitionConflictError(message, status_code=status)
            raise ApiError(message, status_code=status)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Undecodable response from {path}: {e}")
            raise ServiceUnavailableError() from e

    # ---------- Auth ----------
    def login(self, email: str, password: str) -> Dict:
        return self._request("POST", "/auth/login", {"email": email, "password": password})

    def register(self, payload: Dict) -> Dict:
        return self._request("POST", "/auth/register", payload)

    def current_user(self) -> Dict:
        return self._request("GET", "/auth/me")

    # ---------- Vehicles ----------
    def get_vehicles(self, pickup: Location, drop: Location) -> Dict:
        return self._request("POST", "/get-vehicles", {
            "pickUpLocation": pickup.to_search_dict(),
            "dropLocation": drop.to_search_dict(),
        })

    def register_vehicle(self, payload: Dict) -> Dict:
        return self._request("POST", "/register-vehicle", payload)

    def rent_vehicle(self, license_plate: str, pickup_location: str, drop_location: str) -> Dict:
        return self._request("POST", f"/rent-vehicle/{quote(license_plate, safe='')}", {
            "pickupLocation": pickup_location,
            "dropLocation": drop_location,
        })

    # ---------- Trips ----------
    def get_trip(self, trip_id: str) -> Dict:
        return self._request("GET", f"/trip/{quote(str(trip_id), safe='')}")

    def my_trips(self) -> List[Dict]:
        return self._request("GET", "/trips/my-trips") or []

    def active_trip(self) -> Optional[Dict]:
        return self._request("GET", "/trips/active")

    def start_trip(self, trip_id: str, payload: Dict) -> Dict:
        return self._request("POST", f"/trip/{quote(str(trip_id), safe='')}/start", payload)

    def complete_trip(self, trip_id: str, payload: Dict) -> Dict:
        return self._request("POST", f"/trip/{quote(str(trip_id), safe='')}/complete", payload)

    def cancel_trip(self, trip_id: str, payload: Dict) -> Dict:
        return self._request("POST", f"/trip/{quote(str(trip_id), safe='')}/cancel", payload)

    def submit_rating(self, trip_id: str, payload: Dict) -> Dict:
        return self._request("POST", f"/trip/{quote(str(trip_id), safe='')}/rating", payload)
