import sys, pathlib

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import pytest

from carshare_web import create_app
from carshare_web.exceptions import NotFoundError
from carshare_web.services.submissions import IN_FLIGHT

RENTER = {
    "userId": "u-renter",
    "email": "rita@example.com",
    "name": "Rita",
    "role": "RENTER",
    "phoneNumber": "+6590000001",
    "isVerified": True,
}
HOST = {
    "userId": "u-host",
    "email": "hank@example.com",
    "name": "Hank",
    "role": "HOST",
    "phoneNumber": "+6590000002",
    "isVerified": True,
}


def make_vehicle(plate="SGX1234A", status="FREE", verified=True, **extra):
    v = {
        "id": f"v-{plate}",
        "licensePlate": plate,
        "ownerId": HOST["userId"],
        "make": "Toyota",
        "model": "Corolla",
        "year": 2021,
        "vehicleType": "STANDARD",
        "transmission": "AUTO",
        "seatingCapacity": 5,
        "features": "GPS, Bluetooth",
        "status": status,
        "isVerified": verified,
    }
    v.update(extra)
    return v


def make_trip(trip_id="t1", status="PENDING", **extra):
    t = {
        "id": trip_id,
        "vehicleId": "v-SGX1234A",
        "renterId": RENTER["userId"],
        "ownerId": HOST["userId"],
        "status": status,
        "dateOfBookingEpoch": 1700000000000,
        "plannedStartTimeEpoch": 1700003600000,
        "plannedEndTimeEpoch": 1700010800000,
        "totalAmount": 45.5,
        "securityDeposit": 200,
        "pickUpLocation": {"lat": 1.2834, "lon": 103.8607},
        "dropLocation": {"lat": 1.3644, "lon": 103.9915},
    }
    t.update(extra)
    return t


class FakeApi:
    """
    In-memory stand-in for RentalApiClient. Records every call and lets a
    test make any method raise by putting an exception in ``failures``.
    """

    def __init__(self):
        self.vehicles = []
        self.trips = {}
        self.active = None
        self.me = None
        self.auth_response = None
        self.search_response = None
        self.failures = {}
        self.calls = []
        self.tokens = []

    def bind(self, identity=None):
        self.tokens.append(identity.token if identity is not None else None)
        return self

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        err = self.failures.get(name)
        if err is not None:
            raise err

    def called(self, name):
        return [c for c in self.calls if c[0] == name]

    # ---------- Auth ----------
    def login(self, email, password):
        self._call("login", email, password)
        return self.auth_response

    def register(self, payload):
        self._call("register", payload)
        return self.auth_response

    def current_user(self):
        self._call("current_user")
        return {"success": True, "user": self.me}

    # ---------- Vehicles ----------
    def get_vehicles(self, pickup, drop):
        self._call("get_vehicles", pickup, drop)
        if self.search_response is not None:
            return self.search_response
        return {"success": True, "vehicles": self.vehicles, "totalCount": len(self.vehicles)}

    def register_vehicle(self, payload):
        self._call("register_vehicle", payload)
        return {"success": True, "vehicle": payload}

    def rent_vehicle(self, license_plate, pickup_location, drop_location):
        self._call("rent_vehicle", license_plate, pickup_location, drop_location)
        return {"success": True}

    # ---------- Trips ----------
    def get_trip(self, trip_id):
        self._call("get_trip", trip_id)
        if trip_id not in self.trips:
            raise NotFoundError()
        return self.trips[trip_id]

    def my_trips(self):
        self._call("my_trips")
        return list(self.trips.values())

    def active_trip(self):
        self._call("active_trip")
        return self.active

    def start_trip(self, trip_id, payload):
        self._call("start_trip", trip_id, payload)
        trip = self.trips[trip_id]
        trip.update(status="IN_PROGRESS", startOdometerReading=payload["startOdometerReading"])
        return trip

    def complete_trip(self, trip_id, payload):
        self._call("complete_trip", trip_id, payload)
        trip = self.trips[trip_id]
        trip.update(status="COMPLETED", endOdometerReading=payload["endOdometerReading"])
        return trip

    def cancel_trip(self, trip_id, payload):
        self._call("cancel_trip", trip_id, payload)
        trip = self.trips[trip_id]
        trip.update(status="CANCELLED")
        return trip

    def submit_rating(self, trip_id, payload):
        self._call("submit_rating", trip_id, payload)
        self.trips[trip_id].update(payload)
        return self.trips[trip_id]


@pytest.fixture(autouse=True)
def fake_api(monkeypatch):
    """
    Patch services.common._api() so every service talks to the SAME
    in-memory backend instead of the network.
    """
    from carshare_web.services import common as common_mod

    api = FakeApi()
    monkeypatch.setattr(common_mod, "_api", lambda identity=None: api.bind(identity), raising=True)
    yield api


@pytest.fixture(autouse=True)
def reset_in_flight():
    IN_FLIGHT.clear()
    yield
    IN_FLIGHT.clear()


@pytest.fixture
def app():
    return create_app({
        "TESTING": True,
        "SECRET_KEY": "test",
        "API_BASE_URL": "http://backend.test",
    })


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def login_as(client, fake_api):
    """Put a signed-in user straight into the session cookie."""

    def _login(user=RENTER, token="tok-123"):
        with client.session_transaction() as sess:
            sess["auth_token"] = token
            sess["auth_user"] = dict(user)
        fake_api.me = dict(user)
        return user

    return _login
