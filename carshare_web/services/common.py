"""Shared service helpers and factories."""

from contextlib import nullcontext
from typing import Optional

from flask import current_app

from carshare_web.exceptions import ApiError, CarshareError, ServiceUnavailableError
from carshare_web.services.api_client import RentalApiClient
from carshare_web.services.session import SessionContext
from carshare_web.services.submissions import IN_FLIGHT


def _api(identity: Optional[SessionContext] = None) -> RentalApiClient:
    """Build a backend client for this request, authenticated as *identity*."""
    token = identity.token if identity is not None else None
    return RentalApiClient(
        base_url=current_app.config["API_BASE_URL"],
        token=token,
        timeout=current_app.config.get("REQUEST_TIMEOUT", 10.0),
    )


def submission_guard(identity: Optional[SessionContext], form_key: str):
    """Context manager that rejects a second in-flight submission of the same form."""
    if identity is None:
        return nullcontext()
    return IN_FLIGHT.guard(identity.submitter_key, form_key)


def api_message(err: CarshareError, fallback: str) -> str:
    """
    Message to show for a failed backend call: the backend's own message
    when it sent one, the generic outage text for transport failures,
    otherwise the per-form fallback.
    """
    if isinstance(err, ServiceUnavailableError):
        return err.message
    if isinstance(err, ApiError) and err.message != err.default_message:
        return err.message
    return fallback


# -------- form value parsing --------
def to_int_safe(value) -> Optional[int]:
    """Parse an integer form field; None for blank or invalid input."""
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    try:
        return int(s)
    except ValueError:
        return None


def to_float_safe(value) -> Optional[float]:
    """Safely convert to float; return None if invalid."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def is_checked(value) -> bool:
    """HTML checkboxes post 'on' (or a chosen value) when ticked and nothing otherwise."""
    return str(value or "").strip().lower() in ("on", "true", "1", "yes")


def clean(value) -> str:
    return (value or "").strip()
