"""
Custom exception classes for the car sharing web client.

Views catch these to re-render a form with a friendly message instead of
a generic 500 error. ``SessionExpiredError`` is the one exception views do
not catch: the application turns it into a logout + redirect to login.
"""

from typing import Iterable, Optional


class CarshareError(Exception):
    """Base class for all client-side errors."""

    default_message = "Error: something went wrong"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class FormValidationError(CarshareError):
    """Raised when a form is missing a field or a value is out of range."""

    default_message = "Please correct the highlighted fields."

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        super().__init__(self.errors[0] if self.errors else None)


class PermissionDeniedError(CarshareError):
    """Raised when the viewer's role or verification forbids an action."""

    default_message = "You are not allowed to do that."


class SubmissionInProgressError(CarshareError):
    """Raised when the same form is submitted again before the first request finished."""

    default_message = "This form is already being submitted. Please wait."


class InvalidTransitionError(CarshareError):
    """Raised when a trip status change violates the lifecycle state machine."""

    default_message = "Error: invalid trip status change"


class ApiError(CarshareError):
    """Raised when the backend answers with an error status."""

    default_message = "The rental service rejected the request."

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(ApiError):
    """Raised on HTTP 404."""

    default_message = "Error: not found"


class TransitionConflictError(ApiError):
    """Raised on HTTP 409: the trip is not in the status the request expects."""

    default_message = "The trip is no longer in a state that allows this action."


class SessionExpiredError(CarshareError):
    """Raised on HTTP 401 from any endpoint."""

    default_message = "Your session has expired. Please log in again."


class ServiceUnavailableError(CarshareError):
    """Raised on network failures or responses that are not JSON."""

    default_message = "The rental service is unavailable. Please try again."
