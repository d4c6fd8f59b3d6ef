from __future__ import annotations

import logging

from carshare_web.exceptions import ApiError, ServiceUnavailableError, SessionExpiredError
from carshare_web.models.user import User
from carshare_web.services import common
from carshare_web.services.forms import LoginForm, RegisterForm
from carshare_web.services.session import SessionContext

logger = logging.getLogger(__name__)


class AuthService:
    """Login / register / profile refresh against the backend's auth endpoints."""

    @staticmethod
    def _open_session(identity: SessionContext, body, fallback: str):
        """Start the session from an AuthResponse body. Returns (ok, message)."""
        body = body or {}
        if not body.get("success"):
            return False, body.get("message") or fallback
        user = User.from_dict(body.get("user"))
        token = body.get("token")
        if not token or user is None:
            return True, body.get("message") or "Registration successful. Please login."
        identity.start(token, user)
        return True, f"Welcome, {user.name}!"

    @staticmethod
    def login(identity: SessionContext, form: LoginForm):
        """Validate and submit the login form. Returns (ok, message)."""
        form.validate()
        try:
            with common.submission_guard(identity, "login"):
                body = common._api().login(form.email, form.password)
        except (ApiError, ServiceUnavailableError) as e:
            return False, common.api_message(e, "Login failed")
        return AuthService._open_session(identity, body, "Invalid credentials")

    @staticmethod
    def register(identity: SessionContext, form: RegisterForm):
        """Validate and submit the registration form. Returns (ok, message)."""
        form.validate()
        try:
            with common.submission_guard(identity, "register"):
                body = common._api().register(form.to_payload())
        except (ApiError, ServiceUnavailableError) as e:
            return False, common.api_message(e, "Registration failed")
        return AuthService._open_session(identity, body, "Registration failed")

    @staticmethod
    def refresh(identity: SessionContext) -> User | None:
        """
        Re-read the profile from ``/auth/me`` so a changed verification flag shows up.
        The backend reports a dead token as ``success: false``; that is treated
        like a 401. Transport failures keep the cached profile.
        """
        try:
            body = common._api(identity).current_user() or {}
        except (ApiError, ServiceUnavailableError) as e:
            logger.warning(f"Profile refresh failed: {e}")
            return identity.user
        if not body.get("success"):
            raise SessionExpiredError(body.get("message"))
        user = User.from_dict(body.get("user"))
        if user is not None:
            identity.refresh_user(user)
        return user

    @staticmethod
    def logout(identity: SessionContext) -> None:
        identity.clear()
