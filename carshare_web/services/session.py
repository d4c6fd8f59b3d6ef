"""
Session identity: who is signed in and which bearer token to send.

A ``SessionContext`` wraps the Flask session (or any mutable mapping in
tests). The application builds one per request and hands it to every
protected view as its ``identity`` argument; views never read the raw
session themselves. It is started on login/register and cleared on
logout or on a 401 from the backend.
"""

from __future__ import annotations

import logging
import uuid
from typing import MutableMapping, Optional

from carshare_web.models.user import User

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"
USER_KEY = "auth_user"
VISITOR_KEY = "visitor_id"


class SessionContext:
    def __init__(self, store: MutableMapping):
        self._store = store

    # ---------- Lifecycle ----------
    def start(self, token: str, user: User) -> None:
        """Begin a signed-in session (login or register)."""
        self._store[TOKEN_KEY] = token
        self._store[USER_KEY] = user.to_dict()
        logger.info("Session started for user %s (%s)", user.user_id, user.role)

    def refresh_user(self, user: User) -> None:
        """Replace the cached profile, e.g. after the verification flag changed."""
        if not self.is_authenticated:
            return
        self._store[USER_KEY] = user.to_dict()

    def clear(self) -> None:
        """Tear the session down (logout or 401). Flash messages survive."""
        if self._store.get(TOKEN_KEY):
            logger.info("Session cleared for user %s", self.user_id)
        self._store.pop(TOKEN_KEY, None)
        self._store.pop(USER_KEY, None)

    # ---------- Read-only view ----------
    @property
    def token(self) -> Optional[str]:
        return self._store.get(TOKEN_KEY)

    @property
    def user(self) -> Optional[User]:
        return User.from_dict(self._store.get(USER_KEY))

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and self._store.get(USER_KEY) is not None

    @property
    def user_id(self) -> Optional[str]:
        user = self.user
        return user.user_id if user else None

    @property
    def role(self) -> Optional[str]:
        user = self.user
        return user.role if user else None

    @property
    def is_host(self) -> bool:
        user = self.user
        return bool(user and user.is_host)

    @property
    def is_renter(self) -> bool:
        user = self.user
        return bool(user and user.is_renter)

    @property
    def is_verified(self) -> bool:
        user = self.user
        return bool(user and user.is_verified)

    @property
    def visitor_id(self) -> str:
        """Random id for this browser session, created on first use; survives logout."""
        visitor = self._store.get(VISITOR_KEY)
        if not visitor:
            visitor = uuid.uuid4().hex
            self._store[VISITOR_KEY] = visitor
        return visitor

    @property
    def submitter_key(self) -> str:
        """Who owns an in-flight submission: the user when signed in, else the browser session."""
        return self.user_id or f"visitor:{self.visitor_id}"
