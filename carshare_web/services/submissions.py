"""One outstanding request per form per user."""

import logging
import threading
from contextlib import contextmanager

from carshare_web.exceptions import SubmissionInProgressError

logger = logging.getLogger(__name__)


class InFlightRegistry:
    """Set of (user, form) keys whose submission is currently running."""

    def __init__(self):
        self._pending: set[tuple[str, str]] = set()
        self._lock = threading.Lock()

    def is_busy(self, user_key: str, form_key: str) -> bool:
        with self._lock:
            return (user_key, form_key) in self._pending

    @contextmanager
    def guard(self, user_key: str, form_key: str):
        """Hold the (user, form) slot for the duration of the block.

        Raises SubmissionInProgressError if the slot is already held.
        """
        key = (user_key, form_key)
        with self._lock:
            if key in self._pending:
                logger.warning(f"Duplicate submission of {form_key} by {key[0]}")
                raise SubmissionInProgressError()
            self._pending.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._pending.discard(key)

    def clear(self) -> None:
        with self._lock:
            self._pending.clear()


IN_FLIGHT = InFlightRegistry()
