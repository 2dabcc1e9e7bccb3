"""
Session identity derivation, reset and expiration sweep.

The session id and its creation timestamp live in the injected
storage under ``tracker_session_id`` and ``tracker_session_timestamp``.
An injected id always wins and is persisted with a fresh timestamp,
bypassing any expiry comparison.  Otherwise a stored id younger than
the timeout is reused, and anything else yields a new UUID v4.
"""

from __future__ import annotations

from search_tracker.browser import storage as storage_mod
from search_tracker.utils import clock as clock_mod
from search_tracker.utils import logger
from search_tracker.utils.randomness import RandomSource

log = logger.create_logger("Session")


class SessionStore:
    """Owns the current session id and its persisted state."""

    def __init__(
        self,
        storage: storage_mod.Storage,
        clock: clock_mod.Clock,
        random_source: RandomSource,
        timeout_seconds: float,
        injected_session_id: str | None = None,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._random = random_source
        self._timeout = timeout_seconds
        self._injected = injected_session_id
        self.session_id = self.get_or_create_session_id()

    def get_or_create_session_id(self) -> str:
        """Derive the session id, persisting it with a timestamp when new."""
        if self._injected:
            self._persist(self._injected)
            log.debug("Using injected session id", {"sessionId": self._injected})
            return self._injected

        stored_id = self._storage.get_item(storage_mod.SESSION_ID_KEY)
        stored_ts = self._storage.get_item(storage_mod.SESSION_TIMESTAMP_KEY)
        if stored_id and stored_ts and not self._is_expired(stored_ts):
            return stored_id

        session_id = self._random.uuid4()
        self._persist(session_id)
        log.info("Started new session", {"sessionId": session_id, "previous": stored_id})
        return session_id

    def reset_session(self) -> str:
        """Clear persisted session state and derive a new id."""
        self._storage.remove_item(storage_mod.SESSION_ID_KEY)
        self._storage.remove_item(storage_mod.SESSION_TIMESTAMP_KEY)
        self.session_id = self.get_or_create_session_id()
        return self.session_id

    def check_expiration(self) -> bool:
        """Reset the session when the stored timestamp is past the timeout.

        Safe to call repeatedly; it does nothing while the session is
        still fresh or when no timestamp is stored.

        Returns:
            True when the session was reset.
        """
        stored_ts = self._storage.get_item(storage_mod.SESSION_TIMESTAMP_KEY)
        if not stored_ts or not self._is_expired(stored_ts):
            return False
        log.info("Session expired", {"sessionId": self.session_id})
        self.reset_session()
        return True

    def _is_expired(self, stored_ts: str) -> bool:
        created = clock_mod.parse_iso(stored_ts)
        if created is None:
            return True
        age = (self._clock.now() - created).total_seconds()
        return age >= self._timeout

    def _persist(self, session_id: str) -> None:
        self._storage.set_item(storage_mod.SESSION_ID_KEY, session_id)
        self._storage.set_item(storage_mod.SESSION_TIMESTAMP_KEY, clock_mod.to_iso(self._clock.now()))
