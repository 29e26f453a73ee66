import json
import logging
import os
from typing import Dict, Optional

from frontend.relay_client import RelayClientError

logger = logging.getLogger(__name__)

SESSION_ID_KEY = "arc_session_id"
RELOAD_CONFIRMED_KEY = "arc_reload_confirmed"


class SessionError(Exception):
    pass


class MemoryStorage:
    """Key-value storage kept in memory."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage(MemoryStorage):
    """Key-value storage persisted to a JSON file, survives app reloads."""

    def __init__(self, path: str):
        self.path = path
        data = {}
        if os.path.exists(path):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning("Ignoring unreadable session storage %s: %s", path, e)
        super().__init__(data)

    def _flush(self):
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._data, f)

    def set(self, key, value):
        super().set(key, value)
        self._flush()

    def remove(self, key):
        super().remove(key)
        self._flush()


class SessionIdentifierManager:
    """
    Owns the session id that ties uploads and actions together.

    The id is kept in durable storage and reused across reloads, unless a
    new session was requested, in which case the next `acquire` mints one.
    """

    def __init__(self, relay, storage):
        self.relay = relay
        self.storage = storage

    @property
    def session_id(self) -> Optional[str]:
        return self.storage.get(SESSION_ID_KEY)

    def acquire(self) -> str:
        reload_confirmed = self.storage.get(RELOAD_CONFIRMED_KEY) == "true"
        stored = self.storage.get(SESSION_ID_KEY)

        if reload_confirmed or not stored:
            logger.info("Reload confirmed or no session_id, creating new session...")
            self.storage.remove(RELOAD_CONFIRMED_KEY)
            self.storage.remove(SESSION_ID_KEY)
            return self._mint()

        logger.info("Reusing stored session_id: %s", stored)
        return stored

    def replace(self, session_id: str) -> None:
        logger.info("Updating session_id: %s", session_id)
        self.storage.set(SESSION_ID_KEY, session_id)

    def request_new_session(self) -> None:
        self.storage.set(RELOAD_CONFIRMED_KEY, "true")

    def renew(self) -> str:
        logger.info("Clearing session_id")
        self.storage.remove(SESSION_ID_KEY)
        return self._mint()

    def _mint(self) -> str:
        try:
            session_id = self.relay.create_session()
        except RelayClientError as e:
            raise SessionError(e.message or "Failed to create session") from e
        if not session_id:
            raise SessionError("Invalid session response: No session_id")
        logger.info("New session created: %s", session_id)
        self.storage.set(SESSION_ID_KEY, session_id)
        return session_id
