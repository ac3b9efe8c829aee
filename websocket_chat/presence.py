"""
Process-local presence registry.

Maps each online user to the channel name of their live connection. One
connection per user: registering again evicts the previous handle. All
methods are synchronous, so no mutation ever spans an await.

A shared-cache implementation with the same methods can replace
``registry`` for multi-process deployments.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class PresenceRegistry:
    def __init__(self):
        self._handles = {}
        self._lock = threading.Lock()

    def register(self, user_id, handle):
        """
        Record ``handle`` as the live connection of ``user_id``.

        Returns the handle that was evicted, or None.
        """
        with self._lock:
            previous = self._handles.get(user_id)
            self._handles[user_id] = handle
        if previous is not None and previous != handle:
            logger.info('Connection %s for user %s evicted by %s', previous, user_id, handle)
            return previous
        return None

    def unregister(self, user_id, handle):
        """
        Forget ``user_id`` if ``handle`` is still its registered connection.

        Returns True when the entry was removed. A handle that was already
        evicted by a newer connection leaves the registry untouched.
        """
        with self._lock:
            if self._handles.get(user_id) != handle:
                return False
            del self._handles[user_id]
        return True

    def is_online(self, user_id):
        return user_id in self._handles

    def handle_for(self, user_id):
        return self._handles.get(user_id)

    def online_user_ids(self):
        with self._lock:
            return set(self._handles)

    def clear(self):
        with self._lock:
            self._handles.clear()


registry = PresenceRegistry()
