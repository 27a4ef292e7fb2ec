# taskhub/client/store.py
import logging
import threading
from typing import Callable, List

logger = logging.getLogger(__name__)

Listener = Callable[[int], None]


class NotificationStore:
    """Holds the unread notification count and tells subscribers when it changes"""

    def __init__(self, unread_count: int = 0):
        self._unread_count = unread_count
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    @property
    def unread_count(self) -> int:
        return self._unread_count

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener; returns a callable that removes it again"""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _update(self, compute: Callable[[int], int]) -> bool:
        # Read and write in one lock acquisition
        with self._lock:
            count = max(int(compute(self._unread_count)), 0)
            if count == self._unread_count:
                return False
            self._unread_count = count
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(count)
            except Exception as e:
                logger.error(f"Unread count listener failed: {e}")
        return True

    def set_unread_count(self, count: int) -> bool:
        """Store count; listeners only hear about actual changes"""
        return self._update(lambda current: count)

    def decrement(self, by: int = 1) -> bool:
        return self._update(lambda current: current - by)

    def clear(self) -> bool:
        return self.set_unread_count(0)
