"""
Change notifier: per-room invalidation signals

The RoomStore publishes a room code after every committed mutation.
Notifications carry no state; subscribers re-fetch through the store.
"""
from collections import defaultdict
from threading import Lock
from typing import Callable, Dict, List
import logging

logger = logging.getLogger(__name__)

Callback = Callable[[str], None]


class ChangeNotifier:
    """Thread-safe registry of room subscribers"""

    def __init__(self):
        self._subscribers: Dict[str, List[Callback]] = defaultdict(list)
        self._lock = Lock()

    def subscribe(self, code: str, callback: Callback) -> Callable[[], None]:
        """
        Register a callback for one room.

        Returns:
            An unsubscribe handle; calling it more than once is harmless.
        """
        with self._lock:
            self._subscribers[code].append(callback)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(code)
                if callbacks and callback in callbacks:
                    callbacks.remove(callback)
                if callbacks is not None and not callbacks:
                    del self._subscribers[code]

        return unsubscribe

    def publish(self, code: str) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(code, ()))

        for callback in callbacks:
            try:
                callback(code)
            except Exception as e:
                # one broken subscriber must not block the others
                logger.error(f"Subscriber for room {code} failed: {e}", exc_info=True)

    def subscriber_count(self, code: str) -> int:
        with self._lock:
            return len(self._subscribers.get(code, ()))
