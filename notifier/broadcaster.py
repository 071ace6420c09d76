"""In-process fan-out of session updates to observers."""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Subscriber = Callable[[str, Dict[str, Any]], None]


class SessionBroadcaster:
    """Delivers each published payload to the subscribers of that session.

    A failing subscriber is logged and skipped; the others still receive the
    update.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Subscriber]] = {}
        self._lock = threading.Lock()

    def subscribe(self, session_id: str, callback: Subscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers.setdefault(session_id, []).append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(session_id, [])
                if callback in callbacks:
                    callbacks.remove(callback)
                if not callbacks:
                    self._subscribers.pop(session_id, None)

        return _unsubscribe

    def subscriber_count(self, session_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(session_id, []))

    def publish(self, session_id: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(session_id, []))
        for callback in callbacks:
            try:
                callback(session_id, payload)
            except Exception:  # noqa: BLE001
                logger.exception("Session observer failed for session %s", session_id)


__all__ = ["SessionBroadcaster", "Subscriber"]
