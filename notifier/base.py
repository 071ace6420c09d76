from __future__ import annotations  # Notifier contract and headless implementations

import logging
from typing import Any, Dict, Protocol

from observability import log_event

logger = logging.getLogger(__name__)


class Notifier(Protocol):  # Receives the serialized session after every persisted mutation
    def publish(self, session_id: str, payload: Dict[str, Any]) -> None: ...


class NullNotifier:  # Drops every update
    def publish(self, session_id: str, payload: Dict[str, Any]) -> None:
        return None


class LoggingNotifier:  # Records each update as a structured log event
    def publish(self, session_id: str, payload: Dict[str, Any]) -> None:
        log_event(
            "session_update",
            session_id,
            status=payload.get("status"),
            question_index=payload.get("currentQuestionIndex"),
        )
