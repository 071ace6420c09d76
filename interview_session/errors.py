"""Error taxonomy surfaced by the interview engine."""
from __future__ import annotations

from typing import List, Optional, Sequence


class InterviewError(Exception):  # Base class carrying a caller-visible kind
    kind = "interview_error"
    status_code = 500
    retryable = False

    def __init__(self, message: str, *, session_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.session_id = session_id

    def to_payload(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class SessionNotFound(InterviewError):
    kind = "session_not_found"
    status_code = 404

    def __init__(self, message: str = "Session not found") -> None:
        super().__init__(message)


class SessionExpired(InterviewError):
    kind = "session_expired"
    status_code = 410

    def __init__(self, session_id: Optional[str] = None) -> None:
        super().__init__("Session expired", session_id=session_id)


class ProfileIncomplete(InterviewError):
    kind = "profile_incomplete"
    status_code = 400

    def __init__(self, missing_fields: Sequence[str], *, session_id: Optional[str] = None) -> None:
        super().__init__("Profile incomplete", session_id=session_id)
        self.missing_fields: List[str] = list(missing_fields)

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["missingFields"] = self.missing_fields
        return payload


class InterviewNotActive(InterviewError):
    kind = "interview_not_active"
    status_code = 409

    def __init__(self, status: str, *, session_id: Optional[str] = None) -> None:
        super().__init__(f"Interview is not active (status={status})", session_id=session_id)
        self.status = status


class InterviewAlreadyCompleted(InterviewError):
    kind = "interview_completed"
    status_code = 409

    def __init__(self, session_id: Optional[str] = None) -> None:
        super().__init__("Interview already completed", session_id=session_id)


class NoActiveQuestion(InterviewError):
    """Cursor or question id points outside the planned questions."""

    kind = "no_active_question"
    status_code = 500


class ConcurrentModification(InterviewError):
    kind = "concurrent_modification"
    status_code = 409
    retryable = True


class EvaluationProviderUnavailable(InterviewError):
    kind = "evaluation_unavailable"
    status_code = 503
    retryable = True

    def __init__(self, message: str = "Evaluation provider unavailable", *, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation


__all__ = [
    "ConcurrentModification",
    "EvaluationProviderUnavailable",
    "InterviewAlreadyCompleted",
    "InterviewError",
    "InterviewNotActive",
    "NoActiveQuestion",
    "ProfileIncomplete",
    "SessionExpired",
    "SessionNotFound",
]
