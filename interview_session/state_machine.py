"""Session status transitions.

Every function here is pure: it receives the prior ``Session`` and returns a
``Transition`` holding the next ``Session`` plus the effects the engine must
carry out (provider calls, publishing). Guards raise the errors from
:mod:`interview_session.errors`.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .errors import (
    InterviewAlreadyCompleted,
    InterviewNotActive,
    ProfileIncomplete,
    SessionExpired,
    SessionNotFound,
)
from .models import (
    REQUIRED_PROFILE_FIELDS,
    Candidate,
    ResumeAttachment,
    Session,
    SessionStatus,
)

EMAIL_PATTERN = r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$"


class Effect(str, Enum):
    PLAN_QUESTIONS = "plan_questions"
    SCORE_ANSWER = "score_answer"
    FINALIZE = "finalize"
    PUBLISH = "publish"


@dataclass(frozen=True)
class Transition:
    session: Session
    effects: Tuple[Effect, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.effects)


class ProfileUpdate(BaseModel):
    """Fields a candidate may submit through the profile form."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(default=None, min_length=6, max_length=30)


class ResumeExtraction(BaseModel):
    """Fields pulled out of an uploaded resume plus the stored file's metadata."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    resume: ResumeAttachment


# status -> statuses reachable from it
ALLOWED_TRANSITIONS: Dict[SessionStatus, frozenset] = {
    "created": frozenset({"waiting-profile", "ready", "in-progress", "completed", "expired"}),
    "waiting-profile": frozenset({"waiting-profile", "ready", "in-progress", "completed", "expired"}),
    "ready": frozenset({"waiting-profile", "ready", "in-progress", "completed", "expired"}),
    "in-progress": frozenset({"in-progress", "completed", "expired"}),
    "completed": frozenset(),
    "expired": frozenset(),
}


def can_transition(current: SessionStatus, target: SessionStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def move_status(session: Session, target: SessionStatus) -> SessionStatus:
    """Return ``target`` when the transition table allows it, else raise ``InterviewNotActive``."""

    if not can_transition(session.status, target):
        raise InterviewNotActive(session.status, session_id=session.id)
    return target


def ensure_active(session: Optional[Session]) -> Session:
    """Reject missing and expired sessions."""

    if session is None:
        raise SessionNotFound()
    if session.status == "expired":
        raise SessionExpired(session.id)
    return session


def ensure_mutable(session: Optional[Session]) -> Session:
    session = ensure_active(session)
    if session.status == "completed":
        raise InterviewAlreadyCompleted(session.id)
    return session


def _present(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def compute_missing_fields(candidate: Candidate) -> List[str]:
    """Required fields not yet satisfied, always in name/email/phone/resume order."""

    missing = [field for field in REQUIRED_PROFILE_FIELDS if not _present(getattr(candidate, field))]
    if candidate.resume is None:
        missing.append("resume")
    return missing


def profile_status(session: Session, missing: List[str]) -> SessionStatus:
    if missing:
        return "waiting-profile"
    return "in-progress" if session.questions else "ready"


def _with_candidate(session: Session, candidate: Candidate, now: datetime) -> Session:
    missing = compute_missing_fields(candidate)
    status = move_status(session, profile_status(session, missing))
    return session.model_copy(
        update={
            "candidate": candidate,
            "missing_fields": missing,
            "status": status,
            "updated_at": now,
        }
    )


def apply_profile(session: Session, update: ProfileUpdate, now: datetime) -> Transition:
    """Merge submitted profile fields; blank values never clear known ones."""

    session = ensure_mutable(session)
    changes = {key: value for key, value in update.model_dump().items() if _present(value)}
    candidate = session.candidate.model_copy(update=changes)
    return Transition(_with_candidate(session, candidate, now), (Effect.PUBLISH,))


def apply_resume(session: Session, extraction: ResumeExtraction, now: datetime) -> Transition:
    """Attach a resume; extracted fields only fill gaps left by known ones."""

    session = ensure_mutable(session)
    known = session.candidate
    candidate = known.model_copy(
        update={
            "name": known.name if _present(known.name) else extraction.name or known.name,
            "email": known.email if _present(known.email) else extraction.email or known.email,
            "phone": known.phone if _present(known.phone) else extraction.phone or known.phone,
            "resume": extraction.resume,
        }
    )
    return Transition(_with_candidate(session, candidate, now), (Effect.PUBLISH,))


def request_start(session: Session) -> Transition:
    """Validate a start request.

    A session already in progress is resumed as is (no effects), which makes
    repeated start calls after a reload harmless.
    """

    session = ensure_mutable(session)
    missing = compute_missing_fields(session.candidate)
    if missing:
        raise ProfileIncomplete(missing, session_id=session.id)
    if session.status == "in-progress" or session.questions:
        return Transition(session)
    return Transition(session, (Effect.PLAN_QUESTIONS, Effect.PUBLISH))


def request_answer(session: Session) -> Transition:
    session = ensure_active(session)
    if session.status == "completed":
        raise InterviewAlreadyCompleted(session.id)
    if session.status != "in-progress":
        raise InterviewNotActive(session.status, session_id=session.id)
    return Transition(session, (Effect.SCORE_ANSWER, Effect.PUBLISH))


def request_completion(session: Session) -> Transition:
    session = ensure_active(session)
    if session.status == "completed" or session.final_score is not None:
        return Transition(session)
    return Transition(session, (Effect.FINALIZE, Effect.PUBLISH))


def expire(session: Optional[Session], now: datetime) -> Transition:
    session = ensure_active(session)
    if session.status == "completed":
        raise InterviewAlreadyCompleted(session.id)
    expired = session.model_copy(
        update={
            "status": move_status(session, "expired"),
            "current_question_deadline": None,
            "updated_at": now,
        }
    )
    return Transition(expired, (Effect.PUBLISH,))


def new_session(
    *,
    email: str,
    name: Optional[str] = None,
    phone: Optional[str] = None,
    notes: Optional[str] = None,
    interviewer_id: Optional[str] = None,
    difficulties: Optional[List[str]] = None,
    now: datetime,
) -> Session:
    """Build the document issued with a fresh invite."""

    candidate = Candidate(name=name, email=email, phone=phone)
    missing = compute_missing_fields(candidate)
    return Session(
        interviewer_id=interviewer_id,
        status="waiting-profile" if missing else "ready",
        candidate=candidate,
        notes=notes,
        missing_fields=missing,
        difficulty_sequence=list(difficulties or []),
        created_at=now,
        updated_at=now,
    )


__all__ = [
    "ALLOWED_TRANSITIONS",
    "Effect",
    "ProfileUpdate",
    "ResumeExtraction",
    "Transition",
    "apply_profile",
    "apply_resume",
    "can_transition",
    "compute_missing_fields",
    "ensure_active",
    "ensure_mutable",
    "expire",
    "move_status",
    "new_session",
    "profile_status",
    "request_answer",
    "request_completion",
    "request_start",
]
