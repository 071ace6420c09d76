"""Session document and its nested records."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .plan import Difficulty

SessionStatus = Literal["created", "waiting-profile", "ready", "in-progress", "completed", "expired"]
TranscriptRole = Literal["system", "assistant", "candidate"]
RequiredField = Literal["name", "email", "phone", "resume"]

REQUIRED_PROFILE_FIELDS: tuple[str, ...] = ("name", "email", "phone")
TERMINAL_STATUSES = frozenset({"completed", "expired"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _Document(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ResumeAttachment(_Document):  # Uploaded resume metadata, the file itself lives elsewhere
    original_name: str
    stored_name: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = Field(default=None, ge=0)
    uploaded_at: datetime = Field(default_factory=utcnow)


class Candidate(_Document):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    resume: Optional[ResumeAttachment] = None


class Question(_Document):
    id: str = Field(default_factory=lambda: uuid4().hex)
    prompt: str
    difficulty: Difficulty
    time_limit_seconds: int = Field(gt=0)


class Answer(_Document):
    question_id: str
    candidate_answer: str = ""
    ai_score: float = Field(ge=0.0, le=10.0)
    ai_feedback: str = ""
    duration_ms: int = Field(default=0, ge=0)
    submitted_at: datetime = Field(default_factory=utcnow)


class TranscriptEntry(_Document):
    role: TranscriptRole
    content: str
    created_at: datetime = Field(default_factory=utcnow)
    metadata: Optional[Dict[str, Any]] = None


class Session(_Document):
    """Aggregate root for one candidate interview.

    Instances are never mutated; every transition returns a copy built with
    ``model_copy(update=...)``. ``version`` belongs to the store and is bumped
    on every successful save.
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    invite_token: str = Field(default_factory=lambda: uuid4().hex)
    interviewer_id: Optional[str] = None
    status: SessionStatus = "created"
    candidate: Candidate = Field(default_factory=Candidate)
    notes: Optional[str] = None
    missing_fields: List[RequiredField] = Field(default_factory=list)
    questions: List[Question] = Field(default_factory=list)
    answers: List[Answer] = Field(default_factory=list)
    chat_transcript: List[TranscriptEntry] = Field(default_factory=list)
    current_question_index: int = Field(default=0, ge=0)
    current_question_deadline: Optional[datetime] = None
    difficulty_sequence: List[Difficulty] = Field(default_factory=list)
    final_score: Optional[float] = None
    final_summary: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    version: int = Field(default=0, ge=0)

    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None

    def question_index(self, question_id: str) -> Optional[int]:
        for index, question in enumerate(self.questions):
            if question.id == question_id:
                return index
        return None

    def answer_for(self, question_id: str) -> Optional[Answer]:
        return next((item for item in self.answers if item.question_id == question_id), None)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


def serialize_session(session: Session) -> Dict[str, Any]:
    """JSON-ready camelCase payload sent to clients and observers."""

    return session.model_dump(mode="json", by_alias=True)


__all__ = [
    "Answer",
    "Candidate",
    "REQUIRED_PROFILE_FIELDS",
    "RequiredField",
    "ResumeAttachment",
    "Question",
    "Session",
    "SessionStatus",
    "TERMINAL_STATUSES",
    "TranscriptEntry",
    "TranscriptRole",
    "serialize_session",
    "utcnow",
]
