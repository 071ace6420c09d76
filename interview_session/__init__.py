"""Interview session lifecycle: data model, plan and error taxonomy.

The engine lives in :mod:`interview_session.engine`.
"""
from .errors import (
    ConcurrentModification,
    EvaluationProviderUnavailable,
    InterviewAlreadyCompleted,
    InterviewError,
    InterviewNotActive,
    NoActiveQuestion,
    ProfileIncomplete,
    SessionExpired,
    SessionNotFound,
)
from .models import Answer, Candidate, Question, ResumeAttachment, Session, TranscriptEntry, serialize_session
from .plan import QUESTION_PLAN, PlanSlot

__all__ = [
    "Answer",
    "Candidate",
    "ConcurrentModification",
    "EvaluationProviderUnavailable",
    "InterviewAlreadyCompleted",
    "InterviewError",
    "InterviewNotActive",
    "NoActiveQuestion",
    "PlanSlot",
    "ProfileIncomplete",
    "QUESTION_PLAN",
    "Question",
    "ResumeAttachment",
    "Session",
    "SessionExpired",
    "SessionNotFound",
    "TranscriptEntry",
    "serialize_session",
]
