"""Evaluation provider contract and the payloads it exchanges."""
from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from pydantic import BaseModel, Field, field_validator

from interview_session.models import Candidate
from interview_session.plan import Difficulty, PlanSlot


class GeneratedQuestion(BaseModel):
    text: str
    difficulty: Difficulty


class AnswerScore(BaseModel):
    score: float
    feedback: str = ""

    @field_validator("score")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_score(value)


class QAPair(BaseModel):
    question: str
    difficulty: Difficulty
    answer: str = ""
    score: Optional[float] = None
    feedback: str = ""


class InterviewSummary(BaseModel):
    summary: str
    recommendation: str = ""


class CandidateProfile(BaseModel):
    """Candidate facts shared with the provider (no attachment metadata)."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    has_resume: bool = False

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> "CandidateProfile":
        return cls(
            name=candidate.name,
            email=candidate.email,
            phone=candidate.phone,
            has_resume=candidate.resume is not None,
        )

    def display_name(self) -> str:
        return self.name or self.email or "Unknown"


class EvaluationProvider(Protocol):
    name: str

    def generate_questions(self, plan: Sequence[PlanSlot], profile: CandidateProfile) -> List[GeneratedQuestion]: ...

    def score_answer(
        self,
        question: str,
        answer: str,
        difficulty: Difficulty,
        profile: CandidateProfile,
    ) -> AnswerScore: ...

    def summarize(
        self,
        candidate: CandidateProfile,
        qa_pairs: Sequence[QAPair],
        average_score: float,
    ) -> InterviewSummary: ...


def clamp_score(value: float, low: float = 0.0, high: float = 10.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return low
    if number != number:  # NaN
        return low
    return max(low, min(high, number))


__all__ = [
    "AnswerScore",
    "CandidateProfile",
    "EvaluationProvider",
    "GeneratedQuestion",
    "InterviewSummary",
    "QAPair",
    "clamp_score",
]
