"""Evaluation providers: question generation, answer scoring, closing summary."""
from .base import (
    AnswerScore,
    CandidateProfile,
    EvaluationProvider,
    GeneratedQuestion,
    InterviewSummary,
    QAPair,
    clamp_score,
)
from .factory import build_provider
from .fallback import FallbackEvaluationProvider
from .llm import LlmEvaluationProvider

__all__ = [
    "AnswerScore",
    "CandidateProfile",
    "EvaluationProvider",
    "FallbackEvaluationProvider",
    "GeneratedQuestion",
    "InterviewSummary",
    "LlmEvaluationProvider",
    "QAPair",
    "build_provider",
    "clamp_score",
]
