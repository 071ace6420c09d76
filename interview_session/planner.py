"""Turns the static plan and a candidate profile into concrete questions."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Sequence

from evaluation_provider.base import CandidateProfile, EvaluationProvider, GeneratedQuestion

from .errors import EvaluationProviderUnavailable
from .models import Question, Session, TranscriptEntry
from .plan import PlanSlot
from .state_machine import move_status

logger = logging.getLogger(__name__)

START_MESSAGE = "Interview started. Answer each question before the timer ends."


def deadline_after(now: datetime, seconds: int) -> datetime:
    return now + timedelta(seconds=seconds)


def build_questions(plan: Sequence[PlanSlot], generated: Sequence[GeneratedQuestion]) -> List[Question]:
    """Pair provider output with plan slots; slot order and limits always win."""

    if len(generated) != len(plan):
        raise EvaluationProviderUnavailable(
            f"Provider returned {len(generated)} questions for {len(plan)} plan slots",
            operation="question generation",
        )
    questions: List[Question] = []
    for index, (slot, item) in enumerate(zip(plan, generated)):
        text = (item.text or "").strip()
        if not text:
            raise EvaluationProviderUnavailable(
                f"Provider returned an empty question for slot {index}",
                operation="question generation",
            )
        questions.append(
            Question(prompt=text, difficulty=slot.difficulty, time_limit_seconds=slot.time_limit_seconds)
        )
    return questions


def generate_questions(session: Session, plan: Sequence[PlanSlot], provider: EvaluationProvider) -> List[Question]:
    profile = CandidateProfile.from_candidate(session.candidate)
    generated = provider.generate_questions(list(plan), profile)
    return build_questions(plan, generated)


def apply_plan(session: Session, questions: Sequence[Question], plan: Sequence[PlanSlot], now: datetime) -> Session:
    """Install the questions and open the first one; no-op once questions exist."""

    if session.questions:
        logger.info("Session %s already planned; keeping existing questions", session.id)
        return session
    if not questions:
        raise EvaluationProviderUnavailable("No questions to apply", operation="question generation")
    transcript = list(session.chat_transcript)
    transcript.append(TranscriptEntry(role="system", content=START_MESSAGE, created_at=now))
    return session.model_copy(
        update={
            "questions": list(questions),
            "difficulty_sequence": [slot.difficulty for slot in plan],
            "current_question_index": 0,
            "current_question_deadline": deadline_after(now, questions[0].time_limit_seconds),
            "started_at": now,
            "status": move_status(session, "in-progress"),
            "chat_transcript": transcript,
            "updated_at": now,
        }
    )


__all__ = ["START_MESSAGE", "apply_plan", "build_questions", "deadline_after", "generate_questions"]
