"""Records a scored answer and moves the question cursor."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from evaluation_provider.base import AnswerScore, CandidateProfile, EvaluationProvider, clamp_score
from observability import log_event

from .errors import NoActiveQuestion
from .models import Answer, Question, Session, TranscriptEntry
from .planner import deadline_after

logger = logging.getLogger(__name__)

BLANK_ANSWER_PLACEHOLDER = "[No answer provided]"
MAX_DURATION_MS = 10 * 60 * 1000


@dataclass(frozen=True)
class AnswerOutcome:
    session: Session
    answer: Answer
    next_question: Optional[Question]
    is_complete: bool


def clamp_duration(duration_ms: Optional[float], cap_ms: int = MAX_DURATION_MS) -> int:
    if duration_ms is None:
        return 0
    return int(max(0, min(cap_ms, duration_ms)))


def resolve_question(session: Session, question_id: Optional[str] = None) -> Question:
    """The question an answer targets: the current one, or an already answered one on retry."""

    if question_id is None:
        question = session.current_question()
        if question is None:
            _corrupt(session, f"cursor {session.current_question_index} outside {len(session.questions)} questions")
        return question
    index = session.question_index(question_id)
    if index is None or index > session.current_question_index or index >= len(session.questions):
        _corrupt(session, f"question {question_id} is not answerable at cursor {session.current_question_index}")
    return session.questions[index]


def _corrupt(session: Session, detail: str) -> None:
    logger.error("No active question for session %s: %s", session.id, detail)
    log_event("no_active_question", session.id, error=detail, status=session.status)
    raise NoActiveQuestion(f"No active question: {detail}", session_id=session.id)


def score_answer(session: Session, question: Question, answer: str, provider: EvaluationProvider) -> AnswerScore:
    profile = CandidateProfile.from_candidate(session.candidate)
    return provider.score_answer(question.prompt, answer, question.difficulty, profile)


def apply_answer(
    session: Session,
    question_id: str,
    answer_text: str,
    duration_ms: int,
    result: AnswerScore,
    now: datetime,
) -> AnswerOutcome:
    """Store the answer for ``question_id`` and advance when it was the current question.

    Answering an earlier question again replaces its record and leaves the
    cursor where it is, so ``len(answers)`` keeps tracking the cursor.
    """

    question = resolve_question(session, question_id)
    index = session.question_index(question.id)
    score = clamp_score(result.score)
    record = Answer(
        question_id=question.id,
        candidate_answer=answer_text or "",
        ai_score=score,
        ai_feedback=result.feedback,
        duration_ms=duration_ms,
        submitted_at=now,
    )

    answers: List[Answer] = [item for item in session.answers]
    existing = next((pos for pos, item in enumerate(answers) if item.question_id == question.id), None)
    if existing is not None:
        answers[existing] = record
    else:
        answers.append(record)

    transcript = list(session.chat_transcript)
    transcript.append(
        TranscriptEntry(
            role="candidate",
            content=(answer_text or "").strip() or BLANK_ANSWER_PLACEHOLDER,
            created_at=now,
        )
    )
    transcript.append(
        TranscriptEntry(role="assistant", content=result.feedback, created_at=now, metadata={"score": score})
    )

    cursor = session.current_question_index
    deadline = session.current_question_deadline
    if index == cursor:
        cursor += 1
        if cursor < len(session.questions):
            deadline = deadline_after(now, session.questions[cursor].time_limit_seconds)
        else:
            deadline = None

    updated = session.model_copy(
        update={
            "answers": answers,
            "chat_transcript": transcript,
            "current_question_index": cursor,
            "current_question_deadline": deadline,
            "updated_at": now,
        }
    )
    is_complete = cursor >= len(session.questions)
    next_question = None if is_complete else session.questions[cursor]
    return AnswerOutcome(session=updated, answer=record, next_question=next_question, is_complete=is_complete)


__all__ = [
    "AnswerOutcome",
    "BLANK_ANSWER_PLACEHOLDER",
    "MAX_DURATION_MS",
    "apply_answer",
    "clamp_duration",
    "resolve_question",
    "score_answer",
]
