"""Aggregate scoring and closing summary."""
from __future__ import annotations

from datetime import datetime
from typing import List, Sequence

from evaluation_provider.base import CandidateProfile, EvaluationProvider, InterviewSummary, QAPair

from .models import Answer, Session, TranscriptEntry
from .state_machine import move_status


def _round1(value: float) -> float:
    """Round a float to one decimal place with stable formatting."""
    return float(f"{value:.1f}")


def average_score(answers: Sequence[Answer]) -> float:
    if not answers:
        return 0.0
    return _round1(sum(item.ai_score for item in answers) / len(answers))


def qa_pairs(session: Session) -> List[QAPair]:
    pairs: List[QAPair] = []
    for question in session.questions:
        answer = session.answer_for(question.id)
        pairs.append(
            QAPair(
                question=question.prompt,
                difficulty=question.difficulty,
                answer=answer.candidate_answer if answer else "",
                score=answer.ai_score if answer else None,
                feedback=answer.ai_feedback if answer else "",
            )
        )
    return pairs


def summarize(session: Session, average: float, provider: EvaluationProvider) -> InterviewSummary:
    profile = CandidateProfile.from_candidate(session.candidate)
    return provider.summarize(profile, qa_pairs(session), average)


def closing_line(final_score: float, recommendation: str) -> str:
    return f"Interview complete. Final score: {final_score}/10. {recommendation or ''}".strip()


def apply_final(session: Session, average: float, summary: InterviewSummary, now: datetime) -> Session:
    """Mark the session completed; a session that already has a score is returned untouched."""

    if session.final_score is not None:
        return session
    status = move_status(session, "completed")
    transcript = list(session.chat_transcript)
    transcript.append(
        TranscriptEntry(role="assistant", content=closing_line(average, summary.recommendation), created_at=now)
    )
    return session.model_copy(
        update={
            "final_score": average,
            "final_summary": summary.summary,
            "completed_at": now,
            "status": status,
            "current_question_deadline": None,
            "chat_transcript": transcript,
            "updated_at": now,
        }
    )


__all__ = ["apply_final", "average_score", "closing_line", "qa_pairs", "summarize"]
