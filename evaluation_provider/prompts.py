from __future__ import annotations  # Task prompts for the live evaluation provider

import json
from textwrap import dedent
from typing import Any, Sequence

from interview_session.plan import PlanSlot

from .base import CandidateProfile, QAPair

QUESTION_SET_TEMPLATE = """
    You are an AI interviewer for a full-stack (React + Node.js) role.
    Return exactly {count} interview questions as JSON: {{"questions": [{{"difficulty": "easy|medium|hard", "question": "text"}}]}}.
    Keep the order and difficulty of the plan below. Each question must test practical skills and be answerable within its time limit.

    Candidate context: {context}
    Difficulty plan:
    {slots}
"""

SCORE_TEMPLATE = """
    You are grading a full-stack interview answer.
    Return JSON with keys score (number from 0 to 10) and feedback (one or two sentences of constructive feedback).

    Question ({difficulty}): {question}
    Candidate: {candidate}
    Answer: {answer}
"""

SUMMARY_TEMPLATE = """
    Summarize this interview in at most 120 words.
    Return JSON with keys summary (string) and recommendation (string). Do not include markdown.

    Candidate: {candidate}
    Average score: {average:.2f}
    QA pairs: {pairs}
"""


def _render(template: str, **values: Any) -> str:  # Dedent before substitution so multi-line values stay intact
    return dedent(template).strip().format(**values)


def question_set_task(plan: Sequence[PlanSlot], profile: CandidateProfile) -> str:
    slots = "\n".join(
        f"{index + 1}. Difficulty: {slot.difficulty} (time limit {slot.time_limit_seconds}s)"
        for index, slot in enumerate(plan)
    )
    context = ", ".join(value for value in (profile.name, profile.email, profile.phone) if value) or "Unknown candidate"
    return _render(QUESTION_SET_TEMPLATE, count=len(plan), context=context, slots=slots)


def score_task(question: str, answer: str, difficulty: str, profile: CandidateProfile) -> str:
    return _render(
        SCORE_TEMPLATE,
        difficulty=difficulty,
        question=question,
        candidate=profile.model_dump_json(),
        answer=answer or "<<blank>>",
    )


def summary_task(candidate: CandidateProfile, qa_pairs: Sequence[QAPair], average_score: float) -> str:
    pairs = json.dumps([pair.model_dump() for pair in qa_pairs], ensure_ascii=False)
    return _render(SUMMARY_TEMPLATE, candidate=candidate.model_dump_json(), average=average_score, pairs=pairs)


__all__ = ["question_set_task", "score_task", "summary_task"]
