"""Deterministic, network-free evaluation provider."""
from __future__ import annotations

import hashlib
import itertools
import math
import threading
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from interview_session.plan import Difficulty, PlanSlot

from .base import AnswerScore, CandidateProfile, GeneratedQuestion, InterviewSummary, QAPair

QUESTION_BANK: Dict[str, Tuple[str, ...]] = {
    "easy": (
        "Explain what React hooks are for and give one example of a hook you use often.",
        "What is the difference between == and === in JavaScript?",
        "How does destructuring assignment work in modern JavaScript?",
    ),
    "medium": (
        "How would you organize state management in a mid-sized React application?",
        "How do you design a REST API in Node.js that supports pagination and filtering?",
        "Compare React context with prop drilling. When would you pick each?",
    ),
    "hard": (
        "Walk through how you would fix a React app that re-renders too often in a deep component tree.",
        "Design a scalable way to accept large file uploads in a Node.js and Express backend.",
        "How would you enforce role-based access control end to end in a server-rendered React app?",
    ),
}

DOMAIN_KEYWORDS: Tuple[str, ...] = (
    "React",
    "Node",
    "JavaScript",
    "TypeScript",
    "Express",
    "API",
    "useState",
    "useEffect",
)

CHARS_PER_FULL_SCORE = 200
MIN_SCORE = 2
MAX_SCORE = 10


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def seed_for(key: str) -> int:
    """Stable integer seed from the first 8 hex digits of a sha1 digest."""

    return int(hashlib.sha1(key.encode("utf-8")).hexdigest()[:8], 16)


def fallback_question(difficulty: Difficulty, seed: int) -> str:
    bank = QUESTION_BANK[difficulty]
    return bank[seed % len(bank)]


def fallback_score(answer: str, keywords: Sequence[str] = DOMAIN_KEYWORDS) -> int:
    sanitized = (answer or "").strip()
    if not sanitized:
        return MIN_SCORE
    length_score = min(MAX_SCORE, _round_half_up(len(sanitized) / CHARS_PER_FULL_SCORE * MAX_SCORE))
    bonus = 1 if any(keyword in sanitized for keyword in keywords) else 0
    return min(MAX_SCORE, max(MIN_SCORE, length_score + bonus))


class FallbackEvaluationProvider:
    """Used when no live backend is configured, and by the live provider for blank question slots."""

    name = "fallback"

    def __init__(self, keywords: Sequence[str] = DOMAIN_KEYWORDS) -> None:
        self._keywords = tuple(keywords)
        self._counter: Iterator[int] = itertools.count(1)
        self._counter_lock = threading.Lock()

    def candidate_key(self, profile: CandidateProfile) -> str:
        if profile.email:
            return profile.email.strip().lower()
        if profile.name:
            return profile.name.strip()
        with self._counter_lock:
            return f"anonymous-{next(self._counter)}"

    def question_for_slot(self, slot: PlanSlot, index: int, key: str) -> GeneratedQuestion:
        return GeneratedQuestion(
            text=fallback_question(slot.difficulty, seed_for(key) + index),
            difficulty=slot.difficulty,
        )

    def generate_questions(
        self,
        plan: Sequence[PlanSlot],
        profile: CandidateProfile,
        key: Optional[str] = None,
    ) -> List[GeneratedQuestion]:
        key = key or self.candidate_key(profile)
        return [self.question_for_slot(slot, index, key) for index, slot in enumerate(plan)]

    def score_answer(
        self,
        question: str,
        answer: str,
        difficulty: Difficulty,
        profile: CandidateProfile,
    ) -> AnswerScore:
        score = fallback_score(answer, self._keywords)
        if (answer or "").strip():
            feedback = f"Fallback scoring: answer length implies score {score}/10."
        else:
            feedback = f"Fallback scoring: no answer provided, score {MIN_SCORE}/10."
        return AnswerScore(score=score, feedback=feedback)

    def summarize(
        self,
        candidate: CandidateProfile,
        qa_pairs: Sequence[QAPair],
        average_score: float,
    ) -> InterviewSummary:
        return InterviewSummary(
            summary=(
                f"Candidate {candidate.display_name()} completed the interview "
                f"with an average score of {average_score:.1f}."
            ),
            recommendation="",
        )


__all__ = [
    "DOMAIN_KEYWORDS",
    "FallbackEvaluationProvider",
    "QUESTION_BANK",
    "fallback_question",
    "fallback_score",
    "seed_for",
]
