"""Live evaluation provider backed by the LLM gateway."""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, Field

from config import LlmRoute, ProviderConfig
from interview_session.errors import EvaluationProviderUnavailable
from interview_session.plan import Difficulty, PlanSlot
from llm_gateway import HttpClient, LlmGatewayError, LlmModelUnsupported, LlmOutputInvalid, call
from observability import span

from .base import AnswerScore, CandidateProfile, GeneratedQuestion, InterviewSummary, QAPair
from .fallback import FallbackEvaluationProvider
from .prompts import question_set_task, score_task, summary_task

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class QuestionItem(BaseModel):
    difficulty: Optional[str] = None
    question: Optional[str] = None


class QuestionSetOut(BaseModel):
    questions: List[QuestionItem] = Field(default_factory=list)


class ScoreOut(BaseModel):
    score: float
    feedback: str = ""


class SummaryOut(BaseModel):
    summary: str = ""
    recommendation: str = ""


class LlmEvaluationProvider:
    """Calls an ordered list of model routes; moves on only when a route rejects its model."""

    name = "llm"

    def __init__(
        self,
        config: ProviderConfig,
        *,
        client: Optional[HttpClient] = None,
        fallback: Optional[FallbackEvaluationProvider] = None,
        invoke: Callable[..., BaseModel] = call,
    ) -> None:
        self._routes: List[LlmRoute] = config.ordered_routes()
        self._options = {"temperature": config.temperature}
        self._client = client
        self._fallback = fallback or FallbackEvaluationProvider()
        self._invoke = invoke

    def _run(self, operation: str, task: str, schema: Type[T]) -> T:
        for route in self._routes:
            try:
                return self._invoke(task, schema, cfg=route, client=self._client, options=self._options)
            except LlmModelUnsupported:
                logger.warning("Route %s rejected model %s for %s; trying next candidate", route.name, route.model, operation)
                continue
        raise EvaluationProviderUnavailable(
            f"No configured model supports {operation}",
            operation=operation,
        )

    def generate_questions(self, plan: Sequence[PlanSlot], profile: CandidateProfile) -> List[GeneratedQuestion]:
        key = self._fallback.candidate_key(profile)
        try:
            with span("provider.generate_questions", route_count=len(self._routes)):
                parsed = self._run("question generation", question_set_task(plan, profile), QuestionSetOut)
        except LlmOutputInvalid:
            logger.warning("Question set response invalid after retries; using fallback bank")
            return self._fallback.generate_questions(plan, profile, key=key)
        except LlmGatewayError as exc:
            raise EvaluationProviderUnavailable(str(exc), operation="question generation") from exc

        questions: List[GeneratedQuestion] = []
        for index, slot in enumerate(plan):
            item = parsed.questions[index] if index < len(parsed.questions) else None
            text = (item.question or "").strip() if item else ""
            if text:
                questions.append(GeneratedQuestion(text=text, difficulty=slot.difficulty))
            else:
                logger.info("Question slot %d empty in provider output; using fallback", index)
                questions.append(self._fallback.question_for_slot(slot, index, key))
        return questions

    def score_answer(
        self,
        question: str,
        answer: str,
        difficulty: Difficulty,
        profile: CandidateProfile,
    ) -> AnswerScore:
        try:
            with span("provider.score_answer", difficulty=difficulty):
                parsed = self._run("answer scoring", score_task(question, answer, difficulty, profile), ScoreOut)
        except LlmGatewayError as exc:
            raise EvaluationProviderUnavailable(str(exc), operation="answer scoring") from exc
        return AnswerScore(score=parsed.score, feedback=parsed.feedback.strip() or "Score generated by AI.")

    def summarize(
        self,
        candidate: CandidateProfile,
        qa_pairs: Sequence[QAPair],
        average_score: float,
    ) -> InterviewSummary:
        try:
            with span("provider.summarize", pairs=len(qa_pairs)):
                parsed = self._run("summarization", summary_task(candidate, qa_pairs, average_score), SummaryOut)
        except LlmGatewayError as exc:
            raise EvaluationProviderUnavailable(str(exc), operation="summarization") from exc
        return InterviewSummary(
            summary=parsed.summary.strip() or "Summary not available.",
            recommendation=parsed.recommendation.strip(),
        )


__all__ = ["LlmEvaluationProvider", "QuestionSetOut", "ScoreOut", "SummaryOut"]
