"""Interview engine: one load, compute, persist and notify per inbound action."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar, Union

from config.settings import settings
from evaluation_provider.base import EvaluationProvider, InterviewSummary
from notifier import Notifier, NullNotifier
from observability import log_event, span
from storage.sessions import SessionStore, SortKey, SortOrder, StaleSessionError

from . import evaluator, finalizer, planner
from .errors import ConcurrentModification, EvaluationProviderUnavailable, InterviewError, SessionNotFound
from .models import Answer, Question, Session, serialize_session, utcnow
from .plan import QUESTION_PLAN, PlanSlot, difficulty_sequence
from .state_machine import (
    Effect,
    ProfileUpdate,
    ResumeExtraction,
    Transition,
    apply_profile,
    apply_resume,
    ensure_active,
    expire,
    new_session,
    request_answer,
    request_completion,
    request_start,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True)
class StartResult:
    session: Session
    current_question: Optional[Question]
    deadline: Optional[datetime]


@dataclass(frozen=True)
class SubmitResult:
    session: Session
    answer: Answer
    next_question: Optional[Question]
    is_complete: bool


class InterviewEngine:
    """Runs candidate and interviewer actions against the session store.

    Provider calls happen before the document is re-loaded for the write, so
    no exclusive resource is held while waiting on them. Saves use the
    store's version check; on a conflict the pure computation is re-applied
    to the fresh document.
    """

    def __init__(
        self,
        store: SessionStore,
        provider: EvaluationProvider,
        notifier: Optional[Notifier] = None,
        *,
        plan: Sequence[PlanSlot] = QUESTION_PLAN,
        clock: Callable[[], datetime] = utcnow,
        max_save_attempts: Optional[int] = None,
        max_duration_ms: Optional[int] = None,
    ) -> None:
        self._store = store
        self._provider = provider
        self._notifier: Notifier = notifier or NullNotifier()
        self._plan = tuple(plan)
        self._clock = clock
        self._max_attempts = max_save_attempts or settings.SAVE_MAX_ATTEMPTS
        self._max_duration_ms = max_duration_ms if max_duration_ms is not None else settings.ANSWER_MAX_DURATION_MS

    @property
    def plan(self) -> Tuple[PlanSlot, ...]:
        return self._plan

    # ------------------------------------------------------------------
    # Unit of work helpers
    # ------------------------------------------------------------------
    def _commit(
        self,
        action: str,
        load: Callable[[], Optional[Session]],
        compute: Callable[[Optional[Session]], Tuple[Transition, R]],
    ) -> Tuple[Session, R]:
        for attempt in range(1, self._max_attempts + 1):
            transition, extra = compute(load())
            if not transition.changed:
                return transition.session, extra
            try:
                saved = self._store.save(transition.session)
            except StaleSessionError:
                logger.info("Retrying %s for session %s after version conflict (attempt %d)", action, transition.session.id, attempt)
                continue
            log_event(
                action,
                saved.id,
                action=action,
                status=saved.status,
                question_index=saved.current_question_index,
            )
            if Effect.PUBLISH in transition.effects:
                self._publish(saved)
            return saved, extra
        log_event("concurrent_modification", "-", action=action, outcome="gave_up")
        raise ConcurrentModification(f"Session changed concurrently during {action}; retry the request")

    def _publish(self, session: Session) -> None:
        try:
            self._notifier.publish(session.id, serialize_session(session))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Notifier failed for session %s", session.id)
            log_event("notify_failed", session.id, error=str(exc))

    def _call_provider(self, operation: str, session: Session, fn: Callable[[], R]) -> R:
        try:
            with span(f"provider.{operation}", session.id):
                return fn()
        except EvaluationProviderUnavailable as exc:
            log_event("provider_failed", session.id, name=operation, error=exc.message)
            raise
        except InterviewError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("Evaluation provider failed during %s for session %s", operation, session.id)
            log_event("provider_failed", session.id, name=operation, error=str(exc))
            raise EvaluationProviderUnavailable(str(exc) or "Evaluation provider failed", operation=operation) from exc

    def _by_token(self, token: str) -> Callable[[], Optional[Session]]:
        return lambda: self._store.load_by_token(token)

    def _by_id(self, session_id: str) -> Callable[[], Optional[Session]]:
        return lambda: self._store.load_by_id(session_id)

    # ------------------------------------------------------------------
    # Interviewer-facing actions
    # ------------------------------------------------------------------
    def create_session(
        self,
        email: str,
        *,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        notes: Optional[str] = None,
        interviewer_id: Optional[str] = None,
    ) -> Session:
        now = self._clock()
        session = new_session(
            email=email,
            name=name,
            phone=phone,
            notes=notes,
            interviewer_id=interviewer_id,
            difficulties=difficulty_sequence(self._plan),
            now=now,
        )
        stored = self._store.insert(session)
        log_event("session_created", stored.id, status=stored.status)
        self._publish(stored)
        return stored

    def get_session_by_id(self, session_id: str) -> Session:
        session = self._store.load_by_id(session_id)
        if session is None:
            raise SessionNotFound()
        return session

    def list_sessions(
        self,
        *,
        interviewer_id: Optional[str] = None,
        search: Optional[str] = None,
        sort: SortKey = "score",
        order: SortOrder = "desc",
    ) -> List[Session]:
        return self._store.list(interviewer_id=interviewer_id, search=search, sort=sort, order=order)

    def expire_session(self, session_id: str) -> Session:
        now = self._clock()
        saved, _ = self._commit("expire", self._by_id(session_id), lambda current: (expire(current, now), None))
        return saved

    # ------------------------------------------------------------------
    # Candidate-facing actions
    # ------------------------------------------------------------------
    def get_session(self, token: str) -> Session:
        return ensure_active(self._store.load_by_token(token))

    def attach_profile(self, token: str, update: Union[ProfileUpdate, Dict[str, Any]]) -> Session:
        if not isinstance(update, ProfileUpdate):
            update = ProfileUpdate.model_validate(update)
        now = self._clock()
        saved, _ = self._commit(
            "profile_updated",
            self._by_token(token),
            lambda current: (apply_profile(current, update, now), None),
        )
        return saved

    def attach_resume(self, token: str, extraction: Union[ResumeExtraction, Dict[str, Any]]) -> Session:
        if not isinstance(extraction, ResumeExtraction):
            extraction = ResumeExtraction.model_validate(extraction)
        now = self._clock()
        saved, _ = self._commit(
            "resume_attached",
            self._by_token(token),
            lambda current: (apply_resume(current, extraction, now), None),
        )
        return saved

    def start_interview(self, token: str) -> StartResult:
        session = self._store.load_by_token(token)
        transition = request_start(session)
        if Effect.PLAN_QUESTIONS in transition.effects:
            questions = self._call_provider(
                "generate_questions",
                transition.session,
                lambda: planner.generate_questions(transition.session, self._plan, self._provider),
            )
            now = self._clock()

            def _compute(current: Optional[Session]) -> Tuple[Transition, None]:
                checked = request_start(current)
                if Effect.PLAN_QUESTIONS not in checked.effects:
                    return checked, None
                return Transition(planner.apply_plan(checked.session, questions, self._plan, now), checked.effects), None

            session, _ = self._commit("interview_started", self._by_token(token), _compute)
        else:
            session = transition.session
            log_event("interview_resumed", session.id, status=session.status)
        return StartResult(
            session=session,
            current_question=session.current_question(),
            deadline=session.current_question_deadline,
        )

    def submit_answer(
        self,
        token: str,
        answer: Optional[str],
        duration_ms: Optional[float] = 0,
        *,
        question_id: Optional[str] = None,
    ) -> SubmitResult:
        text = answer or ""
        duration = evaluator.clamp_duration(duration_ms, self._max_duration_ms)
        session = request_answer(self._store.load_by_token(token)).session
        question = evaluator.resolve_question(session, question_id)
        result = self._call_provider(
            "score_answer",
            session,
            lambda: evaluator.score_answer(session, question, text, self._provider),
        )

        summary: Optional[InterviewSummary] = None
        projected = evaluator.apply_answer(session, question.id, text, duration, result, self._clock())
        projected_average = finalizer.average_score(projected.session.answers)
        if projected.is_complete:
            summary = self._call_provider(
                "summarize",
                session,
                lambda: finalizer.summarize(projected.session, projected_average, self._provider),
            )
        now = self._clock()

        def _compute(current: Optional[Session]) -> Tuple[Transition, evaluator.AnswerOutcome]:
            checked = request_answer(current)
            outcome = evaluator.apply_answer(checked.session, question.id, text, duration, result, now)
            updated = outcome.session
            if outcome.is_complete and summary is not None:
                average = finalizer.average_score(updated.answers)
                if average == projected_average:
                    updated = finalizer.apply_final(updated, average, summary, now)
                else:
                    logger.info(
                        "Answers changed under session %s (%.1f -> %.1f); summary deferred", updated.id, projected_average, average
                    )
            return Transition(updated, checked.effects), outcome

        saved, outcome = self._commit("answer_submitted", self._by_token(token), _compute)
        if outcome.is_complete and saved.final_score is None:
            # ran out of questions under a concurrent request, or the precomputed summary went stale
            saved = self.complete_interview(token)
        return SubmitResult(
            session=saved,
            answer=outcome.answer,
            next_question=outcome.next_question,
            is_complete=outcome.is_complete,
        )

    def complete_interview(self, token: str) -> Session:
        session = self._store.load_by_token(token)
        transition = request_completion(session)
        if not transition.changed:
            return transition.session
        current = transition.session
        summary = self._call_provider(
            "summarize",
            current,
            lambda: finalizer.summarize(current, finalizer.average_score(current.answers), self._provider),
        )
        now = self._clock()

        def _compute(latest: Optional[Session]) -> Tuple[Transition, None]:
            checked = request_completion(latest)
            if not checked.changed:
                return checked, None
            average = finalizer.average_score(checked.session.answers)
            return Transition(finalizer.apply_final(checked.session, average, summary, now), checked.effects), None

        saved, _ = self._commit("interview_completed", self._by_token(token), _compute)
        return saved


__all__ = ["InterviewEngine", "StartResult", "SubmitResult"]
