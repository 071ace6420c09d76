"""FastAPI routes for candidates (invite token) and interviewers."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from config.settings import settings
from interview_session.engine import InterviewEngine
from interview_session.errors import EvaluationProviderUnavailable, InterviewError, NoActiveQuestion
from interview_session.models import Question, Session, serialize_session
from interview_session.plan import plan_payload
from interview_session.state_machine import ProfileUpdate, ResumeExtraction

from .schemas import (
    AnswerReq,
    AnswerResp,
    CreateInterviewReq,
    CreateInterviewResp,
    InterviewListResp,
    InterviewSummaryResp,
    OrderParam,
    SessionResp,
    SortParam,
    StartResp,
)

logger = logging.getLogger(__name__)

candidate_router = APIRouter(prefix="/api/invite")
interviewer_router = APIRouter(prefix="/api/interviews")


def get_engine(request: Request) -> InterviewEngine:
    return request.app.state.engine


def build_invite_url(token: str) -> str:
    origin = settings.CLIENT_URL.split(",")[0].strip().rstrip("/")
    return f"{origin}/invite/{token}"


@contextmanager
def _candidate_errors(token: str) -> Iterator[None]:
    """Map engine errors to responses without leaking internals to candidates."""

    try:
        yield
    except (NoActiveQuestion, EvaluationProviderUnavailable) as exc:
        logger.error("Candidate action failed token=%s kind=%s: %s", token, exc.kind, exc.message)
        detail = {"kind": exc.kind, "message": settings.CANDIDATE_ERROR_MESSAGE, "retryable": exc.retryable}
        raise HTTPException(status_code=exc.status_code, detail=detail) from exc
    except InterviewError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.to_payload()) from exc
    except HTTPException:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected failure for invite token %s", token)
        raise HTTPException(
            status_code=500,
            detail={"kind": "internal_error", "message": settings.CANDIDATE_ERROR_MESSAGE},
        ) from exc


@contextmanager
def _interviewer_errors() -> Iterator[None]:
    try:
        yield
    except InterviewError as exc:
        detail = exc.to_payload()
        detail["retryable"] = exc.retryable
        raise HTTPException(status_code=exc.status_code, detail=detail) from exc
    except HTTPException:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected interviewer-side failure")
        raise HTTPException(
            status_code=500,
            detail={"kind": "internal_error", "message": f"{type(exc).__name__}: {exc}"},
        ) from exc


def _question_payload(question: Optional[Question]) -> Optional[Dict[str, Any]]:
    if question is None:
        return None
    return question.model_dump(mode="json", by_alias=True)


def _summary(session: Session, engine: InterviewEngine) -> InterviewSummaryResp:
    return InterviewSummaryResp(
        id=session.id,
        candidate=session.candidate.model_dump(mode="json", by_alias=True),
        status=session.status,
        final_score=session.final_score,
        final_summary=session.final_summary,
        notes=session.notes,
        created_at=session.created_at.isoformat(),
        updated_at=session.updated_at.isoformat(),
        invite_token=session.invite_token,
        invite_url=build_invite_url(session.invite_token),
        question_count=len(session.questions) or len(engine.plan),
    )


# ----------------------------------------------------------------------
# Candidate routes
# ----------------------------------------------------------------------
@candidate_router.get("/{token}", response_model=SessionResp)
def bootstrap(token: str, engine: InterviewEngine = Depends(get_engine)) -> SessionResp:
    with _candidate_errors(token):
        session = engine.get_session(token)
    return SessionResp(session=serialize_session(session), plan=plan_payload(engine.plan))


@candidate_router.post("/{token}/profile", response_model=SessionResp)
def update_profile(token: str, req: ProfileUpdate, engine: InterviewEngine = Depends(get_engine)) -> SessionResp:
    with _candidate_errors(token):
        session = engine.attach_profile(token, req)
    return SessionResp(session=serialize_session(session))


@candidate_router.post("/{token}/resume", response_model=SessionResp)
def attach_resume(token: str, req: ResumeExtraction, engine: InterviewEngine = Depends(get_engine)) -> SessionResp:
    with _candidate_errors(token):
        session = engine.attach_resume(token, req)
    return SessionResp(session=serialize_session(session))


@candidate_router.post("/{token}/start", response_model=StartResp)
def start(token: str, engine: InterviewEngine = Depends(get_engine)) -> StartResp:
    with _candidate_errors(token):
        result = engine.start_interview(token)
    return StartResp(
        session=serialize_session(result.session),
        current_question=_question_payload(result.current_question),
        deadline=result.deadline.isoformat() if result.deadline else None,
        plan=plan_payload(engine.plan),
    )


@candidate_router.post("/{token}/answers", response_model=AnswerResp)
def submit_answer(token: str, req: AnswerReq, engine: InterviewEngine = Depends(get_engine)) -> AnswerResp:
    with _candidate_errors(token):
        result = engine.submit_answer(token, req.answer, req.duration_ms, question_id=req.question_id)
    session = result.session
    return AnswerResp(
        session=serialize_session(session),
        answer=result.answer.model_dump(mode="json", by_alias=True),
        next_question=_question_payload(result.next_question),
        is_complete=result.is_complete,
        deadline=session.current_question_deadline.isoformat() if session.current_question_deadline else None,
        final_score=session.final_score,
        final_summary=session.final_summary,
    )


@candidate_router.post("/{token}/complete", response_model=SessionResp)
def complete(token: str, engine: InterviewEngine = Depends(get_engine)) -> SessionResp:
    with _candidate_errors(token):
        session = engine.complete_interview(token)
    return SessionResp(session=serialize_session(session))


# ----------------------------------------------------------------------
# Interviewer routes
# ----------------------------------------------------------------------
@interviewer_router.post("", response_model=CreateInterviewResp, status_code=201)
def create_interview(req: CreateInterviewReq, engine: InterviewEngine = Depends(get_engine)) -> CreateInterviewResp:
    with _interviewer_errors():
        session = engine.create_session(
            req.candidate_email,
            name=req.candidate_name,
            phone=req.candidate_phone,
            notes=req.notes,
            interviewer_id=req.interviewer_id,
        )
    return CreateInterviewResp(session=serialize_session(session), invite_url=build_invite_url(session.invite_token))


@interviewer_router.get("", response_model=InterviewListResp)
def list_interviews(
    search: Optional[str] = None,
    sort: SortParam = "score",
    order: OrderParam = "desc",
    interviewer_id: Optional[str] = None,
    engine: InterviewEngine = Depends(get_engine),
) -> InterviewListResp:
    with _interviewer_errors():
        sessions = engine.list_sessions(interviewer_id=interviewer_id, search=search, sort=sort, order=order)
    return InterviewListResp(sessions=[_summary(session, engine) for session in sessions])


@interviewer_router.get("/{session_id}", response_model=SessionResp)
def get_interview(session_id: str, engine: InterviewEngine = Depends(get_engine)) -> SessionResp:
    with _interviewer_errors():
        session = engine.get_session_by_id(session_id)
    return SessionResp(session=serialize_session(session))


@interviewer_router.post("/{session_id}/expire", response_model=SessionResp)
def expire_interview(session_id: str, engine: InterviewEngine = Depends(get_engine)) -> SessionResp:
    with _interviewer_errors():
        session = engine.expire_session(session_id)
    return SessionResp(session=serialize_session(session))
