"""Pydantic schemas for the interview HTTP API."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from interview_session.state_machine import EMAIL_PATTERN


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnswerReq(_CamelModel):
    answer: Optional[str] = None
    duration_ms: float = Field(default=0, ge=0)
    question_id: Optional[str] = None


class CreateInterviewReq(_CamelModel):
    candidate_email: str = Field(pattern=EMAIL_PATTERN)
    candidate_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    candidate_phone: Optional[str] = Field(default=None, min_length=6, max_length=30)
    notes: Optional[str] = Field(default=None, max_length=500)
    interviewer_id: Optional[str] = None


class SessionResp(_CamelModel):
    session: Dict[str, Any]
    plan: Optional[List[Dict[str, Any]]] = None


class StartResp(_CamelModel):
    session: Dict[str, Any]
    current_question: Optional[Dict[str, Any]] = None
    deadline: Optional[str] = None
    plan: List[Dict[str, Any]] = Field(default_factory=list)


class AnswerResp(_CamelModel):
    session: Dict[str, Any]
    answer: Dict[str, Any]
    next_question: Optional[Dict[str, Any]] = None
    is_complete: bool
    deadline: Optional[str] = None
    final_score: Optional[float] = None
    final_summary: Optional[str] = None


class CreateInterviewResp(_CamelModel):
    session: Dict[str, Any]
    invite_url: str


class InterviewSummaryResp(_CamelModel):
    id: str
    candidate: Dict[str, Any]
    status: str
    final_score: Optional[float] = None
    final_summary: Optional[str] = None
    notes: Optional[str] = None
    created_at: str
    updated_at: str
    invite_token: str
    invite_url: str
    question_count: int


class InterviewListResp(_CamelModel):
    sessions: List[InterviewSummaryResp] = Field(default_factory=list)


SortParam = Literal["score", "recent"]
OrderParam = Literal["asc", "desc"]
