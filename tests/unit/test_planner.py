from datetime import datetime, timedelta, timezone

import pytest

from evaluation_provider import CandidateProfile, FallbackEvaluationProvider, GeneratedQuestion
from interview_session.errors import EvaluationProviderUnavailable, InterviewNotActive
from interview_session.models import Candidate, Session
from interview_session.plan import QUESTION_PLAN, difficulty_sequence, plan_payload
from interview_session.planner import START_MESSAGE, apply_plan, build_questions, generate_questions

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def _ready() -> Session:
    return Session(status="ready", candidate=Candidate(name="Ada", email="ada@example.com", phone="5550101"))


def test_plan_shape():
    assert difficulty_sequence() == ["easy", "easy", "medium", "medium", "hard", "hard"]
    assert [slot.time_limit_seconds for slot in QUESTION_PLAN] == [20, 20, 60, 60, 120, 120]
    assert plan_payload()[0] == {"difficulty": "easy", "timeLimitSeconds": 20}


def test_slot_difficulty_wins_over_provider_label():
    generated = [GeneratedQuestion(text=f"  Q{index}  ", difficulty="hard") for index in range(len(QUESTION_PLAN))]
    questions = build_questions(QUESTION_PLAN, generated)
    assert [q.difficulty for q in questions] == difficulty_sequence()
    assert [q.time_limit_seconds for q in questions] == [20, 20, 60, 60, 120, 120]
    assert questions[0].prompt == "Q0"
    assert len({q.id for q in questions}) == len(questions)


def test_wrong_count_is_rejected():
    generated = [GeneratedQuestion(text="Q", difficulty="easy")]
    with pytest.raises(EvaluationProviderUnavailable):
        build_questions(QUESTION_PLAN, generated)


def test_blank_question_is_rejected():
    generated = [GeneratedQuestion(text="Q", difficulty="easy") for _ in QUESTION_PLAN]
    generated[2] = GeneratedQuestion(text="   ", difficulty="medium")
    with pytest.raises(EvaluationProviderUnavailable):
        build_questions(QUESTION_PLAN, generated)


def test_apply_plan_opens_first_question():
    session = _ready()
    questions = generate_questions(session, QUESTION_PLAN, FallbackEvaluationProvider())
    started = apply_plan(session, questions, QUESTION_PLAN, NOW)
    assert started.status == "in-progress"
    assert started.current_question_index == 0
    assert started.current_question_deadline == NOW + timedelta(seconds=20)
    assert started.started_at == NOW
    assert started.difficulty_sequence == difficulty_sequence()
    assert started.chat_transcript[-1].role == "system"
    assert started.chat_transcript[-1].content == START_MESSAGE


def test_apply_plan_keeps_existing_questions():
    session = _ready()
    provider = FallbackEvaluationProvider()
    started = apply_plan(session, generate_questions(session, QUESTION_PLAN, provider), QUESTION_PLAN, NOW)
    again = apply_plan(started, generate_questions(session, QUESTION_PLAN, provider), QUESTION_PLAN, NOW + timedelta(seconds=5))
    assert again is started


def test_profile_is_passed_to_provider():
    seen = []

    class Recording(FallbackEvaluationProvider):
        def generate_questions(self, plan, profile, key=None):
            seen.append(profile)
            return super().generate_questions(plan, profile, key)

    generate_questions(_ready(), QUESTION_PLAN, Recording())
    assert seen == [CandidateProfile(name="Ada", email="ada@example.com", phone="5550101", has_resume=False)]


def test_apply_plan_rejects_expired_session():
    session = _ready().model_copy(update={"status": "expired"})
    questions = generate_questions(session, QUESTION_PLAN, FallbackEvaluationProvider())
    with pytest.raises(InterviewNotActive):
        apply_plan(session, questions, QUESTION_PLAN, NOW)
