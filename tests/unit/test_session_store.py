from datetime import datetime, timedelta, timezone

import pytest

from interview_session.models import Candidate, Session
from storage.sessions import DuplicateInviteToken, StaleSessionError

BASE = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def _session(name, email, minutes=0, score=None, interviewer_id=None):
    at = BASE + timedelta(minutes=minutes)
    return Session(
        status="completed" if score is not None else "waiting-profile",
        candidate=Candidate(name=name, email=email),
        final_score=score,
        interviewer_id=interviewer_id,
        created_at=at,
        updated_at=at,
    )


def test_insert_and_load_roundtrip(store):
    stored = store.insert(_session("Ada", "ada@example.com"))
    assert stored.version == 1
    assert store.load_by_token(stored.invite_token) == stored
    assert store.load_by_id(stored.id) == stored
    assert store.load_by_token("missing") is None


def test_save_bumps_version(store):
    stored = store.insert(_session("Ada", "ada@example.com"))
    saved = store.save(stored.model_copy(update={"notes": "call back"}))
    assert saved.version == 2
    assert store.load_by_id(stored.id).notes == "call back"


def test_stale_save_is_rejected(store):
    stored = store.insert(_session("Ada", "ada@example.com"))
    store.save(stored.model_copy(update={"notes": "first writer"}))
    with pytest.raises(StaleSessionError):
        store.save(stored.model_copy(update={"notes": "second writer"}))
    assert store.load_by_id(stored.id).notes == "first writer"


def test_duplicate_token_is_rejected(store):
    stored = store.insert(_session("Ada", "ada@example.com"))
    clash = _session("Grace", "grace@example.com").model_copy(update={"invite_token": stored.invite_token})
    with pytest.raises(DuplicateInviteToken):
        store.insert(clash)


def test_list_sorts_by_score_with_unscored_last(store):
    store.insert(_session("Low", "low@example.com", minutes=1, score=3.5))
    store.insert(_session("Pending", "pending@example.com", minutes=2))
    store.insert(_session("High", "high@example.com", minutes=3, score=9.1))

    names = [s.candidate.name for s in store.list(sort="score", order="desc")]
    assert names == ["High", "Low", "Pending"]
    names = [s.candidate.name for s in store.list(sort="score", order="asc")]
    assert names == ["Low", "High", "Pending"]


def test_list_recent_and_filters(store):
    store.insert(_session("Ada Lovelace", "ada@example.com", minutes=1, interviewer_id="iv-1"))
    store.insert(_session("Grace Hopper", "grace@navy.mil", minutes=2, interviewer_id="iv-2"))

    assert [s.candidate.name for s in store.list(sort="recent")] == ["Grace Hopper", "Ada Lovelace"]
    assert [s.candidate.name for s in store.list(search="NAVY")] == ["Grace Hopper"]
    assert [s.candidate.name for s in store.list(interviewer_id="iv-1")] == ["Ada Lovelace"]
    assert store.list(search="nobody") == []
