import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.settings import settings
from evaluation_provider import FallbackEvaluationProvider
from interview_session.engine import InterviewEngine
from interview_session.state_machine import ResumeExtraction
from storage.migrate import migrate
from storage.sessions import SqliteSessionStore


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


class RecordingNotifier:
    def __init__(self) -> None:
        self.published = []

    def publish(self, session_id, payload):
        self.published.append((session_id, payload))


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    try:
        yield db_path
    finally:
        td.cleanup()


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def store(tmp_db):
    return SqliteSessionStore(tmp_db)


@pytest.fixture
def engine(store, notifier, clock):
    return InterviewEngine(store, FallbackEvaluationProvider(), notifier, clock=clock)


def _resume_extraction(**fields) -> ResumeExtraction:
    payload = {"resume": {"original_name": "cv.pdf", "mime_type": "application/pdf", "size": 2048}}
    payload.update(fields)
    return ResumeExtraction.model_validate(payload)


@pytest.fixture
def make_resume():
    return _resume_extraction


@pytest.fixture
def ready_session(engine):
    """A session with a complete profile, not yet started."""

    session = engine.create_session("ada@example.com", name="Ada Lovelace", phone="+44 20 7946 0958")
    return engine.attach_resume(session.invite_token, _resume_extraction())
