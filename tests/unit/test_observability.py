import json

import pytest

from observability import configure_logging, log_event, span
from observability.logger import format_human


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "events.log"
    configure_logging(log_file=str(path), file_logs=True)
    yield path
    configure_logging(file_logs=False)


def _events(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


def test_event_written_as_json(log_file):
    payload = log_event("answer_submitted", "s-1", status="in-progress", question_index=2)
    events = _events(log_file)
    assert events[-1]["kind"] == "answer_submitted"
    assert events[-1]["session_id"] == "s-1"
    assert events[-1]["question_index"] == 2
    assert events[-1]["trace"] == payload["trace"]


def test_human_file_uses_key_value_line(log_file):
    log_event("interview_completed", "s-2", status="completed", score=7.5)
    human = log_file.with_name("events-human.log").read_text(encoding="utf-8")
    assert "session=s-2 kind=interview_completed status=completed score=7.5" in human


def test_span_records_outcome(log_file):
    with pytest.raises(RuntimeError):
        with span("provider.score_answer", "s-3"):
            raise RuntimeError("boom")
    event = _events(log_file)[-1]
    assert event["kind"] == "span"
    assert event["name"] == "provider.score_answer"
    assert event["outcome"] == "error"
    assert event["ms"] >= 0


def test_format_human_skips_unknown_fields():
    line = format_human({"session_id": "s", "kind": "k", "status": "ready", "secret": "x"})
    assert line == "session=s kind=k status=ready"
