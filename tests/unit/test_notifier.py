from notifier import LoggingNotifier, SessionBroadcaster


def test_subscribers_receive_their_session_only():
    broadcaster = SessionBroadcaster()
    seen = []
    broadcaster.subscribe("s-1", lambda sid, payload: seen.append((sid, payload["status"])))
    broadcaster.publish("s-1", {"status": "ready"})
    broadcaster.publish("s-2", {"status": "completed"})
    assert seen == [("s-1", "ready")]


def test_failing_subscriber_is_isolated():
    broadcaster = SessionBroadcaster()
    seen = []

    def broken(sid, payload):
        raise RuntimeError("socket closed")

    broadcaster.subscribe("s-1", broken)
    broadcaster.subscribe("s-1", lambda sid, payload: seen.append(payload))
    broadcaster.publish("s-1", {"status": "in-progress"})
    assert seen == [{"status": "in-progress"}]


def test_unsubscribe():
    broadcaster = SessionBroadcaster()
    unsubscribe = broadcaster.subscribe("s-1", lambda sid, payload: None)
    assert broadcaster.subscriber_count("s-1") == 1
    unsubscribe()
    unsubscribe()
    assert broadcaster.subscriber_count("s-1") == 0


def test_engine_publishes_to_broadcaster(store, clock, make_resume):
    from evaluation_provider import FallbackEvaluationProvider
    from interview_session.engine import InterviewEngine

    broadcaster = SessionBroadcaster()
    engine = InterviewEngine(store, FallbackEvaluationProvider(), broadcaster, clock=clock)
    session = engine.create_session("ada@example.com", name="Ada Lovelace", phone="5550101")
    statuses = []
    broadcaster.subscribe(session.id, lambda sid, payload: statuses.append(payload["status"]))
    engine.attach_resume(session.invite_token, make_resume())
    engine.start_interview(session.invite_token)
    engine.start_interview(session.invite_token)
    engine.complete_interview(session.invite_token)
    assert statuses == ["ready", "in-progress", "completed"]


def test_logging_notifier_accepts_payload():
    LoggingNotifier().publish("s-1", {"status": "ready", "currentQuestionIndex": 0})
