"""Lightweight CLI helpers for inspecting interview sessions."""
from __future__ import annotations

import argparse
import sqlite3
from typing import List, Optional

from config.settings import settings


def tail_sessions(limit: int = 20, db_path: Optional[str] = None) -> List[str]:
    conn = sqlite3.connect(db_path or settings.DB_PATH)
    lines: List[str] = []
    try:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT updated_at, id, status, candidate_email, final_score, version
            FROM interview_sessions
            ORDER BY updated_at DESC
            LIMIT ?
            """,
            (limit,),
        )
        for row in cursor.fetchall():
            ts, session_id, status, email, score, version = row
            lines.append(f"[{ts}] {session_id} {status} candidate={email} score={score} v{version}")
    finally:
        conn.close()
    for line in lines:
        print(line)
    return lines


def expire_session(session_id: str) -> None:
    from evaluation_provider import FallbackEvaluationProvider
    from interview_session.engine import InterviewEngine
    from notifier import LoggingNotifier
    from storage.sessions import SqliteSessionStore

    engine = InterviewEngine(SqliteSessionStore(), FallbackEvaluationProvider(), LoggingNotifier())
    session = engine.expire_session(session_id)
    print(f"{session.id} -> {session.status}")


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tail-sessions", type=int, help="Show the most recently updated sessions")
    parser.add_argument("--expire", metavar="SESSION_ID", help="Expire a session so it rejects further actions")
    args = parser.parse_args(argv)

    if args.tail_sessions:
        tail_sessions(args.tail_sessions)
    if args.expire:
        expire_session(args.expire)


if __name__ == "__main__":
    main()
