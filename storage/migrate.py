"""SQLite schema migrations."""
from __future__ import annotations

import os
import sqlite3
from typing import Iterable

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS interview_sessions (
  id TEXT PRIMARY KEY,
  invite_token TEXT NOT NULL UNIQUE,
  interviewer_id TEXT,
  status TEXT NOT NULL,
  candidate_name TEXT,
  candidate_email TEXT,
  candidate_phone TEXT,
  final_score REAL,
  version INTEGER NOT NULL DEFAULT 1,
  document TEXT NOT NULL,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL
);
""",
    """
CREATE INDEX IF NOT EXISTS idx_interview_sessions_interviewer
  ON interview_sessions (interviewer_id, created_at);
""",
]


def migrate(db_path: str = "data/interview.db") -> None:
    """Apply schema migrations to the SQLite database."""

    directory = os.path.dirname(db_path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        for stmt in SCHEMA:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


if __name__ == "__main__":
    migrate()
