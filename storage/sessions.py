"""Session document store with optimistic concurrency."""
from __future__ import annotations

import logging
import sqlite3
from typing import List, Literal, Optional, Protocol

from interview_session.models import Session

from .sqlite import get_conn

logger = logging.getLogger(__name__)

SortKey = Literal["score", "recent"]
SortOrder = Literal["asc", "desc"]


class StaleSessionError(RuntimeError):  # Saved version no longer matches the stored one
    def __init__(self, session_id: str, expected_version: int) -> None:
        super().__init__(f"Session {session_id} changed since version {expected_version}")
        self.session_id = session_id
        self.expected_version = expected_version


class DuplicateInviteToken(RuntimeError):
    pass


class SessionStore(Protocol):
    def insert(self, session: Session) -> Session: ...

    def load_by_token(self, token: str) -> Optional[Session]: ...

    def load_by_id(self, session_id: str) -> Optional[Session]: ...

    def save(self, session: Session) -> Session: ...

    def list(
        self,
        *,
        interviewer_id: Optional[str] = None,
        search: Optional[str] = None,
        sort: SortKey = "score",
        order: SortOrder = "desc",
    ) -> List[Session]: ...


def _row_values(session: Session) -> tuple:
    candidate = session.candidate
    return (
        session.interviewer_id,
        session.status,
        candidate.name,
        candidate.email,
        candidate.phone,
        session.final_score,
        session.model_dump_json(by_alias=True),
        session.created_at.isoformat(),
        session.updated_at.isoformat(),
    )


class SqliteSessionStore:
    """One row per session; the whole document is stored as JSON.

    ``save`` only succeeds when the stored ``version`` still equals the
    version the caller loaded, then bumps it by one.
    """

    def __init__(self, db_path: Optional[str] = None) -> None:
        self._db_path = db_path

    def _decode(self, row: sqlite3.Row) -> Session:
        session = Session.model_validate_json(row["document"])
        return session.model_copy(update={"version": int(row["version"])})

    def insert(self, session: Session) -> Session:
        stored = session.model_copy(update={"version": 1})
        try:
            with get_conn(self._db_path) as conn:
                conn.execute(
                    """INSERT INTO interview_sessions
                       (interviewer_id, status, candidate_name, candidate_email, candidate_phone,
                        final_score, document, created_at, updated_at, id, invite_token, version)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    _row_values(stored) + (stored.id, stored.invite_token, stored.version),
                )
        except sqlite3.IntegrityError as exc:
            raise DuplicateInviteToken(f"Invite token or id already used for session {session.id}") from exc
        return stored

    def load_by_token(self, token: str) -> Optional[Session]:
        with get_conn(self._db_path) as conn:
            row = conn.execute(
                "SELECT document, version FROM interview_sessions WHERE invite_token = ?",
                (token,),
            ).fetchone()
        return self._decode(row) if row else None

    def load_by_id(self, session_id: str) -> Optional[Session]:
        with get_conn(self._db_path) as conn:
            row = conn.execute(
                "SELECT document, version FROM interview_sessions WHERE id = ?",
                (session_id,),
            ).fetchone()
        return self._decode(row) if row else None

    def save(self, session: Session) -> Session:
        expected = session.version
        stored = session.model_copy(update={"version": expected + 1})
        with get_conn(self._db_path) as conn:
            cur = conn.execute(
                """UPDATE interview_sessions
                   SET interviewer_id = ?, status = ?, candidate_name = ?, candidate_email = ?,
                       candidate_phone = ?, final_score = ?, document = ?, created_at = ?, updated_at = ?,
                       version = ?
                   WHERE id = ? AND version = ?""",
                _row_values(stored) + (stored.version, stored.id, expected),
            )
            if cur.rowcount == 0:
                logger.info("Stale save for session %s at version %d", session.id, expected)
                raise StaleSessionError(session.id, expected)
        return stored

    def list(
        self,
        *,
        interviewer_id: Optional[str] = None,
        search: Optional[str] = None,
        sort: SortKey = "score",
        order: SortOrder = "desc",
    ) -> List[Session]:
        clauses: List[str] = []
        params: List[object] = []
        if interviewer_id:
            clauses.append("interviewer_id = ?")
            params.append(interviewer_id)
        if search:
            pattern = f"%{search.lower()}%"
            clauses.append(
                "(lower(coalesce(candidate_name, '')) LIKE ? OR lower(coalesce(candidate_email, '')) LIKE ?"
                " OR lower(coalesce(candidate_phone, '')) LIKE ?)"
            )
            params.extend([pattern, pattern, pattern])
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        direction = "ASC" if order == "asc" else "DESC"
        if sort == "recent":
            order_by = f"created_at {direction}"
        else:
            # unscored sessions always sort after scored ones
            order_by = f"final_score IS NULL, final_score {direction}, created_at DESC"
        with get_conn(self._db_path) as conn:
            rows = conn.execute(
                f"SELECT document, version FROM interview_sessions {where} ORDER BY {order_by}",
                params,
            ).fetchall()
        return [self._decode(row) for row in rows]


__all__ = ["DuplicateInviteToken", "SessionStore", "SqliteSessionStore", "StaleSessionError"]
