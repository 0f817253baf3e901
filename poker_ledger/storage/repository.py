from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, sessionmaker

from poker_ledger.domain import Session as LedgerSession
from poker_ledger.domain import session_from_json, session_to_json
from poker_ledger.storage.models import SessionRecord


class SqlSessionStore:
    """Persists each session as one JSON document row."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def load_all(self) -> dict[str, LedgerSession]:
        with self._session_factory() as db:
            rows = db.scalars(select(SessionRecord).order_by(SessionRecord.created_at, SessionRecord.id)).all()
            return {row.id: session_from_json(row.document) for row in rows}

    def save(self, session: LedgerSession) -> None:
        with self._session_factory() as db:
            row = db.get(SessionRecord, session.id)
            if row is None:
                row = SessionRecord(id=session.id, created_at=session.created_at)
                db.add(row)
            row.name = session.name
            row.status = session.status.value
            row.closed_at = session.closed_at
            row.version = session.version
            row.document = session_to_json(session, indent=None)
            db.commit()

    def delete(self, session_id: str) -> None:
        with self._session_factory() as db:
            db.execute(delete(SessionRecord).where(SessionRecord.id == session_id))
            db.commit()
