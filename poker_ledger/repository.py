from __future__ import annotations

from typing import Protocol

from poker_ledger.domain import Session


class SessionStore(Protocol):
    def load_all(self) -> dict[str, Session]: ...

    def save(self, session: Session) -> None: ...

    def delete(self, session_id: str) -> None: ...


class InMemorySessionStore:
    """Store that keeps sessions in process memory. Used for tests and throwaway runs."""

    def __init__(self, sessions: dict[str, Session] | None = None) -> None:
        self._sessions: dict[str, Session] = dict(sessions or {})

    def load_all(self) -> dict[str, Session]:
        return dict(self._sessions)

    def save(self, session: Session) -> None:
        self._sessions[session.id] = session

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
