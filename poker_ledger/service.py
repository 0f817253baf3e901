from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping

from poker_ledger.domain import (
    DEFAULT_ENV,
    CashOutReason,
    LedgerEnv,
    NotFound,
    Session,
    SessionSettings,
    SettlementSnapshot,
    add_player,
    calculate_settlement,
    cash_out_player,
    create_session,
    edit_cash_out,
    finalize_session,
    mark_transaction_paid,
    record_buy_in,
    rejoin_player,
    remove_player,
    session_to_json,
    sessions_from_json,
    summarize_settlement,
    undo_last_buy_in,
    undo_last_buy_in_for_player,
    update_player,
    validate_settlement,
)
from poker_ledger.repository import SessionStore

logger = logging.getLogger(__name__)


class LedgerService:
    """Owns every known session by id and persists each committed command through the store."""

    def __init__(
        self,
        store: SessionStore,
        env: LedgerEnv = DEFAULT_ENV,
        default_settings: SessionSettings | None = None,
        enforce_tolerance: bool = False,
    ) -> None:
        self.store = store
        self.env = env
        self.default_settings = default_settings or SessionSettings()
        self.enforce_tolerance = enforce_tolerance
        self._lock = threading.Lock()
        self._sessions: dict[str, Session] = store.load_all()

    def create_session(
        self,
        name: str,
        currency: str = "$",
        settings: SessionSettings | None = None,
    ) -> Session:
        session = create_session(name, currency, settings or self.default_settings, env=self.env)
        with self._lock:
            self._commit(session)
        logger.info("Session %s created: %s", session.id, session.name)
        return session

    def delete_session(self, session_id: str) -> None:
        with self._lock:
            self.get_session(session_id)
            self.store.delete(session_id)
            del self._sessions[session_id]
        logger.info("Session %s deleted", session_id)

    def get_session(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFound(f"session not found: {session_id}")
        return session

    def list_sessions(self) -> list[Session]:
        return sorted(self._sessions.values(), key=lambda s: (s.created_at, s.id))

    def add_player(self, session_id: str, name: str, color: str | None = None) -> tuple[Session, str]:
        with self._lock:
            session, player_id = add_player(self.get_session(session_id), name, color, env=self.env)
            self._commit(session)
        logger.info("Session %s: player %s added", session_id, player_id)
        return session, player_id

    def update_player(
        self,
        session_id: str,
        player_id: str,
        *,
        name: str | None = None,
        color: str | None = None,
    ) -> Session:
        return self._apply(session_id, lambda s: update_player(s, player_id, name=name, color=color))

    def remove_player(self, session_id: str, player_id: str) -> Session:
        session = self._apply(session_id, lambda s: remove_player(s, player_id))
        logger.info("Session %s: player %s removed", session_id, player_id)
        return session

    def record_buy_in(self, session_id: str, player_id: str, amount_cents: int) -> Session:
        session = self._apply(
            session_id, lambda s: record_buy_in(s, player_id, amount_cents, env=self.env)
        )
        logger.info("Session %s: buy-in %s for player %s", session_id, amount_cents, player_id)
        return session

    def undo_last_buy_in(self, session_id: str) -> Session:
        return self._apply(session_id, undo_last_buy_in)

    def undo_last_buy_in_for_player(self, session_id: str, player_id: str) -> Session:
        return self._apply(session_id, lambda s: undo_last_buy_in_for_player(s, player_id))

    def cash_out_player(
        self,
        session_id: str,
        player_id: str,
        amount_cents: int,
        reason: CashOutReason = CashOutReason.LEAVE,
    ) -> Session:
        session = self._apply(
            session_id, lambda s: cash_out_player(s, player_id, amount_cents, reason, env=self.env)
        )
        logger.info("Session %s: player %s cashed out %s (%s)", session_id, player_id, amount_cents, reason)
        return session

    def edit_cash_out(self, session_id: str, cash_out_id: str, new_amount_cents: int) -> Session:
        session = self._apply(
            session_id, lambda s: edit_cash_out(s, cash_out_id, new_amount_cents, env=self.env)
        )
        logger.info("Session %s: cash-out %s corrected to %s", session_id, cash_out_id, new_amount_cents)
        return session

    def rejoin_player(self, session_id: str, player_id: str) -> Session:
        session = self._apply(session_id, lambda s: rejoin_player(s, player_id, env=self.env))
        logger.info("Session %s: player %s rejoined", session_id, player_id)
        return session

    def settlement_preview(self, session_id: str) -> SettlementSnapshot:
        session = self.get_session(session_id)
        if session.settlement is not None:
            return session.settlement
        return calculate_settlement(session, env=self.env)

    def finalize_session(
        self,
        session_id: str,
        final_stacks_cents: Mapping[str, int],
        enforce_tolerance: bool | None = None,
    ) -> Session:
        enforce = self.enforce_tolerance if enforce_tolerance is None else enforce_tolerance
        session = self._apply(
            session_id,
            lambda s: finalize_session(s, final_stacks_cents, enforce_tolerance=enforce, env=self.env),
        )
        snapshot = session.settlement
        logger.info(
            "Session %s finalized: %d transactions, variance %d",
            session_id,
            len(snapshot.transactions),
            snapshot.variance_cents,
        )
        if not validate_settlement(snapshot.nets, session.settings.variance_tolerance_cents):
            logger.warning(
                "Session %s variance %d exceeds tolerance %d",
                session_id,
                snapshot.variance_cents,
                session.settings.variance_tolerance_cents,
            )
        return session

    def mark_transaction_paid(self, session_id: str, index: int, paid: bool = True) -> Session:
        return self._apply(session_id, lambda s: mark_transaction_paid(s, index, paid))

    def settlement_summary(self, session_id: str) -> str:
        return summarize_settlement(self.get_session(session_id))

    def export_session(self, session_id: str) -> str:
        return session_to_json(self.get_session(session_id))

    def import_sessions(self, payload: str) -> list[Session]:
        imported = sessions_from_json(payload)
        with self._lock:
            for session in imported.values():
                self._commit(session)
        logger.info("Imported %d sessions", len(imported))
        return list(imported.values())

    def _apply(self, session_id: str, command: Callable[[Session], Session]) -> Session:
        with self._lock:
            current = self.get_session(session_id)
            updated = command(current)
            if updated is not current:
                self._commit(updated)
        return updated

    def _commit(self, session: Session) -> None:
        self.store.save(session)
        self._sessions[session.id] = session
