"""Ledger commands. Each one takes a Session value and returns a new one or raises."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace

from .errors import InvalidOperation, NotFound, ValidationError
from .models import (
    DEFAULT_ENV,
    BuyIn,
    CashOut,
    CashOutReason,
    LedgerEnv,
    Player,
    ReentryEvent,
    Session,
    SessionSettings,
    SessionStatus,
    is_live_buy_in,
    is_live_cash_out,
    live_buy_ins,
    live_cash_outs,
)
from .settlement import calculate_settlement, validate_settlement


def normalize_name(name: str, what: str = "player name") -> str:
    value = name.strip()
    if not value:
        raise ValidationError(f"{what} must be non-empty")
    return value


def create_session(
    name: str,
    currency: str = "$",
    settings: SessionSettings | None = None,
    *,
    env: LedgerEnv = DEFAULT_ENV,
) -> Session:
    return Session(
        id=env.new_id(),
        name=normalize_name(name, "session name"),
        currency=currency,
        created_at=env.now(),
        settings=settings or SessionSettings(),
    )


def add_player(
    session: Session,
    name: str,
    color: str | None = None,
    *,
    env: LedgerEnv = DEFAULT_ENV,
) -> tuple[Session, str]:
    _ensure_open(session)
    player = Player(
        id=env.new_id(),
        name=normalize_name(name),
        color=color,
        created_at=env.now(),
        order=len(session.players),
    )
    players = {**session.players, player.id: player}
    return replace(session, players=players), player.id


def update_player(
    session: Session,
    player_id: str,
    *,
    name: str | None = None,
    color: str | None = None,
) -> Session:
    _ensure_open(session)
    player = session.player(player_id)
    if player is None:
        raise NotFound(f"player not found: {player_id}")

    changes: dict[str, object] = {}
    if name is not None:
        changes["name"] = normalize_name(name)
    if color is not None:
        changes["color"] = color
    if not changes:
        return session
    return _with_player(session, replace(player, **changes))


def remove_player(session: Session, player_id: str) -> Session:
    _ensure_open(session)
    if player_id not in session.players:
        raise NotFound(f"player not found: {player_id}")
    if live_buy_ins(session.buy_ins, player_id) or live_cash_outs(session.cash_outs, player_id):
        raise InvalidOperation("cannot remove a player with financial activity, cash them out instead")

    players = {pid: player for pid, player in session.players.items() if pid != player_id}
    return replace(session, players=players)


def record_buy_in(
    session: Session,
    player_id: str,
    amount_cents: int,
    *,
    env: LedgerEnv = DEFAULT_ENV,
) -> Session:
    _ensure_open(session)
    if amount_cents <= 0:
        raise ValidationError("buy-in amount must be positive")
    player = session.player(player_id)
    if player is None:
        raise ValidationError(f"unknown player: {player_id}")
    if session.settings.require_active_for_buy_in and not player.active:
        raise ValidationError(f"player {player.name} is not active")

    buy_in = BuyIn(
        id=env.new_id(),
        session_id=session.id,
        player_id=player_id,
        amount_cents=amount_cents,
        timestamp=env.now(),
    )
    return replace(session, buy_ins=session.buy_ins + (buy_in,))


def undo_last_buy_in(session: Session) -> Session:
    _ensure_open(session)
    return _soft_delete_latest(session, player_id=None)


def undo_last_buy_in_for_player(session: Session, player_id: str) -> Session:
    _ensure_open(session)
    return _soft_delete_latest(session, player_id=player_id)


def cash_out_player(
    session: Session,
    player_id: str,
    amount_cents: int,
    reason: CashOutReason = CashOutReason.LEAVE,
    *,
    env: LedgerEnv = DEFAULT_ENV,
) -> Session:
    _ensure_open(session)
    if amount_cents < 0:
        raise ValidationError("cash-out amount must be non-negative")
    player = session.player(player_id)
    if player is None:
        raise ValidationError(f"unknown player: {player_id}")

    cash_out = CashOut(
        id=env.new_id(),
        session_id=session.id,
        player_id=player_id,
        amount_cents=amount_cents,
        timestamp=env.now(),
        reason=CashOutReason(reason),
    )
    updated = replace(session, cash_outs=session.cash_outs + (cash_out,))
    return _with_player(updated, replace(player, active=False))


def edit_cash_out(
    session: Session,
    cash_out_id: str,
    new_amount_cents: int,
    *,
    env: LedgerEnv = DEFAULT_ENV,
) -> Session:
    _ensure_open(session)
    original = next((c for c in session.cash_outs if c.id == cash_out_id), None)
    if original is None or not is_live_cash_out(original):
        raise NotFound(f"cash-out not found: {cash_out_id}")
    if new_amount_cents < 0:
        raise ValidationError("cash-out amount must be non-negative")

    corrected = CashOut(
        id=env.new_id(),
        session_id=session.id,
        player_id=original.player_id,
        amount_cents=new_amount_cents,
        timestamp=env.now(),
        reason=original.reason,
    )
    cash_outs = tuple(
        replace(c, superseded_by=corrected.id) if c.id == cash_out_id else c for c in session.cash_outs
    )
    return replace(session, cash_outs=cash_outs + (corrected,))


def rejoin_player(
    session: Session,
    player_id: str,
    *,
    env: LedgerEnv = DEFAULT_ENV,
) -> Session:
    _ensure_open(session)
    player = session.player(player_id)
    if player is None:
        raise InvalidOperation(f"unknown player: {player_id}")
    if player.active:
        if session.settings.strict_rejoin:
            raise InvalidOperation(f"player {player.name} is already active")
        return session

    reentry = ReentryEvent(
        id=env.new_id(),
        session_id=session.id,
        player_id=player_id,
        timestamp=env.now(),
    )
    updated = replace(session, reentries=session.reentries + (reentry,))
    return _with_player(updated, replace(player, active=True, rejoin_count=player.rejoin_count + 1))


def finalize_session(
    session: Session,
    final_stacks_cents: Mapping[str, int],
    *,
    enforce_tolerance: bool = False,
    env: LedgerEnv = DEFAULT_ENV,
) -> Session:
    """Record final stacks, settle and close the session in one step.

    Nothing is committed unless every check passes: the input value is never
    modified and the closed session is only returned once the settlement has
    been computed (and, with ``enforce_tolerance``, validated).
    """
    _ensure_open(session)
    active = session.active_players()
    if len(active) < 2:
        raise InvalidOperation("at least 2 active players required to finalize")
    missing = [player.name for player in active if player.id not in final_stacks_cents]
    if missing:
        raise InvalidOperation(f"missing final stacks for: {', '.join(missing)}")
    unknown = [player_id for player_id in final_stacks_cents if player_id not in session.players]
    if unknown:
        raise ValidationError(f"unknown players in final stacks: {', '.join(sorted(unknown))}")
    negative = [player_id for player_id, amount in final_stacks_cents.items() if amount < 0]
    if negative:
        raise ValidationError("final stacks must be non-negative")

    ordered_ids = [player.id for player in session.ordered_players() if player.id in final_stacks_cents]
    final_cash_outs = tuple(
        CashOut(
            id=env.new_id(),
            session_id=session.id,
            player_id=player_id,
            amount_cents=final_stacks_cents[player_id],
            timestamp=env.now(),
            reason=CashOutReason.FINAL,
        )
        for player_id in ordered_ids
    )
    staged = replace(session, cash_outs=session.cash_outs + final_cash_outs)
    snapshot = calculate_settlement(staged, env=env)

    if enforce_tolerance and not validate_settlement(
        snapshot.nets, session.settings.variance_tolerance_cents
    ):
        raise InvalidOperation(
            f"variance {snapshot.variance_cents} exceeds tolerance "
            f"{session.settings.variance_tolerance_cents}"
        )

    return replace(
        staged,
        status=SessionStatus.CLOSED,
        closed_at=env.now(),
        settlement=snapshot,
    )


def mark_transaction_paid(session: Session, index: int, paid: bool = True) -> Session:
    if session.is_open or session.settlement is None:
        raise InvalidOperation("session has not been settled")
    transactions = session.settlement.transactions
    if not 0 <= index < len(transactions):
        raise NotFound(f"settlement transaction not found: {index}")
    if transactions[index].paid == paid:
        return session

    updated = transactions[:index] + (replace(transactions[index], paid=paid),) + transactions[index + 1 :]
    return replace(session, settlement=replace(session.settlement, transactions=updated))


def _ensure_open(session: Session) -> None:
    if session.status != SessionStatus.OPEN:
        raise InvalidOperation(f"session {session.id} is closed")


def _with_player(session: Session, player: Player) -> Session:
    return replace(session, players={**session.players, player.id: player})


def _soft_delete_latest(session: Session, player_id: str | None) -> Session:
    candidates = [
        (buy_in.timestamp, position)
        for position, buy_in in enumerate(session.buy_ins)
        if is_live_buy_in(buy_in) and (player_id is None or buy_in.player_id == player_id)
    ]
    if not candidates:
        return session

    _, target = max(candidates)
    buy_ins = tuple(
        replace(buy_in, deleted=True) if position == target else buy_in
        for position, buy_in in enumerate(session.buy_ins)
    )
    return replace(session, buy_ins=buy_ins)
