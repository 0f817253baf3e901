from dataclasses import replace
from datetime import datetime, timezone

import pytest

from poker_ledger.domain import (
    InvalidOperation,
    add_player,
    create_session,
    finalize_session,
    mark_transaction_paid,
    record_buy_in,
    summarize_settlement,
)


def _settled(env, bob_stack: int = 3000):
    session = create_session("Friday game", env=env)
    session, alice = add_player(session, "Alice", env=env)
    session, bob = add_player(session, "Bob", env=env)
    session = record_buy_in(session, alice, 2000, env=env)
    session = record_buy_in(session, bob, 2000, env=env)
    return finalize_session(session, {alice: 1000, bob: bob_stack}, env=env), alice, bob


def test_summary_requires_settlement(env) -> None:
    with pytest.raises(InvalidOperation):
        summarize_settlement(create_session("Open game", env=env))


def test_summary_lists_results_and_payments(env) -> None:
    session, _, _ = _settled(env)
    generated = datetime.fromtimestamp(session.settlement.calculated_at / 1000, tz=timezone.utc)

    assert summarize_settlement(session).splitlines() == [
        "Friday game - Settlement Summary",
        f"Generated: {generated:%Y-%m-%d %H:%M} UTC",
        "",
        "Player Results:",
        "Alice: $20.00 buy-ins, $10.00 cash-out, $10.00 loss",
        "Bob: $20.00 buy-ins, $30.00 cash-out, $10.00 profit",
        "",
        "Settlement Transactions:",
        "1. Alice pays Bob: $10.00",
    ]


def test_summary_marks_paid_and_variance(env) -> None:
    session, _, _ = _settled(env, bob_stack=3050)
    session = mark_transaction_paid(session, 0)

    lines = summarize_settlement(session).splitlines()

    assert "1. Alice pays Bob: $10.00 (paid)" in lines
    assert lines[-1] == "Variance: $0.50 over"


def test_summary_names_missing_players(env) -> None:
    session, _, bob = _settled(env)
    players = {pid: p for pid, p in session.players.items() if pid != bob}

    summary = summarize_settlement(replace(session, players=players))

    assert "1. Alice pays Unknown Player: $10.00" in summary
