import json

import pytest

from poker_ledger.domain import (
    CashOutReason,
    Session,
    SessionStatus,
    ValidationError,
    add_player,
    cash_out_player,
    create_session,
    dump_session,
    edit_cash_out,
    finalize_session,
    load_session,
    record_buy_in,
    rejoin_player,
    remove_player,
    session_from_json,
    session_to_json,
    sessions_from_json,
    sessions_to_json,
    undo_last_buy_in,
)


@pytest.fixture
def closed_session(env) -> Session:
    session = create_session("Saturday", currency="€", env=env)
    session, alice = add_player(session, "Alice", color="#00ff00", env=env)
    session, bob = add_player(session, "Bob", env=env)
    session = record_buy_in(session, alice, 2000, env=env)
    session = record_buy_in(session, bob, 4000, env=env)
    session = undo_last_buy_in(session)
    session = record_buy_in(session, bob, 2000, env=env)
    session = cash_out_player(session, alice, 500, env=env)
    session = edit_cash_out(session, session.cash_outs[-1].id, 700, env=env)
    session = rejoin_player(session, alice, env=env)
    return finalize_session(session, {alice: 1000, bob: 2300}, env=env)


def test_session_survives_json_exchange(closed_session) -> None:
    restored = session_from_json(session_to_json(closed_session))

    assert restored == closed_session
    assert restored.status is SessionStatus.CLOSED
    assert restored.cash_outs[-1].reason is CashOutReason.FINAL
    assert isinstance(restored.buy_ins, tuple)
    assert restored.settings.quick_buy_in_options == (2000, 4000, 10000)


def test_dump_session_is_plain_json(closed_session) -> None:
    data = dump_session(closed_session)

    assert data["status"] == "closed"
    assert data["currency"] == "€"
    assert data["version"] == 1
    assert data["settlement"]["algorithm"] == "greedy-max-flow-v1"
    assert [b["deleted"] for b in data["buy_ins"]] == [False, True, False]
    assert data["cash_outs"][0]["superseded_by"] == data["cash_outs"][1]["id"]
    assert json.loads(json.dumps(data)) == data


def test_load_session_defaults_optional_fields() -> None:
    session = load_session({"id": "s-1", "name": "Minimal", "created_at": 1})

    assert session.players == {}
    assert session.status is SessionStatus.OPEN
    assert session.settlement is None


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        "[]",
        json.dumps({"id": "s-1", "name": "Broken"}),
        json.dumps({"id": "s-1", "name": "Bad", "created_at": 1, "status": "paused"}),
    ],
)
def test_session_from_json_rejects_invalid_documents(payload) -> None:
    with pytest.raises(ValidationError):
        session_from_json(payload)


def test_negative_amounts_are_rejected_on_load(closed_session) -> None:
    data = dump_session(closed_session)
    data["buy_ins"][0]["amount_cents"] = -5

    with pytest.raises(ValidationError):
        load_session(data)


def test_multi_session_export_and_import(env, closed_session) -> None:
    other = create_session("Sunday", env=env)
    payload = sessions_to_json({closed_session.id: closed_session, other.id: other})

    restored = sessions_from_json(payload)

    assert restored == {closed_session.id: closed_session, other.id: other}


def test_import_rejects_mismatched_keys(closed_session) -> None:
    payload = sessions_to_json({"wrong-id": closed_session})

    with pytest.raises(ValidationError):
        sessions_from_json(payload)
    with pytest.raises(ValidationError):
        sessions_from_json("[1, 2]")
    with pytest.raises(ValidationError):
        sessions_from_json("{")


def test_load_rejects_money_for_unknown_player(closed_session) -> None:
    data = dump_session(closed_session)
    data["buy_ins"][0]["player_id"] = "ghost"

    with pytest.raises(ValidationError):
        load_session(data)


def test_load_rejects_records_from_another_session(closed_session) -> None:
    data = dump_session(closed_session)
    data["cash_outs"][0]["session_id"] = "other-session"

    with pytest.raises(ValidationError):
        load_session(data)


def test_load_rejects_player_stored_under_wrong_key(closed_session) -> None:
    data = dump_session(closed_session)
    player_id = next(iter(data["players"]))
    data["players"]["renamed"] = data["players"].pop(player_id)

    with pytest.raises(ValidationError):
        load_session(data)
    with pytest.raises(ValidationError):
        sessions_from_json(json.dumps({closed_session.id: data}))


def test_deleted_buy_in_of_removed_player_still_loads(env) -> None:
    session = create_session("Short game", env=env)
    session, alice = add_player(session, "Alice", env=env)
    session = undo_last_buy_in(record_buy_in(session, alice, 2000, env=env))
    session = remove_player(session, alice)

    assert session_from_json(session_to_json(session)) == session
