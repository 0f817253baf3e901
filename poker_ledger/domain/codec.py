"""Lossless JSON exchange format for sessions and their nested records."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import TypeAdapter

from .errors import ValidationError
from .models import Session, live_buy_ins, live_cash_outs

_session_adapter = TypeAdapter(Session)
_sessions_adapter = TypeAdapter(dict[str, Session])


def dump_session(session: Session) -> dict[str, Any]:
    return _session_adapter.dump_python(session, mode="json")


def load_session(data: Mapping[str, Any]) -> Session:
    try:
        session = _session_adapter.validate_python(dict(data))
    except ValueError as exc:
        raise ValidationError(f"invalid session document: {exc}") from exc
    _check_references(session)
    return session


def session_to_json(session: Session, *, indent: int | None = 2) -> str:
    return json.dumps(dump_session(session), ensure_ascii=False, indent=indent)


def session_from_json(text: str) -> Session:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"invalid session document: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise ValidationError("session document must be a JSON object")
    return load_session(data)


def sessions_to_json(sessions: Mapping[str, Session], *, indent: int | None = 2) -> str:
    payload = _sessions_adapter.dump_python(dict(sessions), mode="json")
    return json.dumps(payload, ensure_ascii=False, indent=indent)


def sessions_from_json(text: str) -> dict[str, Session]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"invalid import data: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise ValidationError("import data must be a JSON object keyed by session id")
    try:
        sessions = _sessions_adapter.validate_python(data)
    except ValueError as exc:
        raise ValidationError(f"invalid import data: {exc}") from exc

    mismatched = [key for key, session in sessions.items() if key != session.id]
    if mismatched:
        raise ValidationError(f"session ids do not match their keys: {', '.join(sorted(mismatched))}")
    for session in sessions.values():
        _check_references(session)
    return sessions


def _check_references(session: Session) -> None:
    """Reject documents whose records point outside the session.

    Removed players may still own deleted buy-ins, so player references are
    only enforced for live money records.
    """
    wrong_keys = [key for key, player in session.players.items() if key != player.id]
    if wrong_keys:
        raise ValidationError(f"player ids do not match their keys: {', '.join(sorted(wrong_keys))}")

    records = (*session.buy_ins, *session.cash_outs, *session.reentries)
    foreign = [record.id for record in records if record.session_id != session.id]
    if foreign:
        raise ValidationError(f"records belong to another session: {', '.join(foreign)}")

    live = (*live_buy_ins(session.buy_ins), *live_cash_outs(session.cash_outs))
    unknown = sorted({record.player_id for record in live if record.player_id not in session.players})
    if unknown:
        raise ValidationError(f"records reference unknown players: {', '.join(unknown)}")
