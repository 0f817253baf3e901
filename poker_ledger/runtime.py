from __future__ import annotations

import os
from functools import lru_cache

from poker_ledger.domain import SessionSettings
from poker_ledger.service import LedgerService
from poker_ledger.storage.database import DATABASE_URL, make_engine, make_session_factory
from poker_ledger.storage.repository import SqlSessionStore


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


DEFAULT_VARIANCE_TOLERANCE_CENTS = int(os.getenv("DEFAULT_VARIANCE_TOLERANCE_CENTS", "100"))
ENFORCE_VARIANCE_TOLERANCE = _env_flag("ENFORCE_VARIANCE_TOLERANCE")


@lru_cache
def get_service() -> LedgerService:
    store = SqlSessionStore(make_session_factory(make_engine(DATABASE_URL)))
    return LedgerService(
        store,
        default_settings=SessionSettings(variance_tolerance_cents=DEFAULT_VARIANCE_TOLERANCE_CENTS),
        enforce_tolerance=ENFORCE_VARIANCE_TOLERANCE,
    )
