from __future__ import annotations

from itertools import count

import pytest

from poker_ledger.domain import LedgerEnv

START_MS = 1_700_000_000_000


def make_env(start: int = START_MS, step: int = 1000) -> LedgerEnv:
    ids = count(1)
    clock = count(start, step)
    return LedgerEnv(new_id=lambda: f"id-{next(ids)}", now=lambda: next(clock))


@pytest.fixture
def env() -> LedgerEnv:
    return make_env()


@pytest.fixture
def env_factory():
    return make_env
