"""Event-sourced record of a cash game: sessions, players and money events."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4

from .errors import ValidationError

SCHEMA_VERSION = 1
SETTLEMENT_ALGORITHM = "greedy-max-flow-v1"


class SessionStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class CashOutReason(str, Enum):
    LEAVE = "leave"
    FINAL = "final"


def _new_id() -> str:
    return str(uuid4())


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class LedgerEnv:
    """Id and clock capabilities supplied to every command that creates records."""

    new_id: Callable[[], str] = _new_id
    now: Callable[[], int] = _now_ms


DEFAULT_ENV = LedgerEnv()


@dataclass(frozen=True)
class SessionSettings:
    variance_tolerance_cents: int = 100
    quick_buy_in_options: tuple[int, ...] = (2000, 4000, 10000)
    require_active_for_buy_in: bool = True
    strict_rejoin: bool = True

    def __post_init__(self) -> None:
        if self.variance_tolerance_cents < 0:
            raise ValidationError("variance_tolerance_cents must be non-negative")
        options = tuple(self.quick_buy_in_options)
        if any(option <= 0 for option in options):
            raise ValidationError("quick buy-in options must be positive")
        object.__setattr__(self, "quick_buy_in_options", options)


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    created_at: int
    active: bool = True
    order: int = 0
    rejoin_count: int = 0
    color: str | None = None

    def __post_init__(self) -> None:
        if self.rejoin_count < 0:
            raise ValidationError("rejoin_count must be non-negative")


@dataclass(frozen=True)
class BuyIn:
    id: str
    session_id: str
    player_id: str
    amount_cents: int
    timestamp: int
    deleted: bool = False

    def __post_init__(self) -> None:
        if self.amount_cents <= 0:
            raise ValidationError("buy-in amount must be positive")


@dataclass(frozen=True)
class CashOut:
    id: str
    session_id: str
    player_id: str
    amount_cents: int
    timestamp: int
    reason: CashOutReason = CashOutReason.LEAVE
    superseded_by: str | None = None

    def __post_init__(self) -> None:
        if self.amount_cents < 0:
            raise ValidationError("cash-out amount must be non-negative")


@dataclass(frozen=True)
class ReentryEvent:
    id: str
    session_id: str
    player_id: str
    timestamp: int


@dataclass(frozen=True)
class PlayerNet:
    player_id: str
    buy_ins_cents: int
    cash_out_cents: int
    net_cents: int


@dataclass(frozen=True)
class SettlementTx:
    from_player_id: str
    to_player_id: str
    amount_cents: int
    paid: bool = False

    def __post_init__(self) -> None:
        if self.amount_cents <= 0:
            raise ValidationError("settlement transaction amount must be positive")


@dataclass(frozen=True)
class SettlementSnapshot:
    nets: tuple[PlayerNet, ...]
    transactions: tuple[SettlementTx, ...]
    variance_cents: int
    calculated_at: int
    algorithm: str = SETTLEMENT_ALGORITHM


@dataclass(frozen=True)
class Session:
    id: str
    name: str
    created_at: int
    currency: str = "$"
    closed_at: int | None = None
    players: dict[str, Player] = field(default_factory=dict)
    buy_ins: tuple[BuyIn, ...] = ()
    cash_outs: tuple[CashOut, ...] = ()
    reentries: tuple[ReentryEvent, ...] = ()
    settings: SessionSettings = field(default_factory=SessionSettings)
    status: SessionStatus = SessionStatus.OPEN
    settlement: SettlementSnapshot | None = None
    version: int = SCHEMA_VERSION

    @property
    def is_open(self) -> bool:
        return self.status == SessionStatus.OPEN

    def player(self, player_id: str) -> Player | None:
        return self.players.get(player_id)

    def ordered_players(self) -> list[Player]:
        return sorted(self.players.values(), key=lambda player: player.order)

    def active_players(self) -> list[Player]:
        return [player for player in self.ordered_players() if player.active]


def is_live_buy_in(buy_in: BuyIn) -> bool:
    return not buy_in.deleted


def is_live_cash_out(cash_out: CashOut) -> bool:
    return cash_out.superseded_by is None


def live_buy_ins(buy_ins: Iterable[BuyIn], player_id: str | None = None) -> list[BuyIn]:
    return [
        buy_in
        for buy_in in buy_ins
        if is_live_buy_in(buy_in) and (player_id is None or buy_in.player_id == player_id)
    ]


def live_cash_outs(cash_outs: Iterable[CashOut], player_id: str | None = None) -> list[CashOut]:
    return [
        cash_out
        for cash_out in cash_outs
        if is_live_cash_out(cash_out) and (player_id is None or cash_out.player_id == player_id)
    ]
