from .codec import (
    dump_session,
    load_session,
    session_from_json,
    session_to_json,
    sessions_from_json,
    sessions_to_json,
)
from .errors import InvalidOperation, LedgerError, NotFound, ValidationError
from .ledger import (
    add_player,
    cash_out_player,
    create_session,
    edit_cash_out,
    finalize_session,
    mark_transaction_paid,
    normalize_name,
    record_buy_in,
    rejoin_player,
    remove_player,
    undo_last_buy_in,
    undo_last_buy_in_for_player,
    update_player,
)
from .models import (
    DEFAULT_ENV,
    SCHEMA_VERSION,
    SETTLEMENT_ALGORITHM,
    BuyIn,
    CashOut,
    CashOutReason,
    LedgerEnv,
    Player,
    PlayerNet,
    ReentryEvent,
    Session,
    SessionSettings,
    SessionStatus,
    SettlementSnapshot,
    SettlementTx,
    is_live_buy_in,
    is_live_cash_out,
)
from .money import format_cents, from_cents, is_within_tolerance, parse_amount, to_cents
from .settlement import (
    calculate_settlement,
    compute_player_nets,
    compute_variance,
    minimize_cash_flow,
    validate_settlement,
)
from .summary import summarize_settlement

__all__ = [
    "DEFAULT_ENV",
    "SCHEMA_VERSION",
    "SETTLEMENT_ALGORITHM",
    "BuyIn",
    "CashOut",
    "CashOutReason",
    "InvalidOperation",
    "LedgerEnv",
    "LedgerError",
    "NotFound",
    "Player",
    "PlayerNet",
    "ReentryEvent",
    "Session",
    "SessionSettings",
    "SessionStatus",
    "SettlementSnapshot",
    "SettlementTx",
    "ValidationError",
    "add_player",
    "calculate_settlement",
    "cash_out_player",
    "compute_player_nets",
    "compute_variance",
    "create_session",
    "dump_session",
    "edit_cash_out",
    "finalize_session",
    "format_cents",
    "from_cents",
    "is_live_buy_in",
    "is_live_cash_out",
    "is_within_tolerance",
    "load_session",
    "mark_transaction_paid",
    "minimize_cash_flow",
    "normalize_name",
    "parse_amount",
    "record_buy_in",
    "rejoin_player",
    "remove_player",
    "session_from_json",
    "session_to_json",
    "sessions_from_json",
    "sessions_to_json",
    "summarize_settlement",
    "to_cents",
    "undo_last_buy_in",
    "undo_last_buy_in_for_player",
    "update_player",
    "validate_settlement",
]
