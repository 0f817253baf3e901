from __future__ import annotations

from datetime import datetime, timezone

from .errors import InvalidOperation
from .models import Session
from .money import format_cents


def summarize_settlement(session: Session) -> str:
    """Plain-text settlement report suitable for sharing with the table."""
    settlement = session.settlement
    if settlement is None:
        raise InvalidOperation("session has not been settled")

    def name_of(player_id: str) -> str:
        player = session.player(player_id)
        return player.name if player else "Unknown Player"

    generated = datetime.fromtimestamp(settlement.calculated_at / 1000, tz=timezone.utc)
    lines = [
        f"{session.name} - Settlement Summary",
        f"Generated: {generated:%Y-%m-%d %H:%M} UTC",
        "",
        "Player Results:",
    ]
    for net in settlement.nets:
        result = "profit" if net.net_cents >= 0 else "loss"
        lines.append(
            f"{name_of(net.player_id)}: "
            f"{format_cents(net.buy_ins_cents, session.currency)} buy-ins, "
            f"{format_cents(net.cash_out_cents, session.currency)} cash-out, "
            f"{format_cents(abs(net.net_cents), session.currency)} {result}"
        )

    lines.extend(["", "Settlement Transactions:"])
    for number, tx in enumerate(settlement.transactions, start=1):
        mark = " (paid)" if tx.paid else ""
        lines.append(
            f"{number}. {name_of(tx.from_player_id)} pays {name_of(tx.to_player_id)}: "
            f"{format_cents(tx.amount_cents, session.currency)}{mark}"
        )

    if settlement.variance_cents != 0:
        direction = "over" if settlement.variance_cents > 0 else "under"
        lines.extend(["", f"Variance: {format_cents(abs(settlement.variance_cents), session.currency)} {direction}"])

    return "\n".join(lines)
