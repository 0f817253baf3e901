"""Domain logic for player nets, variance and settlement transfers of a cash game."""

from __future__ import annotations

import heapq
from collections.abc import Sequence

from .models import (
    DEFAULT_ENV,
    SETTLEMENT_ALGORITHM,
    LedgerEnv,
    PlayerNet,
    Session,
    SettlementSnapshot,
    SettlementTx,
    live_buy_ins,
    live_cash_outs,
)


def compute_player_nets(session: Session) -> list[PlayerNet]:
    buy_ins = live_buy_ins(session.buy_ins)
    cash_outs = live_cash_outs(session.cash_outs)

    nets: list[PlayerNet] = []
    for player in session.ordered_players():
        buy_ins_cents = sum(b.amount_cents for b in buy_ins if b.player_id == player.id)
        cash_out_cents = sum(c.amount_cents for c in cash_outs if c.player_id == player.id)
        nets.append(
            PlayerNet(
                player_id=player.id,
                buy_ins_cents=buy_ins_cents,
                cash_out_cents=cash_out_cents,
                net_cents=cash_out_cents - buy_ins_cents,
            )
        )
    return nets


def compute_variance(session: Session) -> int:
    """Money returned minus money put in. Positive means more cash came back than went in."""
    total_buy_ins = sum(b.amount_cents for b in live_buy_ins(session.buy_ins))
    total_cash_outs = sum(c.amount_cents for c in live_cash_outs(session.cash_outs))
    return total_cash_outs - total_buy_ins


def minimize_cash_flow(nets: Sequence[PlayerNet]) -> list[SettlementTx]:
    """Greedy debt netting: the largest debtor pays the largest creditor until one side runs out.

    Equal amounts are resolved by position in ``nets``. Any residual left on
    one side (only possible with non-zero variance) is not turned into a
    transaction.
    """
    creditors = [(-net.net_cents, idx, net.player_id) for idx, net in enumerate(nets) if net.net_cents > 0]
    debtors = [(net.net_cents, idx, net.player_id) for idx, net in enumerate(nets) if net.net_cents < 0]
    heapq.heapify(creditors)
    heapq.heapify(debtors)

    transactions: list[SettlementTx] = []
    while creditors and debtors:
        neg_credit, creditor_idx, creditor_id = heapq.heappop(creditors)
        neg_debt, debtor_idx, debtor_id = heapq.heappop(debtors)
        credit, debt = -neg_credit, -neg_debt

        payment = min(credit, debt)
        if payment > 0:
            transactions.append(
                SettlementTx(from_player_id=debtor_id, to_player_id=creditor_id, amount_cents=payment)
            )

        if credit - payment > 0:
            heapq.heappush(creditors, (payment - credit, creditor_idx, creditor_id))
        if debt - payment > 0:
            heapq.heappush(debtors, (payment - debt, debtor_idx, debtor_id))

    return transactions


def calculate_settlement(session: Session, *, env: LedgerEnv = DEFAULT_ENV) -> SettlementSnapshot:
    nets = compute_player_nets(session)
    return SettlementSnapshot(
        nets=tuple(nets),
        transactions=tuple(minimize_cash_flow(nets)),
        variance_cents=compute_variance(session),
        calculated_at=env.now(),
        algorithm=SETTLEMENT_ALGORITHM,
    )


def validate_settlement(nets: Sequence[PlayerNet], tolerance_cents: int = 100) -> bool:
    return abs(sum(net.net_cents for net in nets)) <= tolerance_cents
