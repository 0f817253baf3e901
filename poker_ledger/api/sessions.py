from __future__ import annotations

import json
from dataclasses import asdict, replace
from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status

from poker_ledger.api.schemas import (
    AddPlayerRequest,
    AddPlayerResponse,
    AmountRequest,
    CashOutRequest,
    CreateSessionRequest,
    ErrorEnvelope,
    FinalizeRequest,
    ImportResponse,
    MarkPaidRequest,
    SettlementResponse,
    SummaryResponse,
    UpdatePlayerRequest,
)
from poker_ledger.domain import (
    InvalidOperation,
    SettlementSnapshot,
    dump_session,
    validate_settlement,
)
from poker_ledger.runtime import get_service
from poker_ledger.service import LedgerService

router = APIRouter(
    prefix="/sessions",
    tags=["sessions"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorEnvelope},
        status.HTTP_404_NOT_FOUND: {"model": ErrorEnvelope},
        status.HTTP_409_CONFLICT: {"model": ErrorEnvelope},
    },
)


def _settlement_response(
    session_id: str, snapshot: SettlementSnapshot, tolerance_cents: int
) -> SettlementResponse:
    return SettlementResponse(
        session_id=session_id,
        nets=[asdict(net) for net in snapshot.nets],
        transactions=[asdict(tx) for tx in snapshot.transactions],
        variance_cents=snapshot.variance_cents,
        calculated_at=snapshot.calculated_at,
        algorithm=snapshot.algorithm,
        within_tolerance=validate_settlement(snapshot.nets, tolerance_cents),
    )


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a new session")
def create_session(
    payload: CreateSessionRequest, service: LedgerService = Depends(get_service)
) -> dict[str, Any]:
    settings = replace(service.default_settings, **payload.settings_overrides())
    session = service.create_session(payload.name, payload.currency, settings)
    return dump_session(session)


@router.get("", summary="List sessions")
def list_sessions(service: LedgerService = Depends(get_service)) -> list[dict[str, Any]]:
    return [dump_session(session) for session in service.list_sessions()]


@router.post("/import", response_model=ImportResponse, summary="Import exported sessions")
def import_sessions(
    payload: dict[str, Any] = Body(...), service: LedgerService = Depends(get_service)
) -> ImportResponse:
    imported = service.import_sessions(json.dumps(payload))
    return ImportResponse(imported=[session.id for session in imported])


@router.get("/{session_id}", summary="Get a session")
def get_session(session_id: str, service: LedgerService = Depends(get_service)) -> dict[str, Any]:
    return dump_session(service.get_session(session_id))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a session")
def delete_session(session_id: str, service: LedgerService = Depends(get_service)) -> Response:
    service.delete_session(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{session_id}/export", summary="Export a session document")
def export_session(session_id: str, service: LedgerService = Depends(get_service)) -> Response:
    return Response(
        content=service.export_session(session_id),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="session-{session_id}.json"'},
    )


@router.post(
    "/{session_id}/players",
    response_model=AddPlayerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a player",
)
def add_player(
    session_id: str, payload: AddPlayerRequest, service: LedgerService = Depends(get_service)
) -> AddPlayerResponse:
    session, player_id = service.add_player(session_id, payload.name, payload.color)
    return AddPlayerResponse(player_id=player_id, session=dump_session(session))


@router.patch("/{session_id}/players/{player_id}", summary="Rename or recolour a player")
def update_player(
    session_id: str,
    player_id: str,
    payload: UpdatePlayerRequest,
    service: LedgerService = Depends(get_service),
) -> dict[str, Any]:
    session = service.update_player(session_id, player_id, name=payload.name, color=payload.color)
    return dump_session(session)


@router.delete("/{session_id}/players/{player_id}", summary="Remove a player without financial history")
def remove_player(
    session_id: str, player_id: str, service: LedgerService = Depends(get_service)
) -> dict[str, Any]:
    return dump_session(service.remove_player(session_id, player_id))


@router.post("/{session_id}/players/{player_id}/buy-ins", summary="Record a buy-in")
def record_buy_in(
    session_id: str,
    player_id: str,
    payload: AmountRequest,
    service: LedgerService = Depends(get_service),
) -> dict[str, Any]:
    return dump_session(service.record_buy_in(session_id, player_id, payload.amount_cents))


@router.post("/{session_id}/buy-ins/undo", summary="Undo the latest buy-in of the session")
def undo_last_buy_in(session_id: str, service: LedgerService = Depends(get_service)) -> dict[str, Any]:
    return dump_session(service.undo_last_buy_in(session_id))


@router.post("/{session_id}/players/{player_id}/buy-ins/undo", summary="Undo a player's latest buy-in")
def undo_last_buy_in_for_player(
    session_id: str, player_id: str, service: LedgerService = Depends(get_service)
) -> dict[str, Any]:
    return dump_session(service.undo_last_buy_in_for_player(session_id, player_id))


@router.post("/{session_id}/players/{player_id}/cash-out", summary="Cash a player out")
def cash_out_player(
    session_id: str,
    player_id: str,
    payload: CashOutRequest,
    service: LedgerService = Depends(get_service),
) -> dict[str, Any]:
    session = service.cash_out_player(session_id, player_id, payload.amount_cents, payload.reason)
    return dump_session(session)


@router.put("/{session_id}/cash-outs/{cash_out_id}", summary="Correct a cash-out amount")
def edit_cash_out(
    session_id: str,
    cash_out_id: str,
    payload: AmountRequest,
    service: LedgerService = Depends(get_service),
) -> dict[str, Any]:
    return dump_session(service.edit_cash_out(session_id, cash_out_id, payload.amount_cents))


@router.post("/{session_id}/players/{player_id}/rejoin", summary="Bring a cashed-out player back")
def rejoin_player(
    session_id: str, player_id: str, service: LedgerService = Depends(get_service)
) -> dict[str, Any]:
    return dump_session(service.rejoin_player(session_id, player_id))


@router.get(
    "/{session_id}/settlement/preview",
    response_model=SettlementResponse,
    summary="Settlement of the current state without closing the session",
)
def settlement_preview(session_id: str, service: LedgerService = Depends(get_service)) -> SettlementResponse:
    session = service.get_session(session_id)
    snapshot = service.settlement_preview(session_id)
    return _settlement_response(session_id, snapshot, session.settings.variance_tolerance_cents)


@router.post("/{session_id}/finalize", summary="Record final stacks and close the session")
def finalize_session(
    session_id: str, payload: FinalizeRequest, service: LedgerService = Depends(get_service)
) -> dict[str, Any]:
    session = service.finalize_session(session_id, payload.final_stacks_cents, payload.enforce_tolerance)
    return dump_session(session)


@router.get("/{session_id}/settlement", response_model=SettlementResponse, summary="Stored settlement")
def get_settlement(session_id: str, service: LedgerService = Depends(get_service)) -> SettlementResponse:
    session = service.get_session(session_id)
    if session.settlement is None:
        raise InvalidOperation("session is not finalized")
    return _settlement_response(session_id, session.settlement, session.settings.variance_tolerance_cents)


@router.get("/{session_id}/settlement/summary", response_model=SummaryResponse, summary="Settlement text")
def settlement_summary(session_id: str, service: LedgerService = Depends(get_service)) -> SummaryResponse:
    return SummaryResponse(session_id=session_id, summary=service.settlement_summary(session_id))


@router.post(
    "/{session_id}/settlement/transactions/{index}/paid",
    response_model=SettlementResponse,
    summary="Mark a settlement payment as paid or unpaid",
)
def mark_transaction_paid(
    session_id: str,
    index: int,
    payload: MarkPaidRequest,
    service: LedgerService = Depends(get_service),
) -> SettlementResponse:
    session = service.mark_transaction_paid(session_id, index, payload.paid)
    return _settlement_response(session_id, session.settlement, session.settings.variance_tolerance_cents)
