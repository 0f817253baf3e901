from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from poker_ledger.domain import CashOutReason


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: Any | None = None


class ErrorEnvelope(BaseModel):
    detail: ErrorResponse


class CreateSessionRequest(BaseModel):
    name: str = Field(..., description="Session display name", examples=["Friday game"])
    currency: str = Field(default="$", max_length=8, examples=["$"])
    variance_tolerance_cents: int | None = Field(default=None, examples=[100])
    quick_buy_in_options: list[int] | None = Field(default=None, examples=[[2000, 4000, 10000]])
    require_active_for_buy_in: bool | None = None
    strict_rejoin: bool | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Friday game",
                    "currency": "$",
                    "variance_tolerance_cents": 100,
                    "quick_buy_in_options": [2000, 4000, 10000],
                }
            ]
        }
    }

    def settings_overrides(self) -> dict[str, Any]:
        overrides = self.model_dump(
            include={
                "variance_tolerance_cents",
                "quick_buy_in_options",
                "require_active_for_buy_in",
                "strict_rejoin",
            },
            exclude_none=True,
        )
        if "quick_buy_in_options" in overrides:
            overrides["quick_buy_in_options"] = tuple(overrides["quick_buy_in_options"])
        return overrides


class AddPlayerRequest(BaseModel):
    name: str = Field(..., examples=["alice"])
    color: str | None = Field(default=None, examples=["#ff8800"])


class AddPlayerResponse(BaseModel):
    player_id: str
    session: dict[str, Any]


class UpdatePlayerRequest(BaseModel):
    name: str | None = None
    color: str | None = None


class AmountRequest(BaseModel):
    amount_cents: int = Field(..., description="Amount in cents", examples=[2000])


class CashOutRequest(AmountRequest):
    reason: CashOutReason = CashOutReason.LEAVE


class FinalizeRequest(BaseModel):
    final_stacks_cents: dict[str, int] = Field(..., examples=[{"player-1": 6000, "player-2": 0}])
    enforce_tolerance: bool | None = None


class MarkPaidRequest(BaseModel):
    paid: bool = True


class PlayerNetResponse(BaseModel):
    player_id: str
    buy_ins_cents: int
    cash_out_cents: int
    net_cents: int


class SettlementTxResponse(BaseModel):
    from_player_id: str
    to_player_id: str
    amount_cents: int
    paid: bool = False


class SettlementResponse(BaseModel):
    session_id: str
    nets: list[PlayerNetResponse]
    transactions: list[SettlementTxResponse]
    variance_cents: int
    calculated_at: int
    algorithm: str
    within_tolerance: bool


class SummaryResponse(BaseModel):
    session_id: str
    summary: str


class ImportResponse(BaseModel):
    imported: list[str]
