from __future__ import annotations

import logging
import os
import sys

from fastapi import FastAPI, Request

from poker_ledger.api.errors import ledger_error_handler
from poker_ledger.api.sessions import router as sessions_router
from poker_ledger.domain import LedgerError

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


def create_app() -> FastAPI:
    app = FastAPI(title="Poker Ledger API", version="1.0.0")
    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.include_router(sessions_router)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info("%s %s - %s", request.method, request.url.path, response.status_code)
        return response

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


configure_logging()
app = create_app()
