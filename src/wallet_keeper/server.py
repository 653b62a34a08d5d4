"""FastAPI surface exposing a :class:`Keeper` to upstream services.

Routes follow the bitcoind RPC names. Successful calls answer
``{"message": <result>}``; failures answer ``{"error": <text>}`` with a
status code derived from the error kind.
"""

from __future__ import annotations

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from wallet_keeper.errors import (
    AccountExistsError,
    AccountNotFoundError,
    DecodeError,
    KeeperError,
    TransportError,
    UnsupportedOperationError,
)
from wallet_keeper.keeper import Keeper

logger = logging.getLogger("wallet_keeper.server")

_STATUS_BY_ERROR: list[tuple[type[KeeperError], int]] = [
    (AccountNotFoundError, 404),
    (AccountExistsError, 409),
    (UnsupportedOperationError, 501),
    (TransportError, 502),
    (DecodeError, 502),
]


def status_for(exc: KeeperError) -> int:
    """HTTP status code for a keeper error."""
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


# ------------------------------------------------------------------
# Request bodies
# ------------------------------------------------------------------


class CreateAccountBody(BaseModel):
    account: str


class SendToAddressBody(BaseModel):
    address: str
    amount: float


class SendFromBody(BaseModel):
    account: str
    address: str
    amount: float


class MoveBody(BaseModel):
    from_account: str = Field(alias="from")
    to_account: str = Field(alias="to")
    amount: float


# ------------------------------------------------------------------
# App factory
# ------------------------------------------------------------------


def create_app(keeper: Keeper) -> FastAPI:
    """Build the HTTP app serving *keeper*."""
    app = FastAPI(title="wallet-keeper")
    app.state.keeper = keeper

    @app.exception_handler(KeeperError)
    async def keeper_error_handler(request: Request, exc: KeeperError) -> JSONResponse:
        status = status_for(exc)
        if status >= 500:
            logger.error(f"{request.url.path} failed: {exc}")
        return JSONResponse(status_code=status, content={"error": str(exc)})

    # Plain ``def`` handlers run in the threadpool; the store does its own locking.

    @app.get("/ping")
    def ping():
        keeper.ping()
        return {"message": "pong"}

    @app.get("/getblockcount")
    def get_block_count(timeout: Optional[float] = Query(None, gt=0)):
        return {"message": keeper.get_block_count(timeout=timeout)}

    @app.get("/getaddress")
    def get_address(account: str = Query(...)):
        return {"message": keeper.get_address(account)}

    @app.post("/createaccount")
    def create_account(body: CreateAccountBody):
        return {"message": keeper.create_account(body.account).model_dump()}

    @app.get("/getaccountinfo")
    def get_account_info(address: str = Query(...), minconf: int = Query(1)):
        return {"message": keeper.get_account_info(address, minconf).model_dump()}

    @app.get("/getnewaddress")
    def get_new_address(account: str = Query(...)):
        return {"message": keeper.get_new_address(account)}

    @app.get("/getaddressesbyaccount")
    def get_addresses_by_account(account: str = Query(...)):
        return {"message": keeper.get_addresses_by_account(account)}

    @app.get("/listaccounts")
    def list_accounts(minconf: int = Query(1)):
        return {"message": keeper.list_accounts_min_conf(minconf)}

    @app.post("/sendtoaddress")
    def send_to_address(body: SendToAddressBody):
        keeper.send_to_address(body.address, body.amount)
        return {"message": "ok"}

    @app.post("/sendfrom")
    def send_from(body: SendFromBody):
        keeper.send_from(body.account, body.address, body.amount)
        return {"message": "ok"}

    @app.get("/listunspent")
    def list_unspent(minconf: int = Query(1)):
        outputs = keeper.list_unspent_min(minconf)
        return {"message": [o.model_dump() for o in outputs]}

    @app.post("/move")
    def move(body: MoveBody):
        return {"message": keeper.move(body.from_account, body.to_account, body.amount)}

    return app


def run_server(keeper: Keeper, host: str = "127.0.0.1", port: int = 8000) -> None:
    """Start the HTTP server (blocking)."""
    app = create_app(keeper)
    logger.info(f"Serving wallet-keeper on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")
