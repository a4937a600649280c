# polytrader/server.py
"""
HTTP surface of the gateway.

Endpoints mirror what the workflow tool calls after a human approves a trade:
place a bet, cancel it, look at open orders, trades and prices. Everything
except GET / requires the shared secret (x-api-key header or ?key=).
"""
from __future__ import annotations

import hmac
import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, Optional, Union

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import SERVICE_NAME, GatewayConfig, load_config, validate_config
from .errors import ClientNotReady, GatewayError, OrderError, Unauthorized, VenueError
from .execution import ClobExecution
from .models import TradeIntent
from .order_store import OrderStore
from .session import TraderSession

log = logging.getLogger("polytrader.server")


class BetRequest(BaseModel):
    tokenId: Optional[Union[str, int]] = None
    side: Optional[str] = None
    amount: Optional[Union[float, str]] = None
    price: Optional[Union[float, str]] = None
    orderType: Optional[str] = None


def create_app(
    cfg: Optional[GatewayConfig] = None,
    session: Optional[TraderSession] = None,
    store: Optional[OrderStore] = None,
) -> FastAPI:
    cfg = cfg or load_config()
    session = session or TraderSession(cfg)
    store = store or OrderStore(ttl_sec=cfg.store.ttl_sec, max_entries=cfg.store.max_entries)
    execution = ClobExecution(
        session=session,
        store=store,
        slippage=Decimal(str(cfg.trading.slippage)),
        default_tick_size=Decimal(cfg.trading.default_tick_size),
        default_order_type=cfg.trading.default_order_type,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info(f"Starting {SERVICE_NAME}")
        problems = validate_config(cfg)
        for p in problems:
            log.warning(f"[CONFIG] {p}")
        await session.start()
        yield
        await session.stop()
        log.info(f"Shutting down {SERVICE_NAME}")

    app = FastAPI(title=SERVICE_NAME, lifespan=lifespan)
    app.state.cfg = cfg
    app.state.session = session
    app.state.store = store
    app.state.execution = execution

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.server.cors_origins,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    # ---------- errors ----------

    def _error_response(status_code: int):
        async def handler(request: Request, exc: GatewayError) -> JSONResponse:
            return JSONResponse(status_code=status_code, content=exc.to_dict())

        return handler

    app.add_exception_handler(Unauthorized, _error_response(401))
    app.add_exception_handler(OrderError, _error_response(400))
    app.add_exception_handler(ClientNotReady, _error_response(503))
    app.add_exception_handler(VenueError, _error_response(502))

    @app.exception_handler(RequestValidationError)
    async def bad_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": "Invalid request body", "detail": jsonable_encoder(exc.errors())})

    # ---------- auth ----------

    def authorized(
        x_api_key: Optional[str] = Header(None),
        key: Optional[str] = Query(None),
    ) -> None:
        secret = cfg.auth.api_secret
        token = x_api_key or key or ""
        if secret and not hmac.compare_digest(token.encode("utf-8"), secret.encode("utf-8")):
            raise Unauthorized()
        session.require_client()

    # ---------- routes ----------

    @app.get("/")
    def health() -> dict:
        return session.status()

    @app.get("/balance", dependencies=[Depends(authorized)])
    def balance() -> dict:
        return execution.open_orders(limit=cfg.trading.balance_orders_limit)

    @app.get("/price/{token_id}", dependencies=[Depends(authorized)])
    def price(token_id: str) -> dict:
        return execution.quote(token_id)

    @app.post("/bet", dependencies=[Depends(authorized)])
    def bet(req: BetRequest) -> Any:
        intent = TradeIntent(token_id=req.tokenId, side=req.side, amount_usd=req.amount, limit_price=req.price)
        try:
            return execution.bet(intent, req.orderType)
        except OrderError as e:
            log.warning(f"[ORDER] rejected: {e}")
            raise

    @app.delete("/order/{order_id}", dependencies=[Depends(authorized)])
    def cancel(order_id: str) -> dict:
        return {"success": True, "result": execution.cancel(order_id)}

    @app.get("/order/{order_id}", dependencies=[Depends(authorized)])
    def order(order_id: str) -> dict:
        return execution.order(order_id)

    @app.get("/trades", dependencies=[Depends(authorized)])
    def trades() -> dict:
        return execution.trades(limit=cfg.trading.trades_limit)

    @app.get("/market/{condition_id}", dependencies=[Depends(authorized)])
    def market(condition_id: str) -> Any:
        return execution.market(condition_id)

    return app
