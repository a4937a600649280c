# polytrader/execution.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from py_clob_client.clob_types import OpenOrderParams, OrderArgs, OrderType as ClobOrderType, PartialCreateOrderOptions, TradeParams
from py_clob_client.order_builder.constants import BUY, SELL

from .errors import VenueError
from .market import MarketDataAdapter
from .models import NormalizedOrder, OrderType, Side, TradeIntent
from .normalizer import check_required, is_absent, normalize, to_decimal
from .order_store import OrderStore
from .session import TraderSession


def _short(asset_id: Any, n: int = 20) -> Optional[str]:
    return None if asset_id is None else str(asset_id)[:n]


def _order_id(resp: Any) -> Optional[str]:
    if not isinstance(resp, dict):
        return None
    return resp.get("orderID") or resp.get("orderid") or resp.get("orderId") or resp.get("id")


class ClobExecution:
    """
    Venue operations for the HTTP handlers.

    Every call goes through session.require_client(), so handlers never see a
    half-initialized client. Library failures surface as VenueError.
    """

    def __init__(
        self,
        *,
        session: TraderSession,
        store: OrderStore,
        slippage: Decimal = Decimal("0.02"),
        default_tick_size: Decimal = Decimal("0.01"),
        default_order_type: str = "GTC",
        log: Optional[logging.Logger] = None,
    ):
        self.session = session
        self.store = store
        self.slippage = slippage
        self.default_tick_size = default_tick_size
        self.default_order_type = default_order_type
        self.log = log or logging.getLogger("polytrader.execution")

    def _market(self) -> MarketDataAdapter:
        return MarketDataAdapter(self.session.require_client(), default_tick_size=self.default_tick_size)

    # ---------- orders ----------

    def bet(self, intent: TradeIntent, order_type: Any = None) -> Dict[str, Any]:
        # presence before orderType and before any venue call
        check_required(intent)
        order_type = OrderType.parse(order_type, self.default_order_type)
        market = self._market()

        token_id = str(intent.token_id).strip()
        meta = market.metadata(token_id, with_midpoint=is_absent(intent.limit_price))
        order = normalize(intent, meta, slippage=self.slippage)

        self.log.info(f"[ORDER] placing {order.side.value} {order.size} shares @ {order.price} type={order_type.value}")
        self.log.info(f"[ORDER]   token={_short(order.token_id)}... amount=${intent.amount_usd} neg_risk={order.neg_risk}")

        resp = self.place(order, order_type)
        oid = _order_id(resp)
        status = resp.get("status") if isinstance(resp, dict) else None

        if oid:
            self.store.record(
                order_id=oid,
                token_id=order.token_id,
                side=order.side.value,
                price=order.price,
                size=order.size,
                amount_usd=intent.amount_usd,
                order_type=order_type.value,
                status=status,
            )
        self.log.info(f"[ORDER] placed id={oid} status={status}")

        return {
            "success": True,
            "orderId": oid,
            "status": status,
            "side": order.side.value,
            "price": float(order.price),
            "size": float(order.size),
            "amount": float(to_decimal(intent.amount_usd)),
            "tokenId": order.token_id,
            "negRisk": order.neg_risk,
            "tickSize": str(order.tick_size),
            "response": resp,
        }

    def place(self, order: NormalizedOrder, order_type: OrderType = OrderType.GTC) -> Any:
        client = self.session.require_client()
        args = OrderArgs(
            token_id=order.token_id,
            price=float(order.price),
            size=float(order.size),
            side=BUY if order.side == Side.BUY else SELL,
        )
        options = PartialCreateOrderOptions(tick_size=str(order.tick_size), neg_risk=order.neg_risk)
        try:
            signed = client.create_order(args, options)
            return client.post_order(signed, getattr(ClobOrderType, order_type.value))
        except Exception as e:
            self.log.error(f"[ORDER] failed: {e!r}")
            raise VenueError("post_order", e) from e

    def cancel(self, order_id: str) -> Any:
        client = self.session.require_client()
        try:
            result = client.cancel(order_id)
        except Exception as e:
            raise VenueError("cancel", e) from e
        self.store.mark_canceled(order_id)
        self.log.info(f"[ORDER] cancel id={order_id} result={result}")
        return result

    def order(self, order_id: str) -> Dict[str, Any]:
        client = self.session.require_client()
        rec = self.store.get(order_id)
        try:
            venue = client.get_order(order_id)
        except Exception as e:
            if rec is None:
                raise VenueError("get_order", e) from e
            self.log.warning(f"[ORDER] venue lookup failed id={order_id}: {e!r}; returning stored record")
            venue = None
        return {"orderId": order_id, "local": rec.to_dict() if rec else None, "venue": venue}

    # ---------- account ----------

    def open_orders(self, limit: int = 10) -> Dict[str, Any]:
        client = self.session.require_client()
        try:
            orders = client.get_orders(OpenOrderParams()) or []
        except Exception as e:
            raise VenueError("get_orders", e) from e
        return {
            "openOrders": len(orders),
            "orders": [
                {
                    "id": o.get("id"),
                    "market": _short(o.get("asset_id")),
                    "side": o.get("side"),
                    "price": o.get("price"),
                    "size": o.get("original_size"),
                    "filled": o.get("size_matched"),
                }
                for o in orders[:limit]
            ],
            "tracked": len(self.store),
            "recent": [r.to_dict() for r in self.store.recent(limit)],
        }

    def trades(self, limit: int = 20) -> Dict[str, Any]:
        client = self.session.require_client()
        try:
            trades: List[Dict[str, Any]] = client.get_trades(TradeParams()) or []
        except Exception as e:
            raise VenueError("get_trades", e) from e
        return {
            "count": len(trades),
            "trades": [
                {
                    "id": t.get("id"),
                    "market": _short(t.get("asset_id")),
                    "side": t.get("side"),
                    "price": t.get("price"),
                    "size": t.get("size"),
                    "status": t.get("status"),
                    "timestamp": t.get("created_at") or t.get("match_time"),
                }
                for t in trades[:limit]
            ],
        }

    # ---------- market data ----------

    def quote(self, token_id: str) -> Dict[str, Any]:
        return self._market().quote(token_id).to_dict()

    def market(self, condition_id: str) -> Any:
        client = self.session.require_client()
        try:
            return client.get_market(condition_id)
        except Exception as e:
            raise VenueError("get_market", e) from e
