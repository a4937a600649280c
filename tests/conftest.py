from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from polytrader.config import AuthCfg, GatewayConfig
from polytrader.order_store import OrderStore
from polytrader.server import create_app
from polytrader.session import TraderSession

API_SECRET = "s3cret"
TOKEN = "71321045679252212594626385532706912750332728571942532289631379312455583992563"


class FakeClob:
    """Stands in for py_clob_client.client.ClobClient; records every call."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.mid: Any = {"mid": "0.50"}
        self.tick: Any = "0.01"
        self.neg_risk: Any = False
        self.book: Any = {
            "bids": [{"price": "0.48", "size": "100"}, {"price": "0.49", "size": "10"}],
            "asks": [{"price": "0.53", "size": "20"}, {"price": "0.51", "size": "5"}],
        }
        self.post_response: Any = {"success": True, "orderID": "0xabc", "status": "live", "errorMsg": ""}
        self.orders: List[Dict[str, Any]] = []
        self.trades: List[Dict[str, Any]] = []
        self.fail: Dict[str, Exception] = {}

    def _call(self, name: str, *args: Any) -> None:
        self.calls.append((name,) + args)
        if name in self.fail:
            raise self.fail[name]

    def called(self, name: str) -> bool:
        return any(c[0] == name for c in self.calls)

    def get_address(self) -> str:
        return "0xSIGNER"

    def get_midpoint(self, token_id: str) -> Any:
        self._call("get_midpoint", token_id)
        return self.mid

    def get_tick_size(self, token_id: str) -> Any:
        self._call("get_tick_size", token_id)
        return self.tick

    def get_neg_risk(self, token_id: str) -> Any:
        self._call("get_neg_risk", token_id)
        return self.neg_risk

    def get_order_book(self, token_id: str) -> Any:
        self._call("get_order_book", token_id)
        return self.book

    def create_order(self, args: Any, options: Any) -> Any:
        self._call("create_order", args, options)
        return {"signed": args}

    def post_order(self, signed: Any, order_type: Any) -> Any:
        self._call("post_order", signed, order_type)
        return self.post_response

    def cancel(self, order_id: str) -> Any:
        self._call("cancel", order_id)
        return {"canceled": [order_id], "not_canceled": {}}

    def get_order(self, order_id: str) -> Any:
        self._call("get_order", order_id)
        return {"id": order_id, "status": "LIVE", "size_matched": "0"}

    def get_orders(self, params: Any = None) -> Any:
        self._call("get_orders", params)
        return self.orders

    def get_trades(self, params: Any = None) -> Any:
        self._call("get_trades", params)
        return self.trades

    def get_market(self, condition_id: str) -> Any:
        self._call("get_market", condition_id)
        return {"condition_id": condition_id, "minimum_tick_size": "0.01", "tokens": [{"token_id": TOKEN, "outcome": "Yes"}]}


@pytest.fixture
def fake_clob() -> FakeClob:
    return FakeClob()


@pytest.fixture
def cfg() -> GatewayConfig:
    return GatewayConfig(auth=AuthCfg(private_key="0x" + "11" * 32, funder="0xFUNDER", api_secret=API_SECRET))


@pytest.fixture
def session(cfg: GatewayConfig, fake_clob: FakeClob) -> TraderSession:
    s = TraderSession(cfg, client_factory=lambda auth: fake_clob)
    s.connect()
    return s


@pytest.fixture
def store() -> OrderStore:
    return OrderStore()


def make_client(cfg: GatewayConfig, session: TraderSession, store: Optional[OrderStore] = None) -> TestClient:
    # no `with`: lifespan would start a second connect in a worker thread
    return TestClient(create_app(cfg, session=session, store=store))


@pytest.fixture
def client(cfg: GatewayConfig, session: TraderSession, store: OrderStore) -> TestClient:
    return make_client(cfg, session, store)


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"x-api-key": API_SECRET}
