# polytrader/market.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional

from .errors import VenueError
from .models import BookQuote, MarketMetadata
from .normalizer import to_decimal

log = logging.getLogger("polytrader.market")

DEFAULT_TICK_SIZE = Decimal("0.01")


def parse_decimal(value: Any, *keys: str) -> Optional[Decimal]:
    """
    Handles common venue shapes:
      "0.48", 0.48
      {"mid": "0.48"} / {"price": "0.48"}  (first matching key)
      OrderSummary(price="0.48", size="...")
    """
    if isinstance(value, dict):
        for k in keys or ("price",):
            if k in value:
                return to_decimal(value[k])
        return None
    if hasattr(value, "price") and not isinstance(value, (str, int, float, Decimal)):
        return to_decimal(getattr(value, "price"))
    return to_decimal(value)


def _levels(book: Any, side: str) -> list:
    if book is None:
        return []
    if isinstance(book, dict):
        return book.get(side) or []
    return getattr(book, side, None) or []


def best_bid(book: Any) -> Optional[Decimal]:
    best = None
    for lv in _levels(book, "bids"):
        p = parse_decimal(lv)
        if p is None:
            continue
        best = p if best is None else max(best, p)
    return best


def best_ask(book: Any) -> Optional[Decimal]:
    best = None
    for lv in _levels(book, "asks"):
        p = parse_decimal(lv)
        if p is None:
            continue
        best = p if best is None else min(best, p)
    return best


class MarketDataAdapter:
    """
    Reads market data through a py-clob-client ClobClient and returns typed values.

    Venue strings are parsed here once; nothing downstream sees raw responses.
    """

    def __init__(self, client: Any, default_tick_size: Decimal = DEFAULT_TICK_SIZE):
        self.client = client
        self.default_tick_size = default_tick_size

    def midpoint(self, token_id: str) -> Decimal:
        try:
            raw = self.client.get_midpoint(token_id)
        except Exception as e:
            raise VenueError("get_midpoint", e) from e
        mid = parse_decimal(raw, "mid", "midpoint", "price")
        if mid is None or not (0 < mid < 1):
            raise VenueError("get_midpoint", ValueError(f"unusable midpoint {raw!r}"))
        return mid

    def tick_size(self, token_id: str) -> Decimal:
        try:
            tick = parse_decimal(self.client.get_tick_size(token_id), "minimum_tick_size", "tick_size")
        except Exception as e:
            log.warning(f"[MARKET] tick size lookup failed token={token_id[:20]}: {e!r}; using {self.default_tick_size}")
            return self.default_tick_size
        if tick is None or tick <= 0:
            log.warning(f"[MARKET] unusable tick size token={token_id[:20]}: {tick}; using {self.default_tick_size}")
            return self.default_tick_size
        return tick

    def neg_risk(self, token_id: str) -> bool:
        try:
            return bool(self.client.get_neg_risk(token_id))
        except Exception as e:
            log.warning(f"[MARKET] neg risk lookup failed token={token_id[:20]}: {e!r}; assuming False")
            return False

    def metadata(self, token_id: str, with_midpoint: bool = True) -> MarketMetadata:
        mid = self.midpoint(token_id) if with_midpoint else None
        return MarketMetadata(
            midpoint=mid,
            tick_size=self.tick_size(token_id),
            neg_risk=self.neg_risk(token_id),
        )

    def quote(self, token_id: str) -> BookQuote:
        mid = self.midpoint(token_id)
        try:
            book = self.client.get_order_book(token_id)
        except Exception as e:
            raise VenueError("get_order_book", e) from e
        return BookQuote(token_id=token_id, midpoint=mid, best_bid=best_bid(book), best_ask=best_ask(book))
