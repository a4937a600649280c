from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from .errors import InvalidOrderParams


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def parse(cls, raw: Any) -> "Side":
        s = str(raw or "").strip().upper()
        try:
            return cls(s)
        except ValueError:
            raise InvalidOrderParams(f"side must be BUY or SELL, got {raw!r}") from None


class OrderType(str, Enum):
    GTC = "GTC"
    FOK = "FOK"
    GTD = "GTD"
    FAK = "FAK"

    @classmethod
    def parse(cls, raw: Any, default: str = "GTC") -> "OrderType":
        s = str(raw or default).strip().upper()
        try:
            return cls(s)
        except ValueError:
            raise InvalidOrderParams(f"orderType must be one of GTC, FOK, GTD, FAK, got {raw!r}") from None


@dataclass(frozen=True)
class TradeIntent:
    # raw client values; the normalizer parses them
    token_id: Any
    side: Any
    amount_usd: Any
    limit_price: Any = None


@dataclass(frozen=True)
class MarketMetadata:
    midpoint: Optional[Decimal] = None
    tick_size: Decimal = Decimal("0.01")
    neg_risk: bool = False


@dataclass(frozen=True)
class NormalizedOrder:
    token_id: str
    price: Decimal
    size: Decimal
    side: Side
    tick_size: Decimal
    neg_risk: bool = False


@dataclass
class BookQuote:
    token_id: str
    midpoint: Optional[Decimal]
    best_bid: Optional[Decimal]
    best_ask: Optional[Decimal]

    @property
    def spread(self) -> Optional[str]:
        if self.best_bid is None or self.best_ask is None:
            return None
        return f"{float(self.best_ask - self.best_bid):.4f}"

    def to_dict(self) -> dict:
        def f(x: Optional[Decimal]) -> Optional[str]:
            return None if x is None else str(x)

        return {
            "tokenId": self.token_id,
            "midpoint": f(self.midpoint),
            "bestBid": f(self.best_bid),
            "bestAsk": f(self.best_ask),
            "spread": self.spread,
        }
