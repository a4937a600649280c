# polytrader/normalizer.py
"""
Order parameter normalization.

Turns a client trade intent ("BUY $5 of token X, maybe at 0.65") plus market
metadata into a venue-valid order: price on the tick grid, share size floored
to cents. Pure functions only; the caller fetches metadata and submits.
"""
from __future__ import annotations

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, DecimalException, InvalidOperation
from typing import Any, Optional

from .errors import InvalidOrderParams, MissingField
from .models import MarketMetadata, NormalizedOrder, Side, TradeIntent

# price nudged past the mid to bias toward a fill
SLIPPAGE = Decimal("0.02")

# venue accepts prices strictly inside (0, 1)
MIN_PRICE = Decimal("0.01")
MAX_PRICE = Decimal("0.99")

SIZE_STEP = Decimal("0.01")


def to_decimal(value: Any) -> Optional[Decimal]:
    """Finite Decimal from str/int/float/Decimal, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not d.is_finite():
        return None
    return d


def is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def working_price(side: Side, midpoint: Decimal, slippage: Decimal = SLIPPAGE) -> Decimal:
    if side == Side.BUY:
        return min(midpoint + slippage, MAX_PRICE)
    return max(midpoint - slippage, MIN_PRICE)


def round_to_tick(price: Decimal, tick: Decimal) -> Decimal:
    # nearest multiple of tick, ties away from zero
    return (price / tick).quantize(Decimal(1), rounding=ROUND_HALF_UP) * tick


def floor_size(size: Decimal) -> Decimal:
    return size.quantize(SIZE_STEP, rounding=ROUND_FLOOR)


def check_required(intent: TradeIntent) -> None:
    for name, value in (("tokenId", intent.token_id), ("side", intent.side), ("amount", intent.amount_usd)):
        if is_absent(value):
            raise MissingField(name)


def normalize(intent: TradeIntent, market: MarketMetadata, slippage: Decimal = SLIPPAGE) -> NormalizedOrder:
    """
    Raises:
      MissingField: tokenId, side or amount absent (checked in that order, before anything else)
      InvalidOrderParams: anything that would make the order non-viable at the venue
    """
    check_required(intent)

    side = Side.parse(intent.side)

    amount = to_decimal(intent.amount_usd)
    if amount is None or amount <= 0:
        raise InvalidOrderParams(f"amount must be a finite positive number, got {intent.amount_usd!r}")

    if is_absent(intent.limit_price):
        if market.midpoint is None:
            raise InvalidOrderParams("no price given and no midpoint available")
        price = working_price(side, market.midpoint, slippage)
    else:
        price = to_decimal(intent.limit_price)
        if price is None:
            raise InvalidOrderParams(f"price must be a finite number, got {intent.limit_price!r}")

    if price <= 0:
        raise InvalidOrderParams("price must be positive", price=price)

    tick = market.tick_size
    if tick is None or not tick.is_finite() or tick <= 0:
        raise InvalidOrderParams(f"tick size must be positive, got {tick}", price=price)

    try:
        raw_size = amount / price
        rounded = round_to_tick(price, tick)
        size = floor_size(raw_size)
    except DecimalException:
        raise InvalidOrderParams("amount or price out of range", price=price) from None

    if size <= 0:
        raise InvalidOrderParams("size rounds down to zero", size=size, price=rounded)

    if not rounded.is_finite() or rounded <= 0 or rounded >= 1:
        raise InvalidOrderParams("price must be inside (0, 1) after tick rounding", size=size, price=rounded)

    return NormalizedOrder(
        token_id=str(intent.token_id).strip(),
        price=rounded,
        size=size,
        side=side,
        tick_size=tick,
        neg_risk=market.neg_risk,
    )
