# polytrader/order_store.py
from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional


@dataclass
class OrderRecord:
    order_id: str
    token_id: str
    side: str              # "BUY" or "SELL"
    price: str
    size: str
    amount_usd: str
    order_type: str
    status: str            # venue status at placement, then "canceled"
    created_ts: float
    canceled_ts: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class OrderStore:
    """
    Orders placed through this gateway, kept in memory for lookups.

    Entries expire after ttl_sec and the store never holds more than max_entries
    (oldest dropped first). Not persisted; a restart starts empty.
    """

    def __init__(self, ttl_sec: float = 24 * 60 * 60, max_entries: int = 1000, clock: Callable[[], float] = time.time):
        self.ttl_sec = float(ttl_sec)
        self.max_entries = int(max_entries)
        self._clock = clock
        self._orders: "OrderedDict[str, OrderRecord]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            self._evict()
            return len(self._orders)

    def record(
        self,
        *,
        order_id: str,
        token_id: str,
        side: str,
        price: Any,
        size: Any,
        amount_usd: Any,
        order_type: str,
        status: str,
    ) -> OrderRecord:
        rec = OrderRecord(
            order_id=str(order_id),
            token_id=str(token_id),
            side=str(side),
            price=str(price),
            size=str(size),
            amount_usd=str(amount_usd),
            order_type=str(order_type),
            status=str(status or "unknown"),
            created_ts=self._clock(),
        )
        with self._lock:
            self._orders.pop(rec.order_id, None)
            self._orders[rec.order_id] = rec
            self._evict()
        return rec

    def get(self, order_id: str) -> Optional[OrderRecord]:
        with self._lock:
            self._evict()
            return self._orders.get(order_id)

    def mark_canceled(self, order_id: str) -> Optional[OrderRecord]:
        with self._lock:
            self._evict()
            rec = self._orders.get(order_id)
            if rec is not None:
                rec.status = "canceled"
                rec.canceled_ts = self._clock()
            return rec

    def recent(self, limit: int = 20) -> List[OrderRecord]:
        with self._lock:
            self._evict()
            out = list(self._orders.values())
        out.reverse()
        return out[: max(0, int(limit))]

    def _evict(self) -> None:
        # insertion order == creation order
        cutoff = self._clock() - self.ttl_sec
        while self._orders:
            oid, rec = next(iter(self._orders.items()))
            if rec.created_ts >= cutoff and len(self._orders) <= self.max_entries:
                break
            del self._orders[oid]
