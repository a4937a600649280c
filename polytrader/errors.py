from __future__ import annotations

from typing import Any, Dict, Optional


class GatewayError(Exception):
    """Base class for errors the HTTP layer knows how to report."""

    def to_dict(self) -> Dict[str, Any]:
        return {"error": str(self)}


class OrderError(GatewayError):
    """Client supplied an order that cannot be sent to the venue. Never retried."""


class MissingField(OrderError):
    def __init__(self, name: str):
        super().__init__(f"Missing required field: {name}")
        self.name = name

    def to_dict(self) -> Dict[str, Any]:
        return {"error": str(self), "field": self.name}


class InvalidOrderParams(OrderError):
    def __init__(self, reason: str, size: Any = None, price: Any = None):
        super().__init__(f"Invalid order params: {reason}")
        self.reason = reason
        self.size = size
        self.price = price

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": str(self),
            "reason": self.reason,
            "size": None if self.size is None else str(self.size),
            "price": None if self.price is None else str(self.price),
        }


class ClientNotReady(GatewayError):
    def __init__(self, state: str, detail: Optional[str] = None):
        super().__init__("Client not ready")
        self.state = state
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        return {"error": str(self), "state": self.state, "detail": self.detail}


class VenueError(GatewayError):
    """A py-clob-client call failed (network, auth, or venue reject)."""

    def __init__(self, operation: str, cause: BaseException):
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {"operation": self.operation, "type": self.cause.__class__.__name__}
        # PolyApiException carries the HTTP status and the venue's error body
        status_code = getattr(self.cause, "status_code", None)
        if status_code is not None:
            detail["status_code"] = status_code
        venue_msg = getattr(self.cause, "error_msg", None)
        if venue_msg is not None:
            detail["venue"] = venue_msg
        return {"error": str(self), "detail": detail}


class Unauthorized(GatewayError):
    def __init__(self) -> None:
        super().__init__("Unauthorized")
