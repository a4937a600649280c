# polytrader/session.py
from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, Optional

from py_clob_client.client import ClobClient

from .config import SERVICE_NAME, AuthCfg, GatewayConfig
from .errors import ClientNotReady
from .logger import mask


class SessionState(str, Enum):
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"
    STOPPED = "stopped"


def build_clob_client(auth: AuthCfg, log: Optional[logging.Logger] = None) -> ClobClient:
    """
    Two steps: an L1 client (signer only) derives the API creds, then the trading
    client is built with creds, signature type and funder.
    """
    log = log or logging.getLogger("polytrader.session")
    if not auth.private_key:
        raise RuntimeError("PRIVATE_KEY not set")

    l1 = ClobClient(auth.clob_host, chain_id=auth.chain_id, key=auth.private_key)
    creds = l1.create_or_derive_api_creds()
    if creds is None:
        raise RuntimeError("failed to derive/create api creds (got None)")
    log.info(f"[SESSION] api key {mask(creds.api_key)}")

    return ClobClient(
        auth.clob_host,
        chain_id=auth.chain_id,
        key=auth.private_key,
        creds=creds,
        signature_type=auth.signature_type,
        funder=auth.funder,
    )


class TraderSession:
    """
    Owns the venue client and its readiness.

    connect() runs in a worker thread (start()) so the HTTP server is up and
    answering health checks while credentials are being derived.
    """

    def __init__(
        self,
        cfg: GatewayConfig,
        client_factory: Callable[..., Any] = build_clob_client,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.cfg = cfg
        self.log = log or logging.getLogger("polytrader.session")
        self._client_factory = client_factory

        self.state = SessionState.INITIALIZING
        self.error: Optional[str] = None
        self.client: Any = None
        self.address: Optional[str] = None

        self._task: Optional[asyncio.Task] = None
        self._lock = threading.Lock()

    def connect(self) -> SessionState:
        auth = self.cfg.auth
        self.log.info("[SESSION] initializing CLOB client")
        self.log.info(f"[SESSION]   host={auth.clob_host} chain_id={auth.chain_id}")
        self.log.info(f"[SESSION]   funder={auth.funder} signature_type={auth.signature_type}")

        try:
            client = self._client_factory(auth)
            address = client.get_address()
        except Exception as e:
            self.log.error(f"[SESSION] client initialization failed: {e!r}")
            with self._lock:
                if self.state != SessionState.STOPPED:
                    self.state = SessionState.FAILED
                    self.error = str(e) or e.__class__.__name__
            return self.state

        with self._lock:
            if self.state == SessionState.STOPPED:
                return self.state
            self.client = client
            self.address = address
            self.state = SessionState.READY
            self.error = None

        self.log.info(f"[SESSION] client ready signer={address}")
        return self.state

    async def start(self) -> None:
        if self.state == SessionState.READY:
            return
        if self._task and not self._task.done():
            return
        with self._lock:
            self.state = SessionState.INITIALIZING
            self.error = None
        self._task = asyncio.create_task(asyncio.to_thread(self.connect), name="clob-connect")

    async def stop(self) -> None:
        with self._lock:
            self.state = SessionState.STOPPED
            self.client = None
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        self.log.info("[SESSION] stopped")

    def require_client(self) -> Any:
        with self._lock:
            if self.state != SessionState.READY or self.client is None:
                raise ClientNotReady(self.state.value, self.error)
            return self.client

    def status(self) -> Dict[str, Any]:
        return {
            "service": SERVICE_NAME,
            "status": self.state.value,
            "error": self.error,
            "signer": self.address,
            "funder": self.cfg.auth.funder,
            "signatureType": self.cfg.auth.signature_type,
        }
