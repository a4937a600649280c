from __future__ import annotations

import asyncio

import pytest

from polytrader.config import GatewayConfig
from polytrader.errors import ClientNotReady
from polytrader.session import SessionState, TraderSession, build_clob_client


def test_new_session_is_initializing(cfg):
    s = TraderSession(cfg, client_factory=lambda auth: None)
    assert s.state == SessionState.INITIALIZING
    with pytest.raises(ClientNotReady) as ei:
        s.require_client()
    assert ei.value.state == "initializing"


def test_connect_success(cfg, fake_clob):
    seen = []

    def factory(auth):
        seen.append(auth)
        return fake_clob

    s = TraderSession(cfg, client_factory=factory)
    assert s.connect() == SessionState.READY
    assert s.require_client() is fake_clob
    assert s.address == "0xSIGNER"
    assert seen == [cfg.auth]
    assert s.status()["status"] == "ready"
    assert s.status()["funder"] == "0xFUNDER"


def test_connect_failure_is_typed_not_raised(cfg):
    def factory(auth):
        raise RuntimeError("could not derive api key")

    s = TraderSession(cfg, client_factory=factory)
    assert s.connect() == SessionState.FAILED
    assert s.error == "could not derive api key"
    with pytest.raises(ClientNotReady) as ei:
        s.require_client()
    assert ei.value.to_dict() == {"error": "Client not ready", "state": "failed", "detail": "could not derive api key"}


def test_start_connects_in_background(cfg, fake_clob):
    s = TraderSession(cfg, client_factory=lambda auth: fake_clob)

    async def run():
        await s.start()
        await s._task
        return s.state

    assert asyncio.run(run()) == SessionState.READY
    assert s.require_client() is fake_clob


def test_stopped_session_is_not_revived_by_late_connect(cfg, fake_clob):
    s = TraderSession(cfg, client_factory=lambda auth: fake_clob)
    asyncio.run(s.stop())
    assert s.connect() == SessionState.STOPPED
    assert s.client is None


def test_build_client_requires_private_key():
    with pytest.raises(RuntimeError):
        build_clob_client(GatewayConfig().auth)
