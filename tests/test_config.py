from __future__ import annotations

from polytrader.config import GatewayConfig, load_config, validate_config


def test_defaults_without_file_or_env():
    cfg = load_config(None, environ={})
    assert cfg.auth.clob_host == "https://clob.polymarket.com"
    assert cfg.auth.chain_id == 137
    assert cfg.auth.signature_type == 1
    assert cfg.server.port == 3000
    assert cfg.trading.default_tick_size == "0.01"


def test_env_overrides(tmp_path):
    cfg = load_config(
        str(tmp_path / "missing.yaml"),
        environ={
            "PRIVATE_KEY": "0xkey",
            "FUNDER_ADDRESS": "0xfunder",
            "SIGNATURE_TYPE": "2",
            "API_SECRET": "s3cret",
            "PORT": "8080",
            "CORS_ORIGINS": "https://a.example, https://b.example",
        },
    )
    assert cfg.auth.private_key == "0xkey"
    assert cfg.auth.funder == "0xfunder"
    assert cfg.auth.signature_type == 2
    assert cfg.auth.api_secret == "s3cret"
    assert cfg.server.port == 8080
    assert cfg.server.cors_origins == ["https://a.example", "https://b.example"]


def test_lowercase_env_names_accepted():
    cfg = load_config(None, environ={"private_key": "0xkey", "funder_address": "0xfunder"})
    assert cfg.auth.private_key == "0xkey"
    assert cfg.auth.funder == "0xfunder"


def test_yaml_then_env(tmp_path):
    p = tmp_path / "config.yaml"
    p.write_text(
        "auth:\n  signature_type: 0\n  api_secret: from-file\ntrading:\n  slippage: 0.03\n",
        encoding="utf-8",
    )
    cfg = load_config(str(p), environ={"API_SECRET": "from-env"})
    assert cfg.auth.signature_type == 0
    assert cfg.auth.api_secret == "from-env"
    assert cfg.trading.slippage == 0.03


def test_blank_env_ignored():
    cfg = load_config(None, environ={"PORT": "  "})
    assert cfg.server.port == 3000


def test_validate_config():
    problems = validate_config(GatewayConfig())
    assert any("PRIVATE_KEY" in p for p in problems)
    assert any("FUNDER_ADDRESS" in p for p in problems)
    assert any("API_SECRET" in p for p in problems)

    ok = load_config(None, environ={"PRIVATE_KEY": "k", "FUNDER_ADDRESS": "f", "API_SECRET": "s"})
    assert validate_config(ok) == []
