from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field

SERVICE_NAME = "polymarket-trader"


class EnvCfg(BaseModel):
    log_dir: str = "./logs"
    log_level: str = "INFO"


class AuthCfg(BaseModel):
    clob_host: str = "https://clob.polymarket.com"
    chain_id: int = 137
    private_key: Optional[str] = None
    funder: Optional[str] = None
    # 0 = EOA, 1 = Poly proxy (email/Magic), 2 = browser wallet proxy
    signature_type: int = 1
    # shared secret expected in x-api-key (or ?key=); empty disables the check
    api_secret: Optional[str] = None


class ServerCfg(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: List[str] = ["*"]


class TradingCfg(BaseModel):
    slippage: float = 0.02
    default_tick_size: str = "0.01"
    default_order_type: str = "GTC"
    balance_orders_limit: int = 10
    trades_limit: int = 20


class StoreCfg(BaseModel):
    ttl_sec: int = 24 * 60 * 60
    max_entries: int = 1000


class GatewayConfig(BaseModel):
    env: EnvCfg = Field(default_factory=EnvCfg)
    auth: AuthCfg = Field(default_factory=AuthCfg)
    server: ServerCfg = Field(default_factory=ServerCfg)
    trading: TradingCfg = Field(default_factory=TradingCfg)
    store: StoreCfg = Field(default_factory=StoreCfg)


# env var -> (section, field); first name found wins
ENV_OVERRIDES: Dict[tuple, List[str]] = {
    ("auth", "private_key"): ["PRIVATE_KEY", "private_key"],
    ("auth", "funder"): ["FUNDER_ADDRESS", "funder_address"],
    ("auth", "signature_type"): ["SIGNATURE_TYPE"],
    ("auth", "api_secret"): ["API_SECRET"],
    ("auth", "clob_host"): ["CLOB_HOST"],
    ("auth", "chain_id"): ["CHAIN_ID"],
    ("server", "port"): ["PORT"],
    ("env", "log_dir"): ["LOG_DIR"],
    ("env", "log_level"): ["LOG_LEVEL"],
}


def _env(names: List[str], environ: Dict[str, str]) -> Optional[str]:
    for name in names:
        v = environ.get(name)
        if v is not None and v.strip():
            return v.strip()
    return None


def _apply_env(data: Dict[str, Any], environ: Dict[str, str]) -> Dict[str, Any]:
    for (section, field), names in ENV_OVERRIDES.items():
        v = _env(names, environ)
        if v is None:
            continue
        data.setdefault(section, {})[field] = v

    origins = _env(["CORS_ORIGINS"], environ)
    if origins:
        data.setdefault("server", {})["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]
    return data


def load_config(path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> GatewayConfig:
    """
    Build the gateway config from an optional YAML file, then environment overrides.

    A missing file is not an error; the service is normally configured through env only.
    """
    data: Dict[str, Any] = {}
    if path and Path(path).exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    env = os.environ if environ is None else environ
    return GatewayConfig(**_apply_env(data, dict(env)))


def validate_config(cfg: GatewayConfig) -> List[str]:
    """Returns list of problems (empty if the config looks usable)."""
    errors = []

    if not cfg.auth.private_key:
        errors.append("PRIVATE_KEY not set (orders cannot be signed)")

    if cfg.auth.signature_type in (1, 2) and not cfg.auth.funder:
        errors.append(f"FUNDER_ADDRESS required for signature type {cfg.auth.signature_type}")

    if cfg.auth.signature_type not in (0, 1, 2):
        errors.append(f"SIGNATURE_TYPE must be 0, 1 or 2, got {cfg.auth.signature_type}")

    if not cfg.auth.api_secret:
        errors.append("API_SECRET not set (endpoints are unauthenticated)")

    return errors
