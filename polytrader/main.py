# polytrader/main.py
from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

import uvicorn
from dotenv import load_dotenv

from .config import load_config
from .logger import mask, setup_logger
from .server import create_app


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()

    p = argparse.ArgumentParser(description="Polymarket CLOB trading gateway")
    p.add_argument("--config", default="config.yaml", help="optional YAML config; env vars override it")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)
    args = p.parse_args(argv)

    cfg = load_config(args.config)
    if args.host:
        cfg.server.host = args.host
    if args.port:
        cfg.server.port = args.port

    log = setup_logger(cfg.env.log_dir, cfg.env.log_level)
    log.info(f"Polymarket trader on {cfg.server.host}:{cfg.server.port}")
    log.info(f"  PRIVATE_KEY set: {bool(cfg.auth.private_key)}")
    log.info(f"  FUNDER: {cfg.auth.funder}")
    log.info(f"  SIGNATURE_TYPE: {cfg.auth.signature_type}")
    log.info(f"  API_SECRET: {mask(cfg.auth.api_secret or '', keep=2)}")

    uvicorn.run(
        create_app(cfg),
        host=cfg.server.host,
        port=cfg.server.port,
        log_level=logging.getLevelName(log.level).lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
