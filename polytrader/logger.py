import logging
import os
from datetime import datetime, timezone


def setup_logger(log_dir: str, level: str = "INFO") -> logging.Logger:
    os.makedirs(log_dir, exist_ok=True)
    log = logging.getLogger("polytrader")
    log.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if not log.handlers:
        ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        fh = logging.FileHandler(os.path.join(log_dir, f"gateway_{ts}.log"), encoding="utf-8")
        sh = logging.StreamHandler()

        fmt = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
        fh.setFormatter(fmt)
        sh.setFormatter(fmt)

        log.addHandler(fh)
        log.addHandler(sh)

    return log


def mask(secret: str, keep: int = 8) -> str:
    """Prefix of a credential for logs."""
    if not secret:
        return "<unset>"
    return f"{secret[:keep]}..."
