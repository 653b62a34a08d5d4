"""Logging setup for wallet-keeper.

Operational events go to two places: a concise console stream and an
append-only file holding one JSON object per line.

Usage:
    from wallet_keeper.logging_config import setup_logging
    setup_logging(level="DEBUG", log_file=Path("logs/eth.log"))
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class JSONFormatter(logging.Formatter):
    """Emit each log record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj, default=str)


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Configure the ``wallet_keeper`` logger tree.

    Parameters
    ----------
    level:
        One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
    log_file:
        If provided, records are also appended to this file as JSON lines.
        Parent directories are created.
    """
    root = logging.getLogger("wallet_keeper")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Avoid duplicate handlers when called more than once
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S")
    )
    root.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path), mode="a", encoding="utf-8")
        fh.setFormatter(JSONFormatter())
        root.addHandler(fh)
