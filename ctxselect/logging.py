"""Logging setup that never writes over the TUI.

Records go to ``$CTXSELECT_LOG_DIR/ctxselect.log`` (or an explicit directory)
when configured, otherwise to a ``NullHandler``.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

LOG_DIR_ENV = "CTXSELECT_LOG_DIR"
LOG_FILENAME = "ctxselect.log"


def get_logger(name: str = "ctxselect") -> logging.Logger:
    return logging.getLogger(name)


def configure_logging(
    *,
    level: str = "info",
    format_name: str = "json",
    stream=None,
    log_dir: Path | None = None,
    filename: str = LOG_FILENAME,
) -> None:
    normalized = level.strip().upper()
    level_value = getattr(logging, normalized, logging.INFO)
    if format_name == "json":
        formatter = logging.Formatter("%(message)s")
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    logger = get_logger()
    logger.setLevel(level_value)
    if stream is None:
        env_dir = os.environ.get(LOG_DIR_ENV)
        if env_dir:
            log_dir = Path(env_dir)
        if log_dir is None:
            if not logger.handlers:
                logger.addHandler(logging.NullHandler())
            return
        log_dir.mkdir(parents=True, exist_ok=True)
        stream = open(log_dir / filename, "a", encoding="utf-8")
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    for existing in list(logger.handlers):
        if isinstance(existing, logging.NullHandler):
            logger.removeHandler(existing)
    logger.addHandler(handler)


def log_event(logger: logging.Logger, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, sort_keys=True, default=str))
