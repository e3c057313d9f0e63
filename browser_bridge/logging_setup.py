from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

ROOT = Path(__file__).resolve().parent.parent
LOG_DIR = ROOT / "logs"
BRIDGE_LOG = "bridge.log"
BRIDGE_EVENTS_LOG = "bridge_events.log"
EVENTS_LOGGER = "browser_bridge.events"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Marks handlers we installed so repeated setup calls replace rather than stack them.
_OWNED = "_browser_bridge_handler"


def _rotating_handler(path: Path) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=1_000_000,
        backupCount=2,
        encoding="utf-8",
        delay=True,
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    setattr(handler, _OWNED, True)
    return handler


def _install(logger: logging.Logger, handler: logging.Handler, *, propagate: bool) -> None:
    for existing in list(logger.handlers):
        if getattr(existing, _OWNED, False):
            logger.removeHandler(existing)
            existing.close()
    logger.setLevel(logging.INFO)
    logger.addHandler(handler)
    logger.propagate = propagate


def setup_logging(log_dir: Optional[Path] = None) -> None:
    """
    Send service logs to `<log_dir>/bridge.log` and structured events to
    `<log_dir>/bridge_events.log`, both rotating at 1 MB with two backups.

    Uvicorn's loggers write to the service log too. When the directory cannot
    be created, logging is left at Python's defaults.
    """
    target_dir = Path(log_dir) if log_dir else LOG_DIR
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        service_handler = _rotating_handler(target_dir / BRIDGE_LOG)
        event_handler = _rotating_handler(target_dir / BRIDGE_EVENTS_LOG)
    except OSError:
        return

    _install(logging.getLogger(), service_handler, propagate=True)
    # Event lines are JSON; keep them out of the service log.
    _install(logging.getLogger(EVENTS_LOGGER), event_handler, propagate=False)
    for name in UVICORN_LOGGERS:
        _install(logging.getLogger(name), service_handler, propagate=False)
