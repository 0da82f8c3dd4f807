"""Log setup for the command line; the library itself only emits records."""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

# Request URLs and raw response bodies are logged here at DEBUG.
HTTP_LOGGER = "dexclient.transport"
LOG_FILE = "dexclient.log"

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: str | int | None, default: int = logging.INFO) -> int:
    """Turn ``"debug"``, ``"WARNING"``, ``10`` or ``None`` into a level number.

    Raises:
        ValueError: If the name is not a logging level
    """
    if level is None or level == "":
        return default
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def configure_logging(
    level: str | int | None = None,
    *,
    log_dir: Path | None = None,
    http_level: str | int | None = None,
) -> None:
    """Install console and optional rotating file handlers on the root logger.

    Args:
        level: Root level; falls back to ``DEXCLIENT_LOG_LEVEL`` then INFO
        log_dir: Directory for ``dexclient.log`` (10MB x 5 backups)
        http_level: Level for request/response logging; WARNING by default
            so bodies stay out of the logs unless asked for
    """
    root_level = resolve_level(level if level is not None else os.environ.get("DEXCLIENT_LOG_LEVEL"))
    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    # Only replace handlers installed by a previous call.
    for handler in root_logger.handlers[:]:
        if getattr(handler, "_dexclient", False):
            root_logger.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_dir / LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=5
            )
        )

    for handler in handlers:
        handler._dexclient = True
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logging.getLogger("dexclient").setLevel(root_level)
    logging.getLogger(HTTP_LOGGER).setLevel(resolve_level(http_level, logging.WARNING))
