"""
Logging setup from LoggingConfig
"""

from __future__ import annotations

import logging

from .config import RuntimeConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(config: RuntimeConfig) -> None:
    """Root handlers, level and optional log file"""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.logging.log_to_file:
        config.logging.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.logging.log_file, encoding="utf-8"))

    logging.basicConfig(
        level=config.logging.log_level.upper(),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    # one line per request otherwise
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
