from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

_LOG_FORMAT = "%(asctime)s %(levelname)-5s %(name)s | %(message)s"


def configure_logging(level: str = "WARNING", log_file: Optional[Path] = None) -> None:
    """Configure the root logger once.

    The reader owns the terminal while it runs, so callers pass *log_file*
    to keep records off the screen; without it records go to stderr.
    """
    resolved_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
        else:
            handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root_logger.addHandler(handler)

    root_logger.setLevel(resolved_level)


def create_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
