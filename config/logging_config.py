"""
Logging setup shared by the API layer.

    from config.logging_config import get_logger
    logger = get_logger(__name__)
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[Path] = None,
    force: bool = False,
) -> None:
    """Configure the root logger once (console, optional file)."""
    global _configured
    if _configured and not force:
        return

    root = logging.getLogger()
    if force:
        for handler in list(root.handlers):
            root.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.setLevel(level.upper() if isinstance(level, str) else level)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger, configuring logging from settings on first use."""
    if not _configured:
        from config.settings import settings
        setup_logging(settings.log_level, settings.log_file)
    return logging.getLogger(name)
