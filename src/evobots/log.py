"""
Logging setup for evobots runs.

The library only ever writes through ``loguru.logger``; this module decides
where those records end up.
"""
from __future__ import annotations
from datetime import datetime, timezone
import os
import sys
from typing import Optional

from loguru import logger


def setup_logger(log_dir: Optional[str] = "log", level: str = "INFO", enable_colors: bool = True) -> Optional[str]:
    """
    Install a console sink and, when ``log_dir`` is given, a file sink.

    Returns the path of the log file, or None when file logging is disabled.
    """
    logger.remove()

    colorize = enable_colors and sys.stderr.isatty()
    if colorize:
        console_format = (
            "<green>{time:HH:mm:ss}</green> "
            "<level>{level: <7}</level> "
            "<level>{message}</level>"
        )
    else:
        console_format = "{time:HH:mm:ss} {level: <7} {message}"

    logger.add(sys.stderr, level=level, format=console_format, colorize=colorize)

    if not log_dir:
        return None

    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"evobots_{timestamp}.log")
    logger.add(
        log_file,
        level="DEBUG",
        format="{time:YYYY-MM-DD HH:mm:ss} {level: <7} {message}",
        encoding="utf-8",
    )
    logger.debug(f"Logging to console ({level}) and {log_file}")
    return log_file
