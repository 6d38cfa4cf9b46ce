"""
Colored loguru setup for the evolution runs.
"""

from datetime import datetime, timezone
import os
import sys
from typing import Optional

from loguru import logger


def setup_logger(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    rotation: str = "50 MB",
    retention: str = "30 days",
    enable_colors: bool = True,
) -> Optional[str]:
    """
    Set up console logging and, when ``log_dir`` is given, a rotating file sink.

    Returns:
        Path to the log file, or None when logging to the console only
    """
    logger.remove()

    colorize = enable_colors and sys.stderr.isatty()
    if colorize:
        console_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<blue>{function}</blue>:<yellow>{line}</yellow> | "
            "<level>{message}</level>"
        )
    else:
        console_format = (
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "{name}:{function}:{line} | "
            "{message}"
        )

    logger.add(sys.stderr, level=level, format=console_format, colorize=colorize)

    if log_dir is None:
        return None

    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"evolution_{timestamp}.log")
    logger.add(
        log_file,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
        rotation=rotation,
        retention=retention,
        encoding="utf-8",
    )
    logger.info("Logging to {}", log_file)
    return log_file
