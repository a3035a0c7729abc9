"""
Logging service for PrinSp.

Sets up console and (optionally) file logging for the whole process.
Log files go to ~/.local/share/prinsp/logs/, one file per day.
The log level can be overridden with the PRINSP_LOG_LEVEL environment
variable (e.g. PRINSP_LOG_LEVEL=DEBUG).
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Union


DEFAULT_LOG_DIR = Path.home() / ".local" / "share" / "prinsp" / "logs"
LOG_LEVEL_ENV = "PRINSP_LOG_LEVEL"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that are chatty at DEBUG level
NOISY_LOGGERS = ("PIL", "pytesseract")

_logging_initialized = False


def _resolve_level(log_level: Union[int, str]) -> int:
    """Turn a level name or number into a logging level, honoring the env override."""
    override = os.environ.get(LOG_LEVEL_ENV)
    if override:
        log_level = override
    if isinstance(log_level, str):
        # getLevelName maps known names to numbers and anything else to a string
        level = logging.getLevelName(log_level.strip().upper())
        return level if isinstance(level, int) else logging.INFO
    return log_level


def setup_logging(
    log_level: Union[int, str] = logging.INFO,
    log_to_file: bool = True,
    log_dir: Optional[Path] = None,
) -> None:
    """
    Configure the logging system for PrinSp.

    Args:
        log_level: Level as a number (logging.DEBUG) or a name ("DEBUG").
        log_to_file: Whether to also log to a dated file.
        log_dir: Directory for log files. Defaults to ~/.local/share/prinsp/logs/

    Only the first call has an effect.
    """
    global _logging_initialized

    if _logging_initialized:
        return

    level = _resolve_level(log_level)
    log_dir = log_dir or DEFAULT_LOG_DIR

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root_logger.addHandler(console_handler)

    if log_to_file:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            log_path = log_dir / f"prinsp_{datetime.now().strftime('%Y%m%d')}.log"

            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
            root_logger.addHandler(file_handler)

        except (OSError, PermissionError) as e:
            console_handler.setLevel(logging.WARNING)
            root_logger.warning(f"Could not create log file: {e}. Logging to console only.")

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))

    _logging_initialized = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: The name for the logger, typically __name__ of the calling module.

    Returns:
        A Logger instance.
    """
    return logging.getLogger(name)
