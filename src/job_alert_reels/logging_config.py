"""Logging setup shared by the CLI and the HTTP server.

- Suppresses console output from libraries
- Sets up file logging for AI calls and Instagram API calls
- Sends the pipeline's own loggers to logs/pipeline.log
"""

from __future__ import annotations

import logging
from pathlib import Path

from .constants import get_logs_dir

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"

FILE_LOGGERS = {
    "ai_calls": "ai_calls.log",
    "instagram_api": "instagram_api.log",
    "job_alert_reels": "pipeline.log",
}


def _file_handler(path: Path) -> logging.FileHandler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def setup_logging(log_dir: Path | None = None, console_level: int | None = None) -> Path:
    """Configure logging for the CLI and the server.

    Args:
        log_dir: Directory for log files. Defaults to <project>/logs.
        console_level: If set, pipeline logs are also echoed to stderr at
            this level (used by the server).

    Returns:
        The directory log files are written to.
    """
    log_dir = log_dir or get_logs_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.CRITICAL)

    for logger_name in ["httpx", "httpcore", "urllib3", "asyncio", "PIL"]:
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.WARNING)
        logger.propagate = False

    for logger_name, filename in FILE_LOGGERS.items():
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        logger.handlers = [_file_handler(log_dir / filename)]

    if console_level is not None:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(console_level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        for logger_name in FILE_LOGGERS:
            logging.getLogger(logger_name).addHandler(console_handler)

    return log_dir
