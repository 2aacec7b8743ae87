"""HTTP server.

Run with ``job-alert-reels serve`` or
``uvicorn --factory job_alert_reels.server:create_app``.
"""

from __future__ import annotations

import logging

import uvicorn

from job_alert_reels.config import AppSettings, load_settings
from job_alert_reels.logging_config import setup_logging

from .app import create_app

logger = logging.getLogger("job_alert_reels.server")


def run_server(settings: AppSettings | None = None, host: str = "0.0.0.0", port: int | None = None) -> None:
    """Start the API with uvicorn (blocking)."""
    settings = settings or load_settings()
    setup_logging(console_level=logging.INFO)
    port = port or settings.port

    logger.info(f"Server running on http://localhost:{port}")
    logger.info(f"Health check: http://localhost:{port}/health")
    logger.info(f"Config API: http://localhost:{port}/api/config")

    uvicorn.run(create_app(settings), host=host, port=port, log_level="info")


__all__ = ["create_app", "run_server"]
