"""Command line interface.

Usage:
    job-alert-reels --help
    job-alert-reels extract "We are hiring ..."
    job-alert-reels render --company Acme --designation "SDE I"
    job-alert-reels serve
"""

from .app import app, main

__all__ = ["app", "main"]
