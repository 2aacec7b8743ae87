"""Container status normalization.

The Graph API reports container status inconsistently: ``status_code`` may
be a string ("FINISHED") or a number (1), and ``status`` may carry the
same word or a longer message such as "ERROR: Media upload failed".
Everything is mapped through one table into RemoteStatus.
"""

from __future__ import annotations

from typing import Any, Mapping

from job_alert_reels.constants import RemoteStatus

STATUS_TABLE: dict[str | int, RemoteStatus] = {
    "FINISHED": RemoteStatus.READY,
    1: RemoteStatus.READY,
    "IN_PROGRESS": RemoteStatus.PROCESSING,
    0: RemoteStatus.PROCESSING,
    "ERROR": RemoteStatus.FAILED,
    3: RemoteStatus.FAILED,
    "EXPIRED": RemoteStatus.EXPIRED,
    2: RemoteStatus.EXPIRED,
}

# When status_code and status disagree, the more decisive one wins
_PRECEDENCE = (
    RemoteStatus.READY,
    RemoteStatus.FAILED,
    RemoteStatus.EXPIRED,
    RemoteStatus.PROCESSING,
)


def normalize_value(value: Any) -> RemoteStatus | None:
    """Map a single raw status value. Returns None if unrecognized."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return STATUS_TABLE.get(value)
    if isinstance(value, float):
        return STATUS_TABLE.get(int(value)) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.lstrip("-").isdigit():
            return STATUS_TABLE.get(int(text))
        # "ERROR: Media upload failed" -> "ERROR"
        keyword = text.split(":", 1)[0].strip().upper()
        return STATUS_TABLE.get(keyword)
    return None


def normalize_status(payload: Mapping[str, Any]) -> RemoteStatus:
    """Normalize a status response (``status_code`` and ``status``).

    Unrecognized or missing values count as still processing.
    """
    candidates = {
        normalize_value(payload.get("status_code")),
        normalize_value(payload.get("status")),
    }
    for status in _PRECEDENCE:
        if status in candidates:
            return status
    return RemoteStatus.PROCESSING
