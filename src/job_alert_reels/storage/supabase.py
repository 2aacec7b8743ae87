"""Job records in Supabase.

Inserts go through the PostgREST endpoint Supabase exposes at
``<project>/rest/v1/<table>`` using the service key.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

import httpx

from job_alert_reels.constants import SUPABASE_TIMEOUT_SECONDS
from job_alert_reels.exceptions import DatastoreError
from job_alert_reels.extraction.models import VIDEO_FIELDS, JobFields

logger = logging.getLogger("job_alert_reels.storage")


class SupabaseJobStore:
    """Stores extracted jobs and returns their row id."""

    def __init__(
        self,
        url: str,
        service_key: str,
        table: str = "jobs",
        columns: Sequence[str] = VIDEO_FIELDS,
        timeout: float = SUPABASE_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not url or not service_key:
            raise ValueError(
                "Supabase configuration missing. Please set SUPABASE_URL and "
                "SUPABASE_SERVICE_KEY environment variables."
            )
        self.endpoint = f"{url.rstrip('/')}/rest/v1/{table}"
        self.service_key = service_key
        unknown = [name for name in columns if name not in JobFields.model_fields]
        if unknown:
            raise ValueError(f"Unknown job columns: {', '.join(unknown)}")
        self.columns = tuple(columns)
        self.timeout = timeout
        self._transport = transport

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
            "Prefer": "return=representation",
        }

    def build_record(self, fields: JobFields, created_at: datetime | None = None) -> dict[str, Any]:
        """Row payload: the configured columns plus created_at."""
        record: dict[str, Any] = {name: getattr(fields, name) for name in self.columns}
        record["created_at"] = (created_at or datetime.now(timezone.utc)).isoformat()
        return record

    async def insert(self, fields: JobFields) -> Any:
        """Insert a job and return the new row id.

        Raises:
            DatastoreError: On transport errors, non-2xx responses or a
                response without an id.
        """
        record = self.build_record(fields)
        logger.info(f"Inserting job for {fields.company_name!r}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.endpoint, headers=self.headers, json=record)
        except httpx.HTTPError as e:
            raise DatastoreError(f"Database insertion failed: {e}") from e

        if not response.is_success:
            raise DatastoreError(
                f"Database insertion failed: {response.status_code} - {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            rows = response.json()
        except ValueError as e:
            raise DatastoreError("Database insertion returned invalid JSON", body=response.text) from e

        row = rows[0] if isinstance(rows, list) and rows else rows
        if not isinstance(row, dict) or "id" not in row:
            raise DatastoreError("Database insertion returned no row id", body=response.text)

        logger.info(f"Inserted job row {row['id']}")
        return row["id"]
