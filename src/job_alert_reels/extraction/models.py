"""Structured job posting fields."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from job_alert_reels.constants import NOT_SPECIFIED

# Fields drawn on the reel, in display order
VIDEO_FIELDS = ("company_name", "designation", "location", "batch", "apply_link")


class JobFields(BaseModel):
    """Fields extracted from a job message.

    Missing values are the literal "Not specified", never empty strings.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    company_name: str = NOT_SPECIFIED
    designation: str = NOT_SPECIFIED
    location: str = NOT_SPECIFIED
    batch: str = NOT_SPECIFIED
    apply_link: str = NOT_SPECIFIED
    instagram_caption: str = NOT_SPECIFIED
    whatsapp_message: str = NOT_SPECIFIED

    @field_validator("*", mode="before")
    @classmethod
    def _fill_missing(cls, value: Any) -> str:
        if value is None:
            return NOT_SPECIFIED
        text = str(value).strip()
        return text or NOT_SPECIFIED

    def is_specified(self, name: str) -> bool:
        return getattr(self, name) != NOT_SPECIFIED

    @property
    def caption(self) -> Optional[str]:
        """Reel caption, or None when the message had none."""
        return self.instagram_caption if self.is_specified("instagram_caption") else None

    def video_values(self) -> dict[str, str]:
        """Values used to fill the reel layout templates."""
        return {name: getattr(self, name) for name in VIDEO_FIELDS}

    def to_record(self) -> dict[str, str]:
        """Row payload for the datastore."""
        return self.model_dump()
