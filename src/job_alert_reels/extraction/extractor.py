"""Job field extraction with Gemini.

Sends the pasted job message to the Gemini ``generateContent`` endpoint
and parses the JSON object it answers with into JobFields.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Optional

import httpx

from job_alert_reels.constants import GEMINI_TIMEOUT_SECONDS, NOT_SPECIFIED
from job_alert_reels.exceptions import ExtractionError

from .models import JobFields

_logger = logging.getLogger("ai_calls")

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"

EXTRACTION_PROMPT = """Extract the following information from this job message:
1. Company Name
2. Job Designation/Title
3. Location
4. Batch (graduation year)
5. Apply Link (job application URL)
6. Instagram Caption (short engaging caption with relevant hashtags)
7. WhatsApp Message (short message announcing the opening, including the apply link)

Message: "{message}"

Please respond with a JSON object containing these exact keys:
{{
"company_name": "extracted company name",
"designation": "extracted job title",
"location": "extracted location",
"batch": "extracted batch/year",
"apply_link": "extracted application URL",
"instagram_caption": "caption for the reel",
"whatsapp_message": "message for WhatsApp"
}}

If any information is not found, use "{missing}" as the value."""

_CODE_FENCE = re.compile(r"```(?:json)?\s*")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences around a JSON answer."""
    return _CODE_FENCE.sub("", text).strip()


def parse_extraction(text: str) -> JobFields:
    """Parse the model's answer into JobFields.

    Raises:
        ExtractionError: If the answer is not a JSON object.
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Model answer is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ExtractionError("Model answer is not a JSON object")
    return JobFields(**data)


class GeminiJobExtractor:
    """Extracts JobFields from free text with Gemini.

    Usage:
        extractor = GeminiJobExtractor(api_key=settings.gemini_api_key)
        fields = await extractor.extract(message)
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        api_base: str = GEMINI_API_BASE,
        timeout: float = GEMINI_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ValueError("Gemini API key not configured. Please set GEMINI_API_KEY environment variable.")
        self.api_key = api_key
        self.model = model
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def build_prompt(self, message: str) -> str:
        return EXTRACTION_PROMPT.format(message=message, missing=NOT_SPECIFIED)

    async def extract(self, message: str) -> JobFields:
        """Extract the job fields from a message.

        Raises:
            ValueError: If the message is empty.
            ExtractionError: If the API call fails or the answer can't be parsed.
        """
        if not message or not message.strip():
            raise ValueError("Please enter a job message")

        url = f"{self.api_base}/models/{self.model}:generateContent"
        payload = {"contents": [{"parts": [{"text": self.build_prompt(message)}]}]}

        _logger.info(f"GEMINI REQUEST | model={self.model} | message: {len(message)} chars")
        _logger.debug(f"GEMINI PROMPT | {payload['contents'][0]['parts'][0]['text']}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            _logger.error(f"GEMINI ERROR | {e}")
            raise ExtractionError(f"Gemini API request failed: {e}") from e

        if not response.is_success:
            _logger.error(f"GEMINI ERROR | HTTP {response.status_code} | {response.text[:500]}")
            raise ExtractionError(f"Gemini API error: {response.status_code}")

        try:
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            _logger.error(f"GEMINI ERROR | invalid response: {response.text[:500]}")
            raise ExtractionError("Invalid response from Gemini API") from e

        _logger.debug(f"GEMINI RESPONSE | {text}")
        fields = parse_extraction(text)
        _logger.info(f"GEMINI EXTRACTED | company={fields.company_name!r} designation={fields.designation!r}")
        return fields
