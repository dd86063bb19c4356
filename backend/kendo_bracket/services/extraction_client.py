"""Bracket image extraction client.

Thin wrapper around the external extraction service: posts a bracket photo and
returns the title, match count and player names it read off the sheet.

Reads configuration from environment variables:
  - EXTRACTION_SERVICE_URL
  - EXTRACTION_API_KEY (optional, sent as a bearer token)
  - EXTRACTION_TIMEOUT_SECONDS (default 60)
"""

import base64
import logging
import os
from typing import List, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from kendo_bracket.services.errors import BracketError

logger = logging.getLogger(__name__)


class ExtractionError(BracketError):
    pass


class ExtractedBracket(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    total_matches: int = Field(default=0, alias="totalMatches", ge=0)
    players: List[str] = Field(default_factory=list)


class ExtractionClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url if base_url is not None else os.getenv("EXTRACTION_SERVICE_URL", "")
        self.api_key = api_key if api_key is not None else os.getenv("EXTRACTION_API_KEY", "")
        self.timeout = timeout if timeout is not None else float(
            os.getenv("EXTRACTION_TIMEOUT_SECONDS", "60")
        )

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    def analyze(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> ExtractedBracket:
        """
        Send one bracket image for extraction.

        Raises:
            ExtractionError if the service is not configured, unreachable,
            returns an error status, or replies with an unexpected shape.
        """
        if not self.configured:
            raise ExtractionError("Extraction service not configured (set EXTRACTION_SERVICE_URL)")
        if not image_bytes:
            raise ExtractionError("Image is empty")

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        body = {
            "mimeType": mime_type,
            "data": base64.b64encode(image_bytes).decode("ascii"),
        }

        try:
            response = requests.post(self.base_url, json=body, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.error(f"Extraction request failed: {e}")
            raise ExtractionError(f"Extraction request failed: {e}") from e
        except ValueError as e:
            raise ExtractionError("Extraction service returned invalid JSON") from e

        try:
            extracted = ExtractedBracket.model_validate(payload)
        except ValidationError as e:
            raise ExtractionError(f"Unexpected extraction reply: {e}") from e

        logger.info(
            f"Extracted '{extracted.title}': {extracted.total_matches} matches, "
            f"{len(extracted.players)} players"
        )
        return extracted
