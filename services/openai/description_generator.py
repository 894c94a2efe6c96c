"""Description: Per-image description and keyword generation through the proxy endpoint."""

import asyncio
import logging
from typing import Any, Dict

import httpx

from services.openai.media_inputs import build_completion_payload, to_image_data_url
from services.openai.response_parser import extract_message_content, parse_generated_text

LOGGER = logging.getLogger(__name__)
PROXY_PATH = "/api/generate"


class GenerationError(RuntimeError):
    """Raised when one image could not be described."""


class DescriptionGenerator:
    """Send one image at a time to the proxy and parse the reply."""

    def __init__(self, client: httpx.AsyncClient, *, model: str, max_tokens: int = 300) -> None:
        """Initialize the generator with an HTTP client pointed at the proxy."""
        if client is None:
            raise ValueError("Proxy HTTP client must be provided.")
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    async def describe(self, image_bytes: bytes, mime_type: str) -> Dict[str, Any]:
        """Return `description`, `keywords` and `tokens_used` for one image."""
        image_url = await asyncio.to_thread(to_image_data_url, image_bytes, mime_type)
        payload = build_completion_payload(image_url, model=self.model, max_tokens=self.max_tokens)
        data = await self._post(payload)
        try:
            content = extract_message_content(data)
        except ValueError as exc:
            LOGGER.error("Unexpected completion response: %r", data)
            raise GenerationError("Completion response could not be parsed") from exc
        return parse_generated_text(content)

    async def _post(self, payload: Dict[str, Any]) -> Any:
        """POST the payload to the proxy and return the decoded JSON body."""
        try:
            response = await self.client.post(PROXY_PATH, json=payload)
        except httpx.HTTPError as exc:
            LOGGER.error("Proxy request failed: %s", exc)
            raise GenerationError("Failed to reach the generation endpoint") from exc

        if not response.is_success:
            LOGGER.error("Proxy returned status %s: %s", response.status_code, response.text)
            raise GenerationError("Failed to generate description and keywords")

        try:
            return response.json()
        except ValueError as exc:
            raise GenerationError("Proxy returned a non-JSON body") from exc
