"""
Gemini Client (v1.0.0)
Thin async client for the Gemini generateContent REST endpoint.

Status codes carry meaning for the caller:
    429 -> RateLimitedError (with Retry-After if sent)
    404 -> EndpointUnavailableError (model or endpoint not found)
    other non-2xx / transport errors -> UpstreamError
"""
import logging
from typing import Optional

import httpx

from outfit_service.core.errors import (
    RateLimitedError,
    EndpointUnavailableError,
    MalformedResponseError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-1.5-flash"

GENERATION_CONFIG = {
    "temperature": 0.2,
    "topK": 32,
    "topP": 0.95,
    "maxOutputTokens": 1024,
}


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds > 0 else None


class GeminiClient:
    """
    Usage:
        client = GeminiClient(model="gemini-1.5-flash")
        text = await client.generate_text(api_key, prompt)
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def generate_text(self, api_key: str, prompt: str) -> str:
        """
        Send a prompt and return the generated text.

        Raises:
            RateLimitedError, EndpointUnavailableError, UpstreamError,
            MalformedResponseError
        """
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": GENERATION_CONFIG,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.endpoint,
                    json=payload,
                    headers={"x-goog-api-key": api_key},
                )
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Gemini request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Gemini transport error: {e}") from e

        if response.status_code == 429:
            retry_after = _parse_retry_after(response.headers.get("Retry-After"))
            raise RateLimitedError("Gemini rate limit (429)", retry_after=retry_after)

        if response.status_code == 404:
            raise EndpointUnavailableError(f"Gemini model not found: {self.model}")

        if not response.is_success:
            raise UpstreamError(
                f"Gemini request failed: {response.status_code}",
                status_code=response.status_code
            )

        try:
            data = response.json()
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise MalformedResponseError(f"Unexpected Gemini envelope: {e}") from e

    def get_status(self) -> dict:
        return {
            "provider": "gemini",
            "model": self.model,
            "endpoint": self.endpoint,
        }
