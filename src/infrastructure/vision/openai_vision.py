"""
infrastructure.vision.openai_vision - Primary detector: OpenAI vision chat model.

Implements VisionProviderPort by sending the photo inline (base64 data URI)
to a chat/completions endpoint together with an engineered prompt that asks
for a JSON array of lowercase ingredient names.

Uses an httpx.AsyncClient. Each call is bounded twice: the httpx timeout
aborts a stalled connection, and asyncio.wait_for bounds the whole call.
When the deadline fires the request task is cancelled, which closes the
connection instead of leaving it running. Both surface as
ProviderTimeoutError, which the retrier treats like any other transport
failure.

Only the network call is retried. A reply that arrives but cannot be parsed
raises InvalidFormatError straight away — asking again rarely fixes it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import httpx

from domain.exceptions import InvalidFormatError, ProviderError, ProviderTimeoutError
from domain.models import ImageBlob, ParseKind, RetryPolicy
from infrastructure.retry import retry_async
from infrastructure.vision.response_parser import parse_ingredient_response

logger = logging.getLogger(__name__)


class OpenAIVisionDetector:
    """Detect food ingredients in a photo with an OpenAI vision model.

    Implements VisionProviderPort (structural typing — no explicit inheritance).
    """

    name = "OpenAI Vision"

    _SYSTEM_PROMPT = (
        "You are a food ingredient recognition assistant. "
        "You only ever answer with a JSON array of strings."
    )

    _PROMPT = (
        "Identify every food ingredient visible in this image. "
        "Be specific about variety and colour (for example \"red onions\", "
        "\"green bell pepper\", \"basmati rice\"). Include items that are only "
        "partially visible or in the background. "
        "Respond with ONLY a JSON array of lowercase ingredient names, nothing else. "
        "Example: [\"tomatoes\", \"red onions\", \"garlic\", \"fresh coriander\"]"
    )

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o",
        max_tokens: int = 500,
        temperature: float = 0.1,
        timeout: float = 30.0,
        retry_policy: Optional[RetryPolicy] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key
        self._url = base_url.rstrip("/") + "/chat/completions"
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = timeout
        self._retry_policy = retry_policy or RetryPolicy(max_attempts=3, base_delay_ms=2000)
        self._client = client or httpx.AsyncClient()

    async def detect(self, image: ImageBlob) -> list[str]:
        """Return raw ingredient candidates seen in the image.

        Raises:
            ProviderError:      transport failure, non-2xx, or empty content
                                after all retries.
            InvalidFormatError: the reply could not be turned into a list.
        """
        payload = self._build_payload(image)
        content = await retry_async(
            lambda: self._request_completion(payload),
            self._retry_policy,
            label=f"{self.name} ({self._model})",
        )
        logger.info("%s raw response: %s", self.name, content[:300])

        result = parse_ingredient_response(content)
        if not result.ok:
            raise InvalidFormatError(
                f"Unusable {self.name} response: {result.detail}",
                provider=self.name,
            )
        if result.kind is ParseKind.HEURISTIC:
            logger.info(
                "%s reply was not JSON; extracted %d candidate(s) from text",
                self.name, len(result.items),
            )
        return result.items

    def _build_payload(self, image: ImageBlob) -> dict[str, Any]:
        return {
            "model": self._model,
            "messages": [
                {"role": "system", "content": self._SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": self._PROMPT},
                        {
                            "type": "image_url",
                            "image_url": {"url": image.to_data_uri(), "detail": "high"},
                        },
                    ],
                },
            ],
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
        }

    async def _request_completion(self, payload: dict[str, Any]) -> str:
        """One bounded chat/completions call; returns the message text."""
        try:
            return await asyncio.wait_for(self._post(payload), timeout=self._timeout)
        except asyncio.TimeoutError:
            raise ProviderTimeoutError(
                f"{self.name} timed out after {self._timeout}s",
                provider=self.name,
            )

    async def _post(self, payload: dict[str, Any]) -> str:
        logger.info("Calling %s at %s (model=%s)", self.name, self._url, self._model)
        try:
            response = await self._client.post(
                self._url,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(
                f"{self.name} timed out after {self._timeout}s", provider=self.name,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"{self.name} unreachable at {self._url}: {e}", provider=self.name,
            ) from e

        if not response.is_success:
            raise ProviderError(
                f"{self.name} returned HTTP {response.status_code}: {response.text[:200]}",
                provider=self.name,
                status_code=response.status_code,
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                f"{self.name} returned an unexpected body: {e}",
                provider=self.name,
                status_code=response.status_code,
            ) from e

        if not isinstance(content, str) or not content.strip():
            raise ProviderError(
                f"{self.name} returned empty content",
                provider=self.name,
                status_code=response.status_code,
            )
        return content
