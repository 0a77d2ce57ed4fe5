"""
infrastructure.vision.roboflow_detector - Secondary detector: Roboflow hosted models.

Implements DetectionProviderPort by posting the base64 image to a list of
candidate Roboflow model endpoints, in order, until one of them returns at
least one usable label.

Every endpoint gets its own retry budget and per-call deadline. The
deadline cancels the httpx request, so a hung endpoint is aborted rather
than left running. A failing endpoint (network error, non-2xx, timeout) is
recorded and skipped; a 403 is logged as a key/permission problem since
it will not fix itself. The loop stops at the first endpoint with
detections, so earlier endpoints in the list always win.

Wire format (Roboflow hosted inference):
    POST https://detect.roboflow.com/<model>/<version>?api_key=...
    Content-Type: application/x-www-form-urlencoded
    body: <base64 image>
    -> {"predictions": [{"class": "tomato", "confidence": 0.91, ...}, ...]}
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Sequence

import httpx

from domain.exceptions import ProviderError, ProviderTimeoutError
from domain.models import EndpointAttempt, ImageBlob, RetryPolicy
from infrastructure.retry import retry_async

logger = logging.getLogger(__name__)

# Field names that different Roboflow model types use for the label.
LABEL_FIELDS: tuple[str, ...] = ("class", "name", "label", "category")


def extract_labels(payload: Any) -> list[str]:
    """Pull lowercase labels out of a Roboflow predictions payload.

    Per prediction, the first non-empty string among LABEL_FIELDS wins;
    predictions without any are dropped, as are 1-character labels.
    """
    if not isinstance(payload, dict):
        return []
    predictions = payload.get("predictions")
    if not isinstance(predictions, list):
        return []

    labels: list[str] = []
    for item in predictions:
        if not isinstance(item, dict):
            continue
        for key in LABEL_FIELDS:
            value = item.get(key)
            if isinstance(value, str) and value.strip():
                label = value.strip().lower()
                if len(label) > 1:
                    labels.append(label)
                break
    return labels


def select_first_success(attempts: Sequence[EndpointAttempt], provider: str = "Roboflow") -> list[str]:
    """Return the labels of the first successful attempt, in list order.

    Raises:
        ProviderError: if no attempt produced labels. The message lists
            what happened at every endpoint.
    """
    for attempt in attempts:
        if attempt.succeeded:
            return list(attempt.labels)

    summary = "; ".join(a.describe() for a in attempts) or "no endpoints configured"
    statuses = [a.error.status_code for a in attempts if a.error and a.error.status_code]
    raise ProviderError(
        f"{provider}: no endpoint returned detections ({summary})",
        provider=provider,
        status_code=statuses[-1] if statuses else None,
    )


class RoboflowDetector:
    """Detect ingredients with Roboflow hosted object-detection models.

    Implements DetectionProviderPort (structural typing — no explicit inheritance).
    """

    name = "Roboflow"

    def __init__(
        self,
        api_key: str,
        endpoints: Sequence[str],
        *,
        base_url: str = "https://detect.roboflow.com",
        timeout: float = 25.0,
        retry_policy: Optional[RetryPolicy] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key
        self._endpoints = tuple(endpoints)
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retry_policy = retry_policy or RetryPolicy(max_attempts=3, base_delay_ms=4000)
        self._client = client or httpx.AsyncClient()

    @property
    def endpoints(self) -> tuple[str, ...]:
        return self._endpoints

    async def detect(self, image: ImageBlob) -> list[str]:
        """Try each candidate endpoint in order; return the first non-empty labels.

        Raises:
            ProviderError: if every endpoint failed or found nothing.
        """
        image_b64 = image.to_base64()
        attempts: list[EndpointAttempt] = []

        for endpoint in self._endpoints:
            attempt = await self._try_endpoint(endpoint, image_b64)
            attempts.append(attempt)
            if attempt.succeeded:
                logger.info(
                    "%s endpoint '%s' detected %d label(s): %s",
                    self.name, endpoint, len(attempt.labels),
                    ", ".join(attempt.labels[:5]),
                )
                break
            logger.info("%s endpoint '%s' gave nothing usable — trying next", self.name, endpoint)

        return select_first_success(attempts, provider=self.name)

    async def _try_endpoint(self, endpoint: str, image_b64: str) -> EndpointAttempt:
        try:
            labels = await retry_async(
                lambda: self._call_endpoint(endpoint, image_b64),
                self._retry_policy,
                label=f"{self.name} {endpoint}",
            )
        except ProviderError as e:
            if e.is_permission_error:
                logger.warning(
                    "%s endpoint '%s' rejected the API key (HTTP %s) — check "
                    "ROBOFLOW_API_KEY and model access",
                    self.name, endpoint, e.status_code,
                )
            else:
                logger.warning("%s endpoint '%s' failed: %s", self.name, endpoint, e)
            return EndpointAttempt(endpoint=endpoint, error=e)
        return EndpointAttempt(endpoint=endpoint, labels=labels)

    async def _call_endpoint(self, endpoint: str, image_b64: str) -> list[str]:
        """One bounded call to a single model endpoint."""
        try:
            return await asyncio.wait_for(self._post(endpoint, image_b64), timeout=self._timeout)
        except asyncio.TimeoutError:
            raise ProviderTimeoutError(
                f"{self.name} '{endpoint}' timed out after {self._timeout}s",
                provider=self.name,
            )

    async def _post(self, endpoint: str, image_b64: str) -> list[str]:
        url = f"{self._base_url}/{endpoint.strip('/')}"
        logger.info("Calling %s at %s", self.name, url)
        try:
            response = await self._client.post(
                url,
                params={"api_key": self._api_key},
                content=image_b64,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(
                f"{self.name} '{endpoint}' timed out after {self._timeout}s",
                provider=self.name,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"{self.name} '{endpoint}' unreachable: {self._redact(str(e))}",
                provider=self.name,
            ) from e

        if not response.is_success:
            raise ProviderError(
                f"{self.name} '{endpoint}' returned HTTP {response.status_code}: "
                f"{response.text[:200]}",
                provider=self.name,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                f"{self.name} '{endpoint}' returned a non-JSON body",
                provider=self.name,
                status_code=response.status_code,
            ) from e
        return extract_labels(data)

    def _redact(self, text: str) -> str:
        """Strip the API key from messages (it travels in the query string)."""
        if not self._api_key:
            return text
        return text.replace(self._api_key, "***")
