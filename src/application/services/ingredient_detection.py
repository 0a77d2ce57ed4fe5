"""
application.services.ingredient_detection - Multi-provider detection with fallback.

Sequences the detection stages for one uploaded photo:

    PRIMARY (vision LLM) → SECONDARY (object detector) → STATIC_FALLBACK

  - A stage whose provider is not configured (no API key) is skipped
    without being called.
  - A stage "succeeds" only if its output is non-empty after normalization.
    Provider errors and empty results both move on to the next stage.
  - STATIC_FALLBACK always returns a small canned list, so the caller
    always gets a non-empty ingredient list.

This is the only place that decides whether a provider's output is good
enough to return. Adapters only report transport/parse success.

Usage (wired in factory.py):
    service = IngredientDetectionService(primary=openai, secondary=roboflow)
    outcome = await service.detect(image)
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from application.normalizer import (
    DEFAULT_MAX_ITEMS,
    DEFAULT_MAX_LENGTH,
    normalize,
    split_free_text,
)
from domain.exceptions import ProviderError
from domain.models import DetectionOutcome, DetectionSource, FallbackReason, ImageBlob
from domain.ports import DetectionProviderPort, VisionProviderPort

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    STATIC_FALLBACK = "static_fallback"


# Canned lists per fallback reason. Every one is non-empty.
FALLBACK_INGREDIENTS: dict[FallbackReason, list[str]] = {
    FallbackReason.NO_CREDENTIALS: ["tomatoes", "onions", "garlic", "ginger", "rice", "chicken"],
    FallbackReason.NO_DETECTIONS: ["tomatoes", "onions", "garlic", "ginger"],
    FallbackReason.PROVIDER_ERROR: ["tomatoes", "onions", "garlic", "ginger", "rice"],
}

FALLBACK_MESSAGES: dict[FallbackReason, str] = {
    FallbackReason.NO_CREDENTIALS: "No detection API key configured. Using sample ingredients.",
    FallbackReason.NO_DETECTIONS: (
        "No specific ingredients detected. Here are some common ones to get started."
    ),
    FallbackReason.PROVIDER_ERROR: "Using fallback ingredients due to detection error.",
}


class IngredientDetectionService:
    """Detect ingredients from a photo, degrading gracefully across providers."""

    def __init__(
        self,
        primary: Optional[VisionProviderPort] = None,
        secondary: Optional[DetectionProviderPort] = None,
        *,
        max_ingredients: int = DEFAULT_MAX_ITEMS,
        max_ingredient_length: int = DEFAULT_MAX_LENGTH,
    ):
        self._primary = primary
        self._secondary = secondary
        self._max_items = max_ingredients
        self._max_length = max_ingredient_length

    @property
    def configured_providers(self) -> dict[str, bool]:
        return {
            Stage.PRIMARY.value: self._primary is not None,
            Stage.SECONDARY.value: self._secondary is not None,
        }

    async def detect(self, image: ImageBlob) -> DetectionOutcome:
        """Run the fallback chain. Never raises; never returns an empty list."""
        logger.info("Detecting ingredients in %r", image)
        had_error = False

        # --- Stage 1: primary (vision LLM) ---
        if self._primary is None:
            logger.info("Stage %s skipped: no credential configured", Stage.PRIMARY.value)
        else:
            ingredients, failed = await self._run_stage(Stage.PRIMARY, self._primary, image)
            had_error = had_error or failed
            if ingredients:
                return DetectionOutcome.success(
                    ingredients,
                    DetectionSource.PRIMARY,
                    message=f"Ingredients detected using {self._primary.name}.",
                )

        # --- Stage 2: secondary (object detector) ---
        if self._secondary is None:
            logger.info("Stage %s skipped: no credential configured", Stage.SECONDARY.value)
        else:
            ingredients, failed = await self._run_stage(Stage.SECONDARY, self._secondary, image)
            had_error = had_error or failed
            if ingredients:
                return DetectionOutcome.success(
                    ingredients,
                    DetectionSource.SECONDARY,
                    message=f"Ingredients detected using {self._secondary.name}.",
                )

        # --- Stage 3: static fallback ---
        if self._primary is None and self._secondary is None:
            reason = FallbackReason.NO_CREDENTIALS
        elif had_error:
            reason = FallbackReason.PROVIDER_ERROR
        else:
            reason = FallbackReason.NO_DETECTIONS
        return self._fallback(reason)

    def from_text(self, text: str) -> list[str]:
        """Normalize typed/dictated input like "Tomatoes, onion, rice"."""
        return normalize(
            split_free_text(text),
            max_items=self._max_items,
            max_length=self._max_length,
        )

    async def _run_stage(
        self, stage: Stage, provider: VisionProviderPort | DetectionProviderPort, image: ImageBlob,
    ) -> tuple[list[str], bool]:
        """Call one provider. Returns (normalized ingredients, provider_failed)."""
        logger.info("Stage %s: calling %s", stage.value, provider.name)
        try:
            raw = await provider.detect(image)
        except ProviderError as e:
            logger.warning(
                "Stage %s: %s failed (%s, HTTP status=%s): %s — moving on",
                stage.value, provider.name, type(e).__name__, e.status_code, e,
            )
            return [], True
        except Exception as e:
            logger.warning(
                "Stage %s: %s unexpected error (%s) — moving on",
                stage.value, provider.name, e, exc_info=True,
            )
            return [], True

        ingredients = normalize(raw, max_items=self._max_items, max_length=self._max_length)
        if not ingredients:
            logger.info(
                "Stage %s: %s returned %d raw candidate(s), none usable after normalization",
                stage.value, provider.name, len(raw or []),
            )
            return [], False

        logger.info(
            "Stage %s: %s detected %d ingredient(s): %s",
            stage.value, provider.name, len(ingredients), ", ".join(ingredients[:5]),
        )
        return ingredients, False

    def _fallback(self, reason: FallbackReason) -> DetectionOutcome:
        ingredients = FALLBACK_INGREDIENTS[reason]
        logger.warning(
            "Stage %s: returning canned ingredients (reason=%s)",
            Stage.STATIC_FALLBACK.value, reason.value,
        )
        return DetectionOutcome.degraded(
            ingredients[: self._max_items],
            reason,
            message=FALLBACK_MESSAGES[reason],
        )
