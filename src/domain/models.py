"""
domain.models - Value objects for the detection pipeline.

These are immutable data containers with no business logic and no
dependencies on infrastructure (no httpx, no LangChain, no FastAPI).
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from domain.exceptions import ProviderError


# ---------------------------------------------------------------------------
# Image input
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ImageBlob:
    """Raw uploaded image. Read once per request, never persisted."""
    data: bytes
    mime_type: str = "image/jpeg"
    filename: str = ""

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type or 'image/jpeg'};base64,{self.to_base64()}"

    def __repr__(self) -> str:
        return f"ImageBlob({self.filename or '<upload>'}, {self.mime_type}, {len(self.data)} bytes)"


# ---------------------------------------------------------------------------
# Retry policy
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try a call and how long to wait between tries.

    The delay after failed attempt i (0-based) is base_delay_ms * 2**i.
    """
    max_attempts: int = 3
    base_delay_ms: int = 2000

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay_ms < 0:
            raise ValueError(f"base_delay_ms must be >= 0, got {self.base_delay_ms}")

    def delay_seconds(self, attempt: int) -> float:
        return self.base_delay_ms * (2 ** attempt) / 1000.0


# ---------------------------------------------------------------------------
# Provider response parsing
# ---------------------------------------------------------------------------

class ParseKind(str, Enum):
    STRICT = "strict"
    HEURISTIC = "heuristic"
    FAILED = "failed"


@dataclass(frozen=True)
class ParseResult:
    """Outcome of turning a vision-LLM text reply into candidate labels.

    STRICT:    a JSON array was found and parsed.
    HEURISTIC: JSON parsing failed; labels were scraped from the text.
    FAILED:    nothing usable could be extracted.
    """
    kind: ParseKind
    items: list = field(default_factory=list)
    detail: str = ""

    @classmethod
    def strict(cls, items: list) -> ParseResult:
        return cls(kind=ParseKind.STRICT, items=list(items))

    @classmethod
    def heuristic(cls, items: list[str], detail: str = "") -> ParseResult:
        return cls(kind=ParseKind.HEURISTIC, items=list(items), detail=detail)

    @classmethod
    def failed(cls, detail: str) -> ParseResult:
        return cls(kind=ParseKind.FAILED, detail=detail)

    @property
    def ok(self) -> bool:
        return self.kind is not ParseKind.FAILED


@dataclass(frozen=True)
class EndpointAttempt:
    """Result of querying one candidate detector endpoint (after retries)."""
    endpoint: str
    labels: list[str] = field(default_factory=list)
    error: Optional[ProviderError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and bool(self.labels)

    def describe(self) -> str:
        if self.error is not None:
            status = f"HTTP {self.error.status_code}" if self.error.status_code else "error"
            return f"{self.endpoint}: {status} ({self.error})"
        if not self.labels:
            return f"{self.endpoint}: no detections"
        return f"{self.endpoint}: {len(self.labels)} label(s)"


# ---------------------------------------------------------------------------
# Detection outcome
# ---------------------------------------------------------------------------

class DetectionStatus(str, Enum):
    SUCCESS = "success"
    DEGRADED = "degraded"


class DetectionSource(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    FALLBACK = "fallback"


class FallbackReason(str, Enum):
    """Why the static fallback list was used."""
    NO_CREDENTIALS = "no_credentials"
    NO_DETECTIONS = "no_detections"
    PROVIDER_ERROR = "provider_error"


@dataclass(frozen=True)
class DetectionOutcome:
    """Tagged result of the detection fallback chain.

    There is no failure variant: a DEGRADED outcome still carries a
    non-empty canned ingredient list.
    """
    status: DetectionStatus
    ingredients: list[str]
    source: DetectionSource
    message: str = ""
    reason: Optional[FallbackReason] = None

    @classmethod
    def success(
        cls, ingredients: list[str], source: DetectionSource, message: str = "",
    ) -> DetectionOutcome:
        return cls(
            status=DetectionStatus.SUCCESS,
            ingredients=list(ingredients),
            source=source,
            message=message,
        )

    @classmethod
    def degraded(
        cls, ingredients: list[str], reason: FallbackReason, message: str = "",
    ) -> DetectionOutcome:
        return cls(
            status=DetectionStatus.DEGRADED,
            ingredients=list(ingredients),
            source=DetectionSource.FALLBACK,
            message=message,
            reason=reason,
        )

    @property
    def is_degraded(self) -> bool:
        return self.status is DetectionStatus.DEGRADED


# ---------------------------------------------------------------------------
# Recipes
# ---------------------------------------------------------------------------

RECIPE_PLACEHOLDER_IMAGE = (
    "https://images.pexels.com/photos/1640777/pexels-photo-1640777.jpeg"
    "?auto=compress&cs=tinysrgb&w=800"
)


@dataclass(frozen=True)
class NutritionInfo:
    """Per-serving macros as reported by the recipe generator."""
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0


@dataclass(frozen=True)
class Recipe:
    """A single generated recipe suggestion."""
    id: str
    title: str
    description: str = ""
    difficulty: str = "Easy"
    cook_time: int = 0
    servings: int = 0
    ingredients: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    nutrition: NutritionInfo = field(default_factory=NutritionInfo)
    image: str = ""


@dataclass(frozen=True)
class RecipeSuggestions:
    """Recipes plus where they came from: "llm" or "fallback"."""
    recipes: list[Recipe]
    source: str = "llm"

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"
