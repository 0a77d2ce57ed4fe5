"""
infrastructure.config - Typed, injectable configuration.

A frozen dataclass that can be constructed from the environment (.env
supported) or passed explicitly in tests. Both provider API keys are
optional: a missing key means that detection stage is skipped.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from domain.exceptions import NoCredentialError
from domain.models import RetryPolicy

# Roboflow hosted models tried in order; the first one that returns
# detections wins.
DEFAULT_ROBOFLOW_ENDPOINTS: tuple[str, ...] = (
    "ingredients-detection/1",
    "food-ingredients-detection/1",
    "food-detection-yolov8/1",
    "fridge-ingredients/1",
    "vegetables-detection/1",
    "grocery-items-detection/1",
    "food-recognition/1",
)


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name, "")
    items = tuple(part.strip() for part in raw.split(",") if part.strip())
    return items or default


# httpx logs every request URL at INFO, and the Roboflow key travels in the
# query string.
_QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = "INFO", fmt: str = "%(asctime)s %(levelname)s %(name)s: %(message)s") -> None:
    """Configure root logging once for the API or the CLI."""
    logging.basicConfig(level=level.upper(), format=fmt)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@dataclass(frozen=True)
class Settings:
    """Centralized configuration for the ingredient detection service.

    No module-level globals — construct via from_env() or pass explicitly
    in tests.
    """

    # ── Credentials (both optional) ─────────────────────────────
    openai_api_key: str = ""
    roboflow_api_key: str = ""

    # ── Primary: OpenAI vision ──────────────────────────────────
    openai_base_url: str = "https://api.openai.com/v1"
    vision_model: str = "gpt-4o"
    vision_max_tokens: int = 500
    vision_temperature: float = 0.1
    vision_timeout: float = 30.0
    vision_max_attempts: int = 3
    vision_base_delay_ms: int = 2000

    # ── Secondary: Roboflow hosted detection ────────────────────
    roboflow_base_url: str = "https://detect.roboflow.com"
    roboflow_endpoints: tuple[str, ...] = field(default=DEFAULT_ROBOFLOW_ENDPOINTS)
    roboflow_timeout: float = 25.0
    roboflow_max_attempts: int = 3
    roboflow_base_delay_ms: int = 4000

    # ── Normalization bounds ────────────────────────────────────
    max_ingredients: int = 20
    max_ingredient_length: int = 29

    # ── Recipe generation LLM ───────────────────────────────────
    # Allowed: "openai", "groq", "ollama"
    llm_provider: str = "openai"
    llm_model_openai: str = "gpt-4"
    llm_model_groq: str = "llama-3.3-70b-versatile"
    llm_model_ollama: str = "llama3.2"
    groq_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434/"
    recipe_temperature: float = 0.7
    recipe_max_tokens: int = 3000
    recipe_timeout: float = 60.0

    log_level: str = "INFO"

    @property
    def has_openai(self) -> bool:
        return bool(self.openai_api_key.strip())

    @property
    def has_roboflow(self) -> bool:
        return bool(self.roboflow_api_key.strip())

    @property
    def vision_retry_policy(self) -> RetryPolicy:
        return RetryPolicy(self.vision_max_attempts, self.vision_base_delay_ms)

    @property
    def roboflow_retry_policy(self) -> RetryPolicy:
        return RetryPolicy(self.roboflow_max_attempts, self.roboflow_base_delay_ms)

    @property
    def active_llm_model(self) -> str:
        """Return the model name for the currently active LLM provider."""
        if self.llm_provider == "groq":
            return self.llm_model_groq
        elif self.llm_provider == "ollama":
            return self.llm_model_ollama
        return self.llm_model_openai

    def require_openai_key(self) -> str:
        if not self.has_openai:
            raise NoCredentialError("OPENAI_API_KEY is not configured")
        return self.openai_api_key.strip()

    def require_roboflow_key(self) -> str:
        if not self.has_roboflow:
            raise NoCredentialError("ROBOFLOW_API_KEY is not configured")
        return self.roboflow_api_key.strip()

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> Settings:
        """Build Settings from environment variables (and .env if present)."""
        from dotenv import load_dotenv
        load_dotenv(env_file)

        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            roboflow_api_key=os.getenv("ROBOFLOW_API_KEY", ""),

            openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
            vision_model=os.getenv("VISION_MODEL", "gpt-4o"),
            vision_max_tokens=_env_int("VISION_MAX_TOKENS", 500),
            vision_temperature=_env_float("VISION_TEMPERATURE", 0.1),
            vision_timeout=_env_float("VISION_TIMEOUT", 30.0),
            vision_max_attempts=_env_int("VISION_MAX_ATTEMPTS", 3),
            vision_base_delay_ms=_env_int("VISION_BASE_DELAY_MS", 2000),

            roboflow_base_url=os.getenv("ROBOFLOW_BASE_URL", "https://detect.roboflow.com"),
            roboflow_endpoints=_env_list("ROBOFLOW_ENDPOINTS", DEFAULT_ROBOFLOW_ENDPOINTS),
            roboflow_timeout=_env_float("ROBOFLOW_TIMEOUT", 25.0),
            roboflow_max_attempts=_env_int("ROBOFLOW_MAX_ATTEMPTS", 3),
            roboflow_base_delay_ms=_env_int("ROBOFLOW_BASE_DELAY_MS", 4000),

            max_ingredients=_env_int("MAX_INGREDIENTS", 20),
            max_ingredient_length=_env_int("MAX_INGREDIENT_LENGTH", 29),

            llm_provider=os.getenv("LLM_PROVIDER", "openai"),
            llm_model_openai=os.getenv("LLM_MODEL_OPENAI", "gpt-4"),
            llm_model_groq=os.getenv("LLM_MODEL_GROQ", "llama-3.3-70b-versatile"),
            llm_model_ollama=os.getenv("LLM_MODEL_OLLAMA", "llama3.2"),
            groq_api_key=os.getenv("GROQ_API_KEY", ""),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/"),
            recipe_temperature=_env_float("RECIPE_TEMPERATURE", 0.7),
            recipe_max_tokens=_env_int("RECIPE_MAX_TOKENS", 3000),
            recipe_timeout=_env_float("RECIPE_TIMEOUT", 60.0),

            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
