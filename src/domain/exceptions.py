"""
domain.exceptions - Custom exception hierarchy for the ingredient detection service.

All domain-level errors inherit from DomainError so callers can catch
broad or specific exceptions as needed.
"""

from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for all domain-level errors."""


class ProviderError(DomainError):
    """Raised when an external provider call fails (transport or HTTP error)."""

    def __init__(
        self,
        message: str,
        *,
        provider: str = "",
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code

    @property
    def is_permission_error(self) -> bool:
        return self.status_code in (401, 403)


class ProviderTimeoutError(ProviderError):
    """Raised when a provider call exceeds its deadline. Retryable."""


class InvalidFormatError(ProviderError):
    """Raised when a provider response was received but has the wrong shape."""


class NoCredentialError(DomainError):
    """Raised when a provider stage has no API key configured."""


class RecipeGenerationError(DomainError):
    """Raised when the LLM recipe generator fails or returns unusable output."""
