"""
domain.ports - Abstract interfaces (Protocols) for all system boundaries.

These define WHAT the system needs without specifying HOW. Infrastructure
modules provide concrete implementations. Application services depend only
on these protocols, never on concrete classes.

Using typing.Protocol (structural typing) instead of ABC — any class that
implements the methods satisfies the port without explicit inheritance.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from domain.models import ImageBlob, Recipe


@runtime_checkable
class VisionProviderPort(Protocol):
    """Multimodal LLM that lists ingredients visible in a photo."""

    name: str

    async def detect(self, image: ImageBlob) -> list[str]: ...


@runtime_checkable
class DetectionProviderPort(Protocol):
    """Specialized object-detection service returning ingredient labels."""

    name: str

    async def detect(self, image: ImageBlob) -> list[str]: ...


@runtime_checkable
class RecipeGeneratorPort(Protocol):
    """Generate recipe suggestions from a list of ingredients."""

    async def generate(self, ingredients: list[str]) -> list[Recipe]: ...
