"""
factory - Composition root for the ingredient detection service.

ALL dependency wiring happens here. No other module constructs its own
dependencies. Adapters (REST, CLI) call this factory to get fully
configured services.

Providers are only constructed when their API key is present; a missing
key leaves the slot empty and the orchestrator skips that stage.

Usage:
    from factory import ServiceFactory
    from infrastructure.config import Settings

    factory = ServiceFactory(Settings.from_env())
    service = factory.create_ingredient_detection_service()
    outcome = await service.detect(image)
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from application.services.ingredient_detection import IngredientDetectionService
from application.services.recipe_generation import RecipeGenerationService
from domain.exceptions import NoCredentialError
from infrastructure.config import Settings
from infrastructure.llm.llm_builder import build_chat_llm
from infrastructure.llm.recipe_generator import LangChainRecipeGenerator
from infrastructure.vision.openai_vision import OpenAIVisionDetector
from infrastructure.vision.roboflow_detector import RoboflowDetector

logger = logging.getLogger(__name__)


class ServiceFactory:
    """Composition root — wires all dependencies together.

    One httpx.AsyncClient is shared by both HTTP providers (connection
    pooling only; it holds no per-request state). Tests inject one backed
    by httpx.MockTransport. Call aclose() on shutdown.
    """

    def __init__(self, config: Settings, client: Optional[httpx.AsyncClient] = None):
        self._config = config
        self._client = client or httpx.AsyncClient()
        self._recipe_generator: Optional[LangChainRecipeGenerator] = None
        self._recipe_generator_built = False

    @property
    def config(self) -> Settings:
        return self._config

    async def aclose(self) -> None:
        """Close pooled provider connections."""
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    def create_vision_provider(self) -> Optional[OpenAIVisionDetector]:
        """Primary provider, or None when OPENAI_API_KEY is not set."""
        try:
            api_key = self._config.require_openai_key()
        except NoCredentialError as e:
            logger.warning("Primary detector disabled: %s", e)
            return None
        return OpenAIVisionDetector(
            api_key,
            base_url=self._config.openai_base_url,
            model=self._config.vision_model,
            max_tokens=self._config.vision_max_tokens,
            temperature=self._config.vision_temperature,
            timeout=self._config.vision_timeout,
            retry_policy=self._config.vision_retry_policy,
            client=self._client,
        )

    def create_detection_provider(self) -> Optional[RoboflowDetector]:
        """Secondary provider, or None when ROBOFLOW_API_KEY is not set."""
        try:
            api_key = self._config.require_roboflow_key()
        except NoCredentialError as e:
            logger.warning("Secondary detector disabled: %s", e)
            return None
        return RoboflowDetector(
            api_key,
            self._config.roboflow_endpoints,
            base_url=self._config.roboflow_base_url,
            timeout=self._config.roboflow_timeout,
            retry_policy=self._config.roboflow_retry_policy,
            client=self._client,
        )

    # ------------------------------------------------------------------
    # Service creation
    # ------------------------------------------------------------------

    def create_ingredient_detection_service(self) -> IngredientDetectionService:
        """Create the detection orchestrator with whichever providers are configured."""
        return IngredientDetectionService(
            primary=self.create_vision_provider(),
            secondary=self.create_detection_provider(),
            max_ingredients=self._config.max_ingredients,
            max_ingredient_length=self._config.max_ingredient_length,
        )

    def create_recipe_generation_service(self) -> RecipeGenerationService:
        """Create the recipe service; without a usable LLM it serves the canned recipe."""
        return RecipeGenerationService(generator=self._get_recipe_generator())

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _get_recipe_generator(self) -> Optional[LangChainRecipeGenerator]:
        """Build the LangChain generator once; None if the LLM is not configured."""
        if self._recipe_generator_built:
            return self._recipe_generator
        self._recipe_generator_built = True

        try:
            llm = build_chat_llm(
                provider=self._config.llm_provider,
                model=self._config.active_llm_model,
                temperature=self._config.recipe_temperature,
                max_tokens=self._config.recipe_max_tokens,
                timeout=self._config.recipe_timeout,
                openai_api_key=self._config.openai_api_key.strip(),
                groq_api_key=self._config.groq_api_key.strip(),
                ollama_base_url=self._config.ollama_base_url,
            )
        except (NoCredentialError, ValueError, ImportError) as e:
            logger.warning("Recipe generator disabled: %s", e)
            return None

        self._recipe_generator = LangChainRecipeGenerator(llm, timeout=self._config.recipe_timeout)
        return self._recipe_generator
