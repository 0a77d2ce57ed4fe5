"""
infrastructure.llm.llm_builder - Chat model construction for recipe generation.

The provider is controlled by the LLM_PROVIDER setting:
    - "openai"  → langchain_openai.ChatOpenAI   (default, needs OPENAI_API_KEY)
    - "groq"    → langchain_groq.ChatGroq        (needs GROQ_API_KEY)
    - "ollama"  → langchain_ollama.ChatOllama    (local, no key)

Provider packages are imported lazily so only the one in use must be installed.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from langchain_core.language_models import BaseChatModel

from domain.exceptions import NoCredentialError

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("openai", "groq", "ollama")


def build_chat_llm(
    *,
    provider: str,
    model: str,
    temperature: float = 0.7,
    max_tokens: Optional[int] = None,
    timeout: Optional[float] = None,
    openai_api_key: str = "",
    groq_api_key: str = "",
    ollama_base_url: str = "http://localhost:11434/",
) -> BaseChatModel:
    """Build a LangChain chat model for the given provider.

    Raises:
        NoCredentialError: the provider needs an API key that is not set.
        ValueError:        the provider name is unknown.
    """
    provider = provider.lower().strip()

    if provider == "openai":
        if not openai_api_key:
            raise NoCredentialError("OPENAI_API_KEY is required when LLM_PROVIDER='openai'")
        from langchain_openai import ChatOpenAI

        kwargs: Dict[str, Any] = {
            "model": model,
            "temperature": temperature,
            "api_key": openai_api_key,
        }
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        if timeout is not None:
            kwargs["timeout"] = timeout

        logger.info("Building OpenAI chat model (model=%s)", model)
        return ChatOpenAI(**kwargs)

    elif provider == "groq":
        if not groq_api_key:
            raise NoCredentialError("GROQ_API_KEY is required when LLM_PROVIDER='groq'")
        from langchain_groq import ChatGroq

        kwargs = {
            "model": model,
            "temperature": temperature,
            "api_key": groq_api_key,
            "max_tokens": max_tokens,
        }
        if timeout is not None:
            kwargs["timeout"] = timeout

        logger.info("Building Groq chat model (model=%s)", model)
        return ChatGroq(**kwargs)

    elif provider == "ollama":
        from langchain_ollama import ChatOllama

        kwargs = {
            "model": model,
            "temperature": temperature,
            "base_url": ollama_base_url,
        }
        if max_tokens is not None:
            kwargs["num_predict"] = max_tokens

        logger.info("Building ChatOllama (model=%s) at %s", model, ollama_base_url)
        return ChatOllama(**kwargs)

    raise ValueError(
        f"Unsupported LLM_PROVIDER: '{provider}'. "
        f"Must be one of: {', '.join(SUPPORTED_PROVIDERS)}."
    )
