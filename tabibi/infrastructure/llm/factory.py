"""Provider factory helpers."""

import logging
from dataclasses import dataclass

from openai import AsyncOpenAI

from tabibi.config.settings import Settings
from tabibi.infrastructure.llm.providers import (
    LLMProvider,
    OpenAICompatibleProvider,
    OpenRouterProvider,
)

logger = logging.getLogger(__name__)

_shared_providers: "ProviderSet | None" = None


@dataclass(frozen=True)
class ProviderSet:
    """The three providers the pipeline talks to, one per role."""

    fast: LLMProvider
    deep: LLMProvider
    build: LLMProvider

    async def aclose(self) -> None:
        for provider in (self.fast, self.deep, self.build):
            try:
                await provider.aclose()
            except Exception as e:
                logger.warning("Error closing provider %s: %s", provider.name, e)


def build_providers(settings: Settings) -> ProviderSet:
    """
    Create the provider set from settings.

    Fast and build roles use OpenAI-compatible endpoints (Cerebras, Groq);
    the deep-analysis role goes to OpenRouter over raw HTTP.
    """
    fast = OpenAICompatibleProvider(
        name="cerebras",
        client=AsyncOpenAI(
            api_key=settings.cerebras_api_key or "missing",
            base_url=settings.cerebras_base_url,
            timeout=settings.provider_timeout,
            max_retries=0,
        ),
        model=settings.fast_model,
        max_tokens_param=settings.fast_max_tokens_param,
    )
    build = OpenAICompatibleProvider(
        name="groq",
        client=AsyncOpenAI(
            api_key=settings.groq_api_key or "missing",
            base_url=settings.groq_base_url,
            timeout=settings.provider_timeout,
            max_retries=0,
        ),
        model=settings.build_model,
        max_tokens_param=settings.build_max_tokens_param,
    )
    deep = OpenRouterProvider(
        name="openrouter",
        api_url=settings.openrouter_api_url,
        api_key=settings.openrouter_api_key,
        model=settings.deep_model,
        referer=settings.openrouter_referer,
        title=settings.openrouter_title,
        timeout=settings.provider_timeout,
    )
    logger.debug(
        "Providers built: fast=%s, deep=%s, build=%s",
        settings.fast_model,
        settings.deep_model,
        settings.build_model,
    )
    return ProviderSet(fast=fast, deep=deep, build=build)


def get_shared_providers(settings: Settings) -> ProviderSet:
    """
    Get or create the process-wide provider set.

    All pipelines share the same HTTP connection pools.
    """
    global _shared_providers
    if _shared_providers is None:
        _shared_providers = build_providers(settings)
    return _shared_providers


async def close_shared_providers() -> None:
    """
    Close the shared provider set.

    Should be called during application shutdown.
    """
    global _shared_providers
    if _shared_providers is not None:
        await _shared_providers.aclose()
        _shared_providers = None
