"""LLM infrastructure module."""

from tabibi.infrastructure.llm.factory import (
    ProviderSet,
    build_providers,
    close_shared_providers,
    get_shared_providers,
)
from tabibi.infrastructure.llm.providers import (
    LLMProvider,
    Message,
    OpenAICompatibleProvider,
    OpenRouterProvider,
    parse_sse_line,
)

__all__ = [
    "LLMProvider",
    "Message",
    "OpenAICompatibleProvider",
    "OpenRouterProvider",
    "ProviderSet",
    "build_providers",
    "close_shared_providers",
    "get_shared_providers",
    "parse_sse_line",
]
