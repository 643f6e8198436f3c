"""Response building service: streams the final answer and appends visuals."""

import logging
from collections.abc import Callable
from contextlib import aclosing

from tabibi.config.constants import (
    BUILD_FALLBACK_EMPTY_ANALYSIS,
    BUILD_FALLBACK_PREFIX,
    BUILD_PROMPT_EMPTY_ANALYSIS,
    BUILD_SIMPLE_PROMPT_EMPTY_ANALYSIS,
)
from tabibi.config.prompts import (
    BUILD_FALLBACK_SYSTEM_PROMPT,
    BUILD_SYSTEM_PROMPT,
    build_response_prompt,
    build_simple_response_prompt,
)
from tabibi.config.settings import Settings
from tabibi.infrastructure.llm import LLMProvider, Message
from tabibi.services.viz import VisualizationDescriptor, format_annotation

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[str, str], None]


def _never_aborted() -> bool:
    return False


def _discard_chunk(fragment: str, accumulated: str) -> None:
    return None


class ResponseBuilder:
    """Writes the user-facing answer with one provider per attempt."""

    def __init__(self, settings: Settings):
        """Initialize response builder."""
        self.settings = settings

    def build_messages(self, user_message: str, analysis: str | None) -> list[Message]:
        excerpt = (analysis or "")[: self.settings.analysis_excerpt_chars]
        return [
            {"role": "system", "content": BUILD_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": build_response_prompt(
                    user_message, excerpt or BUILD_PROMPT_EMPTY_ANALYSIS
                ),
            },
        ]

    def build_simple_messages(self, user_message: str, analysis: str | None) -> list[Message]:
        excerpt = (analysis or "")[: self.settings.analysis_fallback_excerpt_chars]
        return [
            {"role": "system", "content": BUILD_FALLBACK_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": build_simple_response_prompt(
                    user_message, excerpt or BUILD_SIMPLE_PROMPT_EMPTY_ANALYSIS
                ),
            },
        ]

    async def stream_with(
        self,
        provider: LLMProvider,
        messages: list[Message],
        descriptor: VisualizationDescriptor | None,
        *,
        max_tokens: int,
        on_chunk: ChunkCallback = _discard_chunk,
        is_aborted: Callable[[], bool] = _never_aborted,
    ) -> str:
        """
        Stream ``provider``'s reply through ``on_chunk`` and append the annotation.

        Streaming stops as soon as ``is_aborted`` turns true; the provider
        stream is closed either way. Provider errors propagate.
        """
        accumulated = ""
        async with aclosing(
            provider.stream(
                messages,
                temperature=self.settings.building_temperature,
                max_tokens=max_tokens,
            )
        ) as stream:
            async for fragment in stream:
                if is_aborted():
                    logger.info("Streaming from %s interrupted by abort", provider.name)
                    break
                if not fragment:
                    continue
                accumulated += fragment
                on_chunk(fragment, accumulated)

        annotation = format_annotation(descriptor)
        if annotation:
            accumulated += annotation
            on_chunk(annotation, accumulated)
        logger.info("Response built with %s (%d chars)", provider.name, len(accumulated))
        return accumulated

    async def build_with(
        self,
        provider: LLMProvider,
        user_message: str,
        analysis: str | None,
        descriptor: VisualizationDescriptor | None,
        *,
        on_chunk: ChunkCallback = _discard_chunk,
        is_aborted: Callable[[], bool] = _never_aborted,
    ) -> str:
        """Primary path: full prompt with the analysis excerpt."""
        return await self.stream_with(
            provider,
            self.build_messages(user_message, analysis),
            descriptor,
            max_tokens=self.settings.building_max_tokens,
            on_chunk=on_chunk,
            is_aborted=is_aborted,
        )

    async def build_simple_with(
        self,
        provider: LLMProvider,
        user_message: str,
        analysis: str | None,
        descriptor: VisualizationDescriptor | None,
        *,
        on_chunk: ChunkCallback = _discard_chunk,
        is_aborted: Callable[[], bool] = _never_aborted,
    ) -> str:
        """Fallback path: shorter prompt, larger token budget."""
        return await self.stream_with(
            provider,
            self.build_simple_messages(user_message, analysis),
            descriptor,
            max_tokens=self.settings.building_fallback_max_tokens,
            on_chunk=on_chunk,
            is_aborted=is_aborted,
        )

    def static_response(
        self,
        analysis: str | None,
        descriptor: VisualizationDescriptor | None,
        on_chunk: ChunkCallback = _discard_chunk,
    ) -> str:
        """Templated answer delivered as a single chunk when no provider could write one."""
        excerpt = (analysis or "")[: self.settings.analysis_static_excerpt_chars]
        message = f"{BUILD_FALLBACK_PREFIX} {excerpt or BUILD_FALLBACK_EMPTY_ANALYSIS}"
        message += format_annotation(descriptor)
        on_chunk(message, message)
        return message
