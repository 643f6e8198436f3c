"""Reading service: turns the fetched bundle into a colloquial analysis."""

import logging
from typing import Any

from tabibi.config.prompts import (
    ANALYSIS_COMPACT_SYSTEM_PROMPT,
    ANALYSIS_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_assistant_system_prompt,
    build_compact_analysis_prompt,
)
from tabibi.config.settings import Settings
from tabibi.infrastructure.llm import LLMProvider, Message
from tabibi.services.data.fetcher import FetchedData
from tabibi.services.planning.models import Plan

logger = logging.getLogger(__name__)


class AnalysisService:
    """Builds reading prompts and calls one provider per attempt."""

    def __init__(self, settings: Settings):
        """Initialize analysis service."""
        self.settings = settings

    def build_messages(
        self,
        user_message: str,
        fetched: FetchedData,
        plan: Plan,
        user: Any = None,
        clinic: Any = None,
        subscription: Any = None,
    ) -> list[Message]:
        assistant_prompt = build_assistant_system_prompt(
            user, clinic, subscription, stats=fetched.stats, context=fetched.context
        )
        return [
            {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": build_analysis_prompt(
                    assistant_prompt, fetched.to_dict(), plan.to_dict(), user_message
                ),
            },
        ]

    def build_compact_messages(self, fetched: FetchedData) -> list[Message]:
        return [
            {"role": "system", "content": ANALYSIS_COMPACT_SYSTEM_PROMPT},
            {"role": "user", "content": build_compact_analysis_prompt(fetched.to_dict())},
        ]

    async def analyze_with(
        self,
        provider: LLMProvider,
        user_message: str,
        fetched: FetchedData,
        plan: Plan,
        user: Any = None,
        clinic: Any = None,
        subscription: Any = None,
    ) -> str:
        """Full analysis with the composite prompt; provider errors propagate."""
        messages = self.build_messages(user_message, fetched, plan, user, clinic, subscription)
        analysis = await provider.complete(
            messages,
            temperature=self.settings.reading_temperature,
            max_tokens=self.settings.reading_max_tokens,
        )
        logger.debug("Analysis from %s: %d chars", provider.name, len(analysis))
        return analysis

    async def analyze_compact_with(self, provider: LLMProvider, fetched: FetchedData) -> str:
        """Compact analysis used when the full prompt could not be served."""
        analysis = await provider.complete(
            self.build_compact_messages(fetched),
            temperature=self.settings.reading_temperature,
            max_tokens=self.settings.reading_max_tokens,
        )
        logger.debug("Compact analysis from %s: %d chars", provider.name, len(analysis))
        return analysis
