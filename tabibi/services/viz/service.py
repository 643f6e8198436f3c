"""Visualization service."""

import logging

from tabibi.config.constants import (
    CHART_KEYWORDS,
    TABLE_SKELETON_HEADERS,
    TABLE_SKELETON_TITLE,
    ResponseType,
)
from tabibi.config.prompts import VIZ_SYSTEM_PROMPT, build_chart_prompt
from tabibi.config.settings import Settings
from tabibi.infrastructure.llm import LLMProvider, Message
from tabibi.services.data.fetcher import FetchedData
from tabibi.services.planning.models import Plan
from tabibi.services.viz.fallback import build_manual_chart
from tabibi.services.viz.models import ChartPayload, TablePayload, VisualizationDescriptor
from tabibi.utils.json_parser import JSONParser

logger = logging.getLogger(__name__)

_CHART_MARKERS = ("chart", "رسم")
_TABLE_MARKERS = ("table", "جدول")


def has_chart_keyword(user_message: str) -> bool:
    message = user_message.lower()
    return any(keyword in message for keyword in CHART_KEYWORDS)


class VisualizationService:
    """Decides the visualization kind and prepares its payload."""

    def __init__(self, settings: Settings):
        """Initialize visualization service."""
        self.settings = settings

    def effective_type(self, plan: Plan | None, user_message: str) -> str:
        """
        Response type after the keyword override.

        A text (or missing) plan type becomes ``chart`` when the message
        asks for one; the plan is updated to match.
        """
        response_type = plan.response_type if plan is not None else ""
        if (not response_type or response_type == ResponseType.TEXT.value) and has_chart_keyword(
            user_message
        ):
            logger.info("Chart keywords found in message, switching response type to chart")
            if plan is not None:
                plan.building.response_type = ResponseType.CHART.value
            return ResponseType.CHART.value
        return response_type or ResponseType.TEXT.value

    @staticmethod
    def classify(response_type: str) -> ResponseType:
        """Map a free-form response type onto the kind of payload to build."""
        if not response_type or response_type == ResponseType.TEXT.value:
            return ResponseType.TEXT
        if any(marker in response_type for marker in _CHART_MARKERS):
            return ResponseType.CHART
        if any(marker in response_type for marker in _TABLE_MARKERS):
            return ResponseType.TABLE
        return ResponseType.MIXED

    def build_chart_messages(self, user_message: str, fetched: FetchedData) -> list[Message]:
        return [
            {"role": "system", "content": VIZ_SYSTEM_PROMPT},
            {"role": "user", "content": build_chart_prompt(user_message, fetched.to_dict())},
        ]

    async def chart_with(
        self, provider: LLMProvider, user_message: str, fetched: FetchedData
    ) -> VisualizationDescriptor:
        """
        Ask ``provider`` for a chart payload.

        Provider errors propagate; a reply that is not a JSON object
        degrades to a text descriptor.
        """
        response = await provider.complete(
            self.build_chart_messages(user_message, fetched),
            temperature=self.settings.viz_temperature,
            max_tokens=self.settings.viz_max_tokens,
        )
        chart = JSONParser.extract_json(response, default=None)
        if not isinstance(chart, dict):
            logger.warning("Chart reply from %s is not a JSON object", provider.name)
            return VisualizationDescriptor.text()
        if not ChartPayload.is_valid(chart):
            logger.debug("Chart reply does not fully match the chart shape: %s", chart)
        return VisualizationDescriptor(type=ResponseType.CHART.value, data=chart)

    def manual_chart(self, user_message: str, fetched: FetchedData) -> VisualizationDescriptor:
        """Local chart used when the chart provider failed."""
        try:
            chart = build_manual_chart(user_message, fetched)
        except Exception as e:
            logger.warning("Manual chart creation failed: %s", e)
            chart = None
        if chart is None:
            return VisualizationDescriptor.text()
        return VisualizationDescriptor(type=ResponseType.CHART.value, data=chart)

    @staticmethod
    def table_skeleton() -> VisualizationDescriptor:
        # Rows are not populated from the fetched data yet.
        table = TablePayload(title=TABLE_SKELETON_TITLE, headers=list(TABLE_SKELETON_HEADERS))
        return VisualizationDescriptor(type=ResponseType.TABLE.value, data=table.to_dict())
