"""Planning service: turns a user message into a structured todo list."""

import logging

from pydantic import ValidationError

from tabibi.config.prompts import PLANNING_SYSTEM_PROMPT, build_planning_prompt
from tabibi.config.settings import Settings
from tabibi.infrastructure.llm import LLMProvider, Message
from tabibi.services.planning.models import Plan
from tabibi.utils.json_parser import JSONParser

logger = logging.getLogger(__name__)


class PlanningService:
    """Asks a provider for a plan and parses it, never failing on bad JSON."""

    def __init__(self, settings: Settings):
        """Initialize planning service."""
        self.settings = settings

    def build_messages(self, user_message: str) -> list[Message]:
        return [
            {"role": "system", "content": PLANNING_SYSTEM_PROMPT},
            {"role": "user", "content": build_planning_prompt(user_message)},
        ]

    async def plan_with(self, provider: LLMProvider, user_message: str) -> Plan:
        """
        Request a plan from ``provider``.

        Provider errors propagate so the caller can try the next provider;
        an unparseable reply yields the default plan.
        """
        response = await provider.complete(
            self.build_messages(user_message),
            temperature=self.settings.planning_temperature,
            max_tokens=self.settings.planning_max_tokens,
        )
        return self.parse_plan(response, user_message)

    @staticmethod
    def parse_plan(text: str, user_message: str) -> Plan:
        """Parse a provider reply into a Plan, falling back to the default plan."""
        data = JSONParser.extract_json(text, default=None)
        if not isinstance(data, dict):
            logger.warning("Planner reply is not a JSON object, using default plan")
            return Plan.default(user_message)
        try:
            return Plan.model_validate(data)
        except ValidationError as e:
            logger.warning("Planner reply does not match the plan shape: %s", e)
            return Plan.default(user_message)


def log_plan(plan: Plan) -> None:
    """Debug-log every section of a plan."""
    logger.debug("Plan requests: %s", plan.requests)
    logger.debug("Plan data: %s", plan.data.model_dump())
    logger.debug("Plan actions: %s", plan.actions)
    logger.debug("Plan building: %s", plan.building.model_dump(by_alias=True))
    logger.debug(
        "Plan response type: %s, chart type: %s",
        plan.building.response_type,
        plan.building.chart_type,
    )
