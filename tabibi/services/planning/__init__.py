"""Planning service."""

from tabibi.services.planning.models import BuildingSpec, DataRequirements, Plan
from tabibi.services.planning.planner import PlanningService, log_plan

__all__ = ["BuildingSpec", "DataRequirements", "Plan", "PlanningService", "log_plan"]
