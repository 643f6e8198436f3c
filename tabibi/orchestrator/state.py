"""Pipeline run state model."""

from dataclasses import dataclass
from typing import Optional

from tabibi.config.constants import PHASE_ORDER, TERMINAL_PHASES, Phase
from tabibi.services.data.fetcher import FetchedData
from tabibi.services.planning.models import Plan
from tabibi.services.thinking.resolver import ResolvedQuery
from tabibi.services.viz.models import VisualizationDescriptor


class InvalidPhaseTransitionError(RuntimeError):
    """Raised when a run tries to move backwards or leave a terminal phase."""


@dataclass
class PipelineRunState:
    """State owned by exactly one pipeline run."""

    current_phase: Phase = Phase.IDLE

    # Step 1: Planning
    plan: Optional[Plan] = None

    # Step 2: Thinking
    resolved_queries: Optional[list[ResolvedQuery]] = None

    # Step 3: Data fetching
    fetched_data: Optional[FetchedData] = None

    # Step 4: Reading
    analysis_result: Optional[str] = None

    # Step 5: Visualization
    visualization: Optional[VisualizationDescriptor] = None

    aborted: bool = False
    started: bool = False

    def advance(self, phase: Phase) -> None:
        """Move to ``phase``; only forward moves or a move to ``error`` are allowed."""
        current = self.current_phase
        if current in TERMINAL_PHASES:
            raise InvalidPhaseTransitionError(f"Run already ended in {current.value}")
        if phase != Phase.ERROR and PHASE_ORDER.index(phase) <= PHASE_ORDER.index(current):
            raise InvalidPhaseTransitionError(
                f"Cannot move from {current.value} to {phase.value}"
            )
        self.current_phase = phase
