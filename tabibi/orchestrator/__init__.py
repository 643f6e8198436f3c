"""Pipeline orchestration."""

from tabibi.orchestrator.fallback import FallbackChain, ProviderAttempt
from tabibi.orchestrator.pipeline import (
    AIPipeline,
    PipelineAlreadyStartedError,
    create_pipeline,
)
from tabibi.orchestrator.state import InvalidPhaseTransitionError, PipelineRunState

__all__ = [
    "AIPipeline",
    "FallbackChain",
    "InvalidPhaseTransitionError",
    "PipelineAlreadyStartedError",
    "PipelineRunState",
    "ProviderAttempt",
    "create_pipeline",
]
