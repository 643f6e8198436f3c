"""System prompts for the AI pipeline phases."""

from tabibi.config.prompts.analysis import (
    ANALYSIS_COMPACT_SYSTEM_PROMPT,
    ANALYSIS_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_assistant_system_prompt,
    build_compact_analysis_prompt,
)
from tabibi.config.prompts.building import (
    BUILD_FALLBACK_SYSTEM_PROMPT,
    BUILD_SYSTEM_PROMPT,
    build_response_prompt,
    build_simple_response_prompt,
)
from tabibi.config.prompts.planning import PLANNING_SYSTEM_PROMPT, build_planning_prompt
from tabibi.config.prompts.viz import VIZ_SYSTEM_PROMPT, build_chart_prompt

__all__ = [
    "ANALYSIS_COMPACT_SYSTEM_PROMPT",
    "ANALYSIS_SYSTEM_PROMPT",
    "BUILD_FALLBACK_SYSTEM_PROMPT",
    "BUILD_SYSTEM_PROMPT",
    "PLANNING_SYSTEM_PROMPT",
    "VIZ_SYSTEM_PROMPT",
    "build_analysis_prompt",
    "build_assistant_system_prompt",
    "build_chart_prompt",
    "build_compact_analysis_prompt",
    "build_planning_prompt",
    "build_response_prompt",
    "build_simple_response_prompt",
]
