"""Async context manager for timing and logging pipeline phases."""

import json
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from tabibi.config.constants import Phase, log_pipeline_phase
from tabibi.infrastructure.logging.logger import StructuredLogger
from tabibi.infrastructure.logging.session_logger import SessionLogger

_structured = StructuredLogger(__name__)


class PhaseContext:
    """Mutable context for a timed pipeline phase."""

    def __init__(self) -> None:
        self.result: Any = None
        self.provider: str | None = None
        self.input_text: str | None = None
        self.system_prompt: str | None = None

    def set_result(
        self,
        result: Any,
        *,
        provider: str | None = None,
        input_text: str | None = None,
        system_prompt: str | None = None,
    ) -> None:
        self.result = result
        if provider is not None:
            self.provider = provider
        if input_text is not None:
            self.input_text = input_text
        if system_prompt is not None:
            self.system_prompt = system_prompt


def _raw(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False, default=str)


@asynccontextmanager
async def timed_phase(
    phase: Phase,
    session_logger: SessionLogger,
) -> AsyncGenerator[PhaseContext, None]:
    """Time a pipeline phase, then report it to the structured and session logs."""
    log_pipeline_phase(phase)
    ctx = PhaseContext()
    start = time.perf_counter()
    try:
        yield ctx
    except Exception as e:
        _structured.log_error(phase.value, e, {"provider": ctx.provider})
        raise
    elapsed_ms = (time.perf_counter() - start) * 1000
    _structured.log_step(
        phase.value,
        {"provider": ctx.provider, "has_result": ctx.result is not None},
        duration_ms=elapsed_ms,
    )
    if ctx.result is not None:
        session_logger.log_phase_output(
            phase_name=phase.value,
            raw_response=_raw(ctx.result),
            parsed_response=None if isinstance(ctx.result, str) else ctx.result,
            input_text=ctx.input_text,
            system_prompt=ctx.system_prompt,
            execution_time_ms=elapsed_ms,
            provider=ctx.provider,
        )
