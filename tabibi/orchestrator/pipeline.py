"""Main pipeline orchestrator."""

import logging
from collections.abc import Callable, Sequence
from typing import Any

from tabibi.config.constants import (
    ANALYSIS_FALLBACK_TEXT,
    DEFAULT_EMOJI,
    PHASE_EMOJI,
    TERMINAL_PHASES,
    Phase,
    ResponseType,
)
from tabibi.config.prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    BUILD_SYSTEM_PROMPT,
    PLANNING_SYSTEM_PROMPT,
    VIZ_SYSTEM_PROMPT,
)
from tabibi.config.settings import Settings, get_settings
from tabibi.infrastructure.database import ClinicDataSource
from tabibi.infrastructure.llm import ProviderSet, get_shared_providers
from tabibi.infrastructure.logging.session_logger import SessionLogger
from tabibi.orchestrator.fallback import FallbackChain, ProviderAttempt
from tabibi.orchestrator.state import PipelineRunState
from tabibi.orchestrator.step_timer import timed_phase
from tabibi.services.analysis import AnalysisService
from tabibi.services.building import ChunkCallback, ResponseBuilder
from tabibi.services.data import DataFetcher, FetchedData
from tabibi.services.planning import Plan, PlanningService, log_plan
from tabibi.services.thinking import ResolvedQuery, resolve_queries
from tabibi.services.viz import VisualizationDescriptor, VisualizationService

logger = logging.getLogger(__name__)

PhaseCallback = Callable[[Phase], None]
LogCallback = Callable[..., None]


class PipelineAlreadyStartedError(RuntimeError):
    """Raised when ``run`` is called twice on the same pipeline."""


class AIPipeline:
    """
    Six-phase assistant pipeline for one user message.

    Planning, thinking, data fetching, reading, visualization and building
    run strictly in order. Each provider-backed phase walks its own
    fallback chain; ``abort()`` is honoured before every phase and between
    streamed fragments. An instance serves exactly one ``run``.
    """

    def __init__(
        self,
        on_phase_change: PhaseCallback | None = None,
        on_log: LogCallback | None = None,
        *,
        data_source: ClinicDataSource,
        providers: ProviderSet | None = None,
        settings: Settings | None = None,
        session_logger: SessionLogger | None = None,
    ):
        """Initialize the pipeline with its collaborators."""
        self.settings = settings or get_settings()
        self.providers = providers or get_shared_providers(self.settings)
        self.data_source = data_source
        self.on_phase_change = on_phase_change
        self.on_log = on_log

        self.planner = PlanningService(self.settings)
        self.fetcher = DataFetcher(self.settings, data_source)
        self.analyst = AnalysisService(self.settings)
        self.viz = VisualizationService(self.settings)
        self.builder = ResponseBuilder(self.settings)
        self.session_logger = session_logger or SessionLogger(
            base_dir=self.settings.session_log_dir,
            enabled=self.settings.session_logs_enabled,
        )

        self._state = PipelineRunState()

    @property
    def current_phase(self) -> Phase:
        return self._state.current_phase

    @property
    def aborted(self) -> bool:
        return self._state.aborted

    def abort(self) -> None:
        """Request cancellation; safe to call any number of times."""
        if self._state.aborted:
            return
        self._state.aborted = True
        logger.info("Abort requested during %s", self._state.current_phase.value)

    def _log(self, message: str, data: Any = None) -> None:
        emoji = PHASE_EMOJI.get(self._state.current_phase, DEFAULT_EMOJI)
        text = f"{emoji} {message}"
        if data is None:
            logger.info(text)
        else:
            logger.debug("%s %s", text, data)
        if self.on_log is not None:
            self.on_log(text, data)

    def _set_phase(self, phase: Phase) -> None:
        self._state.advance(phase)
        if self.on_phase_change is not None:
            self.on_phase_change(phase)

    def _provider_failed(self, provider: str, error: Exception) -> None:
        self._log(f"Provider {provider} failed, trying the next one", str(error))

    def _chain(
        self,
        phase: Phase,
        attempts: list[ProviderAttempt],
        default: Callable[[], Any],
        on_stop: Callable[[], Any] | None = None,
    ):
        return FallbackChain(
            phase,
            attempts,
            default,
            on_failure=self._provider_failed,
            should_stop=lambda: self._state.aborted,
            on_stop=on_stop,
        )

    def _cancel(self) -> None:
        if self._state.current_phase not in TERMINAL_PHASES:
            self._set_phase(Phase.ERROR)
        self._log("Pipeline cancelled")
        return None

    async def run(
        self,
        user_message: str,
        prior_messages: Sequence[Any] | None = None,
        user: Any = None,
        clinic: Any = None,
        subscription: Any = None,
        on_chunk: ChunkCallback | None = None,
    ) -> str | None:
        """
        Answer ``user_message``.

        Returns the full response text with any ``[CHART:...]`` or
        ``[TABLE:...]`` annotation, or None when the run was aborted.
        Only a failure to fetch the aggregate context is raised.
        """
        if self._state.started:
            raise PipelineAlreadyStartedError("This pipeline has already been run")
        self._state.started = True

        self.session_logger.start_session(user_id=_user_id(user), user_message=user_message)
        self._log("Pipeline started", {"question": user_message, "history": len(prior_messages or [])})

        try:
            response = await self._run_phases(
                user_message, user, clinic, subscription, on_chunk
            )
        except Exception as e:
            logger.error("Pipeline failed: %s", e, exc_info=True)
            if self._state.current_phase not in TERMINAL_PHASES:
                self._set_phase(Phase.ERROR)
            self._log("Pipeline failed", str(e))
            self.session_logger.end_session(success=False, final_message=str(e))
            raise

        self.session_logger.end_session(
            success=response is not None,
            final_message=response if response is not None else "cancelled",
        )
        return response

    async def _run_phases(
        self,
        user_message: str,
        user: Any,
        clinic: Any,
        subscription: Any,
        on_chunk: ChunkCallback | None,
    ) -> str | None:
        if self.aborted:
            return self._cancel()
        await self._planning(user_message)

        if self.aborted:
            return self._cancel()
        queries = self._thinking()

        if self.aborted:
            return self._cancel()
        await self._data_fetching(queries)

        if self.aborted:
            return self._cancel()
        await self._reading(user_message, user, clinic, subscription)

        if self.aborted:
            return self._cancel()
        descriptor = await self._visualization(user_message)

        if self.aborted:
            return self._cancel()
        response = await self._building(user_message, descriptor, on_chunk)

        if self.aborted:
            return self._cancel()
        return response

    async def _planning(self, user_message: str) -> Plan:
        """Phase 1: structured plan from the fast provider, then the deep one."""
        self._set_phase(Phase.PLANNING)
        self._log("Planning the answer")

        async def plan_with(provider):
            return await self.planner.plan_with(provider, user_message)

        async with timed_phase(Phase.PLANNING, self.session_logger) as ctx:
            chain = self._chain(
                Phase.PLANNING,
                [
                    ProviderAttempt(self.providers.fast, plan_with),
                    ProviderAttempt(self.providers.deep, plan_with),
                ],
                lambda: Plan.default(user_message),
            )
            plan = await chain.run()
            ctx.set_result(
                plan.to_dict(),
                provider=chain.used_provider,
                input_text=user_message,
                system_prompt=PLANNING_SYSTEM_PROMPT,
            )

        log_plan(plan)
        self._state.plan = plan
        self._log("Plan ready", plan.to_dict())
        return plan

    def _thinking(self) -> list[ResolvedQuery] | None:
        """Phase 2: map planner tables onto physical tables; never raises."""
        self._set_phase(Phase.THINKING)
        self._log("Resolving the tables to query")
        try:
            queries = resolve_queries(self._state.plan) if self._state.plan else None
        except Exception as e:
            logger.warning("Could not resolve queries: %s", e, exc_info=True)
            queries = None

        self._state.resolved_queries = queries
        if queries is None:
            self._log("No specific tables requested")
        else:
            self._log("Queries resolved", [q.to_dict() for q in queries])
        return queries

    async def _data_fetching(self, queries: list[ResolvedQuery] | None) -> FetchedData:
        """Phase 3: context, stats and per-table rows. Context failures propagate."""
        self._set_phase(Phase.DATA_FETCHING)
        self._log("Fetching clinic data")

        async with timed_phase(Phase.DATA_FETCHING, self.session_logger) as ctx:
            fetched = await self.fetcher.fetch(queries, log=self._log)
            ctx.set_result({"specific": sorted(fetched.specific), "stats": fetched.stats})

        self._state.fetched_data = fetched
        self._log("Data fetched", {"tables": list(fetched.specific)})
        return fetched

    async def _reading(self, user_message: str, user: Any, clinic: Any, subscription: Any) -> str:
        """Phase 4: analysis from the deep provider, then the fast one, then a static note."""
        self._set_phase(Phase.READING)
        self._log("Analysing the data")
        fetched = self._state.fetched_data
        plan = self._state.plan or Plan.default(user_message)

        async def analyze(provider):
            return await self.analyst.analyze_with(
                provider, user_message, fetched, plan, user, clinic, subscription
            )

        async def analyze_compact(provider):
            return await self.analyst.analyze_compact_with(provider, fetched)

        async with timed_phase(Phase.READING, self.session_logger) as ctx:
            chain = self._chain(
                Phase.READING,
                [
                    ProviderAttempt(self.providers.deep, analyze),
                    ProviderAttempt(self.providers.fast, analyze_compact),
                ],
                lambda: ANALYSIS_FALLBACK_TEXT,
            )
            analysis = await chain.run()
            ctx.set_result(
                analysis,
                provider=chain.used_provider,
                input_text=user_message,
                system_prompt=ANALYSIS_SYSTEM_PROMPT,
            )

        self._state.analysis_result = analysis
        self._log("Analysis ready", {"length": len(analysis)})
        return analysis

    async def _visualization(self, user_message: str) -> VisualizationDescriptor:
        """Phase 5: decide on a chart or table; every failure degrades to text."""
        self._set_phase(Phase.VISUALIZATION)
        self._log("Preparing visuals")

        async with timed_phase(Phase.VISUALIZATION, self.session_logger) as ctx:
            try:
                descriptor = await self._describe_visual(user_message)
            except Exception as e:
                logger.warning("Visualization failed: %s", e, exc_info=True)
                descriptor = VisualizationDescriptor.text()
            ctx.set_result(descriptor.to_dict(), system_prompt=VIZ_SYSTEM_PROMPT)

        self._state.visualization = descriptor
        self._log("Visualization ready", descriptor.to_dict())
        return descriptor

    async def _describe_visual(self, user_message: str) -> VisualizationDescriptor:
        response_type = self.viz.effective_type(self._state.plan, user_message)
        kind = self.viz.classify(response_type)
        fetched = self._state.fetched_data

        if kind == ResponseType.TEXT or fetched is None:
            self._log("No visuals needed")
            return VisualizationDescriptor.text()

        if kind == ResponseType.CHART:

            async def chart_with(provider):
                return await self.viz.chart_with(provider, user_message, fetched)

            chain = self._chain(
                Phase.VISUALIZATION,
                [ProviderAttempt(self.providers.fast, chart_with)],
                lambda: self.viz.manual_chart(user_message, fetched),
            )
            return await chain.run()

        if kind == ResponseType.TABLE:
            return self.viz.table_skeleton()

        return VisualizationDescriptor(type=ResponseType.MIXED.value)

    async def _building(
        self,
        user_message: str,
        descriptor: VisualizationDescriptor,
        on_chunk: ChunkCallback | None,
    ) -> str:
        """Phase 6: stream the answer, falling back to the deep provider, then a template."""
        self._set_phase(Phase.BUILDING)
        self._log("Writing the answer")
        analysis = self._state.analysis_result
        emit = on_chunk or _discard_chunk

        def is_aborted() -> bool:
            return self._state.aborted

        async def build(provider):
            return await self.builder.build_with(
                provider, user_message, analysis, descriptor, on_chunk=emit, is_aborted=is_aborted
            )

        async def build_simple(provider):
            return await self.builder.build_simple_with(
                provider, user_message, analysis, descriptor, on_chunk=emit, is_aborted=is_aborted
            )

        async with timed_phase(Phase.BUILDING, self.session_logger) as ctx:
            chain = self._chain(
                Phase.BUILDING,
                [
                    ProviderAttempt(self.providers.build, build),
                    ProviderAttempt(self.providers.deep, build_simple),
                ],
                lambda: self.builder.static_response(analysis, descriptor, emit),
                on_stop=lambda: "",
            )
            response = await chain.run()
            ctx.set_result(
                response,
                provider=chain.used_provider,
                input_text=user_message,
                system_prompt=BUILD_SYSTEM_PROMPT,
            )

        self._log("Answer ready", {"length": len(response)})
        if not self.aborted:
            self._set_phase(Phase.COMPLETE)
        return response


def _discard_chunk(fragment: str, accumulated: str) -> None:
    return None


def _user_id(user: Any) -> str:
    if isinstance(user, dict):
        for key in ("id", "user_id", "email"):
            if user.get(key):
                return str(user[key])
    return "anonymous"


def create_pipeline(
    on_phase_change: PhaseCallback | None = None,
    on_log: LogCallback | None = None,
    **kwargs: Any,
) -> AIPipeline:
    """Create a fresh single-use pipeline."""
    return AIPipeline(on_phase_change, on_log, **kwargs)
