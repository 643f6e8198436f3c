"""Data fetching service."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from tabibi.config.settings import Settings
from tabibi.infrastructure.database import ClinicDataSource, Row
from tabibi.services.thinking.resolver import ResolvedQuery

logger = logging.getLogger(__name__)

LogFn = Callable[..., None]


@dataclass(frozen=True)
class FetchedData:
    """Everything gathered for one run: aggregate context, stats and per-table rows."""

    context: Any
    stats: dict[str, Any] | None = None
    specific: dict[str, list[Row] | None] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"context": self.context, "stats": self.stats, "specific": self.specific}

    @property
    def appointments(self) -> list[Row]:
        if isinstance(self.context, dict):
            appointments = self.context.get("appointments")
            if isinstance(appointments, list):
                return appointments
        return []


def _noop_log(message: str, data: Any = None) -> None:
    return None


class DataFetcher:
    """Fetches the context bundle, dashboard stats and the planner's tables."""

    def __init__(self, settings: Settings, data_source: ClinicDataSource):
        """Initialize data fetcher."""
        self.settings = settings
        self.data_source = data_source

    async def fetch(
        self,
        queries: Sequence[ResolvedQuery] | None,
        log: LogFn = _noop_log,
    ) -> FetchedData:
        """
        Gather the bundle for one run.

        Only a failure of the aggregate context propagates. Stats failures
        become None and a failing table is skipped without touching the
        others.
        """
        context = await self.data_source.fetch_aggregate_context()
        log("Aggregate context fetched")

        try:
            stats = await self.data_source.fetch_dashboard_stats()
        except Exception as e:
            logger.warning("Dashboard stats unavailable: %s", e)
            stats = None
        log("Dashboard stats fetched", {"available": stats is not None})

        specific: dict[str, list[Row] | None] = {}
        if queries:
            clinic_id = await self._resolve_clinic_id()
            if clinic_id is None:
                log("No clinic for this session, skipping table queries")
            else:
                for query in queries:
                    rows = await self._fetch_one(query, clinic_id, log)
                    if rows is not _FAILED:
                        specific[query.table] = rows

        return FetchedData(context=context, stats=stats, specific=specific)

    async def _resolve_clinic_id(self) -> str | None:
        try:
            return await self.data_source.resolve_session_clinic_id()
        except Exception as e:
            logger.warning("Could not resolve session clinic: %s", e)
            return None

    async def _fetch_one(self, query: ResolvedQuery, clinic_id: str, log: LogFn) -> Any:
        try:
            rows = await self.data_source.fetch_table_rows(
                query.table,
                query.fields,
                clinic_id,
                self.settings.specific_row_limit,
            )
        except Exception as e:
            logger.warning("Fetching %s failed: %s", query.table, e)
            log(f"Fetching {query.table} failed", str(e))
            return _FAILED
        log(f"Fetched {query.table}", {"count": len(rows or [])})
        return rows


_FAILED = object()
