"""Supabase-backed clinic data source (PostgREST and auth over HTTP)."""

import logging
from collections.abc import Sequence
from types import TracebackType
from typing import Any

import httpx

from tabibi.config.settings import Settings
from tabibi.infrastructure.database.source import DataSourceError, Row

logger = logging.getLogger(__name__)


def parse_content_range(value: str | None) -> int:
    """Return the total from a PostgREST ``Content-Range`` header (``0-24/3573``, ``*/0``)."""
    if not value or "/" not in value:
        return 0
    total = value.rsplit("/", 1)[1]
    try:
        return int(total)
    except ValueError:
        return 0


class SupabaseDataSource:
    """
    Reads clinic data through the Supabase REST API on behalf of one user.

    The caller's access token scopes every request (row-level security
    applies); without a token requests run with the anon key and no clinic
    can be resolved.
    """

    def __init__(
        self,
        settings: Settings,
        access_token: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.access_token = access_token
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            base_url=settings.supabase_url.rstrip("/"),
            timeout=settings.supabase_timeout,
        )
        self._clinic_id: str | None = None
        self._clinic_resolved = False

    async def __aenter__(self) -> "SupabaseDataSource":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.settings.supabase_anon_key,
            "Authorization": f"Bearer {self.access_token or self.settings.supabase_anon_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _select(
        self,
        table: str,
        *,
        select: str = "*",
        filters: dict[str, str] | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        params: dict[str, str] = {"select": select}
        if filters:
            params.update(filters)
        if limit is not None:
            params["limit"] = str(limit)
        response = await self.http_client.get(
            f"/rest/v1/{table}", params=params, headers=self._headers()
        )
        response.raise_for_status()
        return response.json()

    async def _count(self, table: str, filters: dict[str, str]) -> int:
        response = await self.http_client.head(
            f"/rest/v1/{table}",
            params={"select": "*", **filters},
            headers=self._headers({"Prefer": "count=exact"}),
        )
        response.raise_for_status()
        return parse_content_range(response.headers.get("content-range"))

    async def resolve_session_clinic_id(self) -> str | None:
        """Return the clinic of the token's user; cached for the source's lifetime."""
        if self._clinic_resolved:
            return self._clinic_id
        if not self.access_token:
            logger.info("No access token, clinic cannot be resolved")
            self._clinic_resolved = True
            return None

        response = await self.http_client.get("/auth/v1/user", headers=self._headers())
        response.raise_for_status()
        user_id = response.json().get("id")

        rows = await self._select(
            "users", select="clinic_id", filters={"user_id": f"eq.{user_id}"}, limit=1
        )
        self._clinic_id = rows[0].get("clinic_id") if rows else None
        self._clinic_resolved = True
        logger.debug("Session clinic resolved: %s", self._clinic_id)
        return self._clinic_id

    async def _require_clinic_id(self) -> str:
        clinic_id = await self.resolve_session_clinic_id()
        if not clinic_id:
            raise DataSourceError("No clinic associated with the current session")
        return clinic_id

    async def fetch_aggregate_context(self) -> dict[str, Any]:
        """Return the clinic row plus the latest rows of each context table."""
        clinic_id = await self._require_clinic_id()
        clinic_filter = {"clinic_id": f"eq.{clinic_id}"}

        clinics = await self._select("clinics", filters=clinic_filter, limit=1)
        context: dict[str, Any] = {"clinic": clinics[0] if clinics else None}
        for table in self.settings.context_tables:
            context[table] = await self._select(
                table, filters=clinic_filter, limit=self.settings.context_row_limit
            )
        logger.debug(
            "Aggregate context fetched: %s",
            {table: len(context[table]) for table in self.settings.context_tables},
        )
        return context

    async def fetch_dashboard_stats(self) -> dict[str, Any]:
        """Return exact patient and appointment counters for the dashboard."""
        clinic_id = await self._require_clinic_id()
        clinic_filter = {"clinic_id": f"eq.{clinic_id}"}
        return {
            "totalPatients": await self._count("patients", clinic_filter),
            "totalAppointments": await self._count("appointments", clinic_filter),
            "confirmedAppointments": await self._count(
                "appointments", {**clinic_filter, "status": "eq.confirmed"}
            ),
            "pendingAppointments": await self._count(
                "appointments", {**clinic_filter, "status": "eq.pending"}
            ),
        }

    async def fetch_table_rows(
        self,
        table: str,
        fields: Sequence[str],
        clinic_id: str,
        limit: int,
    ) -> list[Row]:
        """Return up to ``limit`` rows of ``table`` for ``clinic_id``."""
        return await self._select(
            table,
            select=",".join(fields) or "*",
            filters={"clinic_id": f"eq.{clinic_id}"},
            limit=limit,
        )
