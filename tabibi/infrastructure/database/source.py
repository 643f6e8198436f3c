"""Clinic data source contract consumed by the data-fetching phase."""

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

Row = dict[str, Any]


@runtime_checkable
class ClinicDataSource(Protocol):
    """Read-only access to the clinic's data, scoped to the caller's session."""

    async def fetch_aggregate_context(self) -> dict[str, Any]:
        """Return the clinic's aggregate context (clinic row and recent records)."""
        ...

    async def fetch_dashboard_stats(self) -> dict[str, Any]:
        """Return dashboard counters."""
        ...

    async def resolve_session_clinic_id(self) -> str | None:
        """Return the clinic id of the session user, or None."""
        ...

    async def fetch_table_rows(
        self,
        table: str,
        fields: Sequence[str],
        clinic_id: str,
        limit: int,
    ) -> list[Row]:
        """Return up to ``limit`` rows of ``table`` belonging to ``clinic_id``."""
        ...


class DataSourceError(Exception):
    """Raised when the clinic's data cannot be read."""
