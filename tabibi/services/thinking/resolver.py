"""Maps planner table names onto physical tables."""

from dataclasses import dataclass, field
from typing import Any

from tabibi.config.constants import TABLE_NAME_MAPPING
from tabibi.services.planning.models import Plan

ALL_FIELDS = "*"


@dataclass(frozen=True)
class ResolvedQuery:
    """One planner table mapped to a physical table plus its field list."""

    table: str
    original_name: str
    fields: list[str] = field(default_factory=lambda: [ALL_FIELDS])

    def to_dict(self) -> dict[str, Any]:
        return {"table": self.table, "originalName": self.original_name, "fields": list(self.fields)}


def resolve_table_name(name: str) -> str:
    """Return the physical table for a planner name; unknown names pass through."""
    return TABLE_NAME_MAPPING.get(name.lower(), name)


def resolve_queries(plan: Plan) -> list[ResolvedQuery] | None:
    """Build one query per requested table, or None when the plan names no tables."""
    tables = plan.data.tables
    if not tables:
        return None
    fields = list(plan.data.fields) or [ALL_FIELDS]
    return [
        ResolvedQuery(table=resolve_table_name(name), original_name=name, fields=fields)
        for name in tables
    ]
