"""Thinking service: resolves planner tables into queries."""

from tabibi.services.thinking.resolver import (
    ALL_FIELDS,
    ResolvedQuery,
    resolve_queries,
    resolve_table_name,
)

__all__ = ["ALL_FIELDS", "ResolvedQuery", "resolve_queries", "resolve_table_name"]
