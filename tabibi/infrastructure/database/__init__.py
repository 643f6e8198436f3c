"""Clinic data access."""

from tabibi.infrastructure.database.source import ClinicDataSource, DataSourceError, Row
from tabibi.infrastructure.database.supabase import SupabaseDataSource, parse_content_range

__all__ = [
    "ClinicDataSource",
    "DataSourceError",
    "Row",
    "SupabaseDataSource",
    "parse_content_range",
]
