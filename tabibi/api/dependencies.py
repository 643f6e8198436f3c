"""FastAPI dependencies."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from fastapi import Depends, Header

from tabibi.config.settings import Settings, get_settings
from tabibi.infrastructure.database import ClinicDataSource, SupabaseDataSource
from tabibi.infrastructure.llm import ProviderSet, get_shared_providers

DataSourceFactory = Callable[[], AbstractAsyncContextManager[ClinicDataSource]]

_BEARER_PREFIX = "bearer "


def get_access_token(authorization: str | None = Header(None)) -> str | None:
    """Extract the caller's Supabase access token from the Authorization header."""
    if not authorization:
        return None
    if authorization.lower().startswith(_BEARER_PREFIX):
        return authorization[len(_BEARER_PREFIX):].strip() or None
    return authorization.strip() or None


def get_data_source_factory(
    settings: Settings = Depends(get_settings),
    access_token: str | None = Depends(get_access_token),
) -> DataSourceFactory:
    """Per-request data source, opened by the endpoint for as long as the run lasts."""

    def open_data_source() -> SupabaseDataSource:
        return SupabaseDataSource(settings, access_token=access_token)

    return open_data_source


def get_providers(settings: Settings = Depends(get_settings)) -> ProviderSet:
    """Process-wide provider clients."""
    return get_shared_providers(settings)
