"""Pytest configuration and fixtures."""

from collections.abc import AsyncIterator
from typing import Any

import pytest

from tabibi.config.settings import Settings
from tabibi.infrastructure.llm import ProviderSet


class ProviderDown(Exception):
    """Raised by fake providers configured to fail."""


class FakeProvider:
    """In-memory provider recording every call."""

    def __init__(
        self,
        name: str,
        replies: list[str] | None = None,
        fragments: list[str] | None = None,
        fail: bool = False,
    ):
        self.name = name
        self.replies = list(replies or [])
        self.fragments = list(fragments or [])
        self.fail = fail
        self.complete_calls: list[dict[str, Any]] = []
        self.stream_calls: list[dict[str, Any]] = []
        self.closed = False

    @property
    def calls(self) -> int:
        return len(self.complete_calls) + len(self.stream_calls)

    async def complete(self, messages, *, temperature, max_tokens) -> str:
        self.complete_calls.append(
            {"messages": messages, "temperature": temperature, "max_tokens": max_tokens}
        )
        if self.fail:
            raise ProviderDown(f"{self.name} is down")
        return self.replies.pop(0) if self.replies else ""

    async def stream(self, messages, *, temperature, max_tokens) -> AsyncIterator[str]:
        self.stream_calls.append(
            {"messages": messages, "temperature": temperature, "max_tokens": max_tokens}
        )
        if self.fail:
            raise ProviderDown(f"{self.name} is down")
        for fragment in self.fragments:
            yield fragment

    async def aclose(self) -> None:
        self.closed = True


class FakeDataSource:
    """Clinic data source backed by dictionaries."""

    def __init__(
        self,
        context: Any = None,
        stats: dict[str, Any] | None = None,
        tables: dict[str, list[dict[str, Any]]] | None = None,
        clinic_id: str | None = "clinic-1",
        context_error: Exception | None = None,
        stats_error: Exception | None = None,
        failing_tables: tuple[str, ...] = (),
    ):
        self.context = context if context is not None else {"clinic": {"id": "clinic-1"}}
        self.stats = stats
        self.tables = tables or {}
        self.clinic_id = clinic_id
        self.context_error = context_error
        self.stats_error = stats_error
        self.failing_tables = failing_tables
        self.table_calls: list[tuple[str, list[str], str, int]] = []

    async def fetch_aggregate_context(self):
        if self.context_error:
            raise self.context_error
        return self.context

    async def fetch_dashboard_stats(self):
        if self.stats_error:
            raise self.stats_error
        return self.stats

    async def resolve_session_clinic_id(self):
        return self.clinic_id

    async def fetch_table_rows(self, table, fields, clinic_id, limit):
        self.table_calls.append((table, list(fields), clinic_id, limit))
        if table in self.failing_tables:
            raise ConnectionError(f"{table} unavailable")
        return self.tables.get(table, [])


@pytest.fixture
def settings():
    """Provide settings fixture."""
    return Settings(session_logs_enabled=False)


@pytest.fixture
def fast():
    return FakeProvider("fast")


@pytest.fixture
def deep():
    return FakeProvider("deep")


@pytest.fixture
def build():
    return FakeProvider("build")


@pytest.fixture
def providers(fast, deep, build):
    return ProviderSet(fast=fast, deep=deep, build=build)


@pytest.fixture
def data_source():
    return FakeDataSource(
        context={"clinic": {"id": "clinic-1"}, "appointments": []},
        stats={
            "totalPatients": 12,
            "totalAppointments": 30,
            "confirmedAppointments": 20,
            "pendingAppointments": 10,
        },
    )


@pytest.fixture
def make_provider():
    """Factory for fake providers with custom replies."""
    return FakeProvider


@pytest.fixture
def make_data_source():
    """Factory for fake data sources with custom contents."""
    return FakeDataSource
