"""Tests for the provider fallback chain."""

import pytest

from tabibi.config.constants import Phase
from tabibi.orchestrator.fallback import FallbackChain, ProviderAttempt


async def _complete(provider):
    return await provider.complete([], temperature=0, max_tokens=1)


@pytest.mark.asyncio
async def test_first_success_wins(make_provider):
    first = make_provider("first", replies=["one"])
    second = make_provider("second", replies=["two"])
    chain = FallbackChain(
        Phase.READING,
        [ProviderAttempt(first, _complete), ProviderAttempt(second, _complete)],
        lambda: "default",
    )

    assert await chain.run() == "one"
    assert chain.used_provider == "first"
    assert second.calls == 0


@pytest.mark.asyncio
async def test_falls_through_to_next_provider(make_provider):
    first = make_provider("first", fail=True)
    second = make_provider("second", replies=["two"])
    failures = []
    chain = FallbackChain(
        Phase.READING,
        [ProviderAttempt(first, _complete), ProviderAttempt(second, _complete)],
        lambda: "default",
        on_failure=lambda name, error: failures.append(name),
    )

    assert await chain.run() == "two"
    assert failures == ["first"]
    assert chain.used_provider == "second"


@pytest.mark.asyncio
async def test_exhausted_chain_returns_default(make_provider):
    chain = FallbackChain(
        Phase.PLANNING,
        [ProviderAttempt(make_provider("a", fail=True), _complete)],
        lambda: "default",
    )

    assert await chain.run() == "default"
    assert chain.used_provider is None


@pytest.mark.asyncio
async def test_should_stop_skips_remaining_attempts(make_provider):
    first = make_provider("first", fail=True)
    second = make_provider("second", replies=["two"])
    stopped = []

    def on_failure(name, error):
        stopped.append(name)

    chain = FallbackChain(
        Phase.BUILDING,
        [ProviderAttempt(first, _complete), ProviderAttempt(second, _complete)],
        lambda: "default",
        on_failure=on_failure,
        should_stop=lambda: bool(stopped),
    )

    assert await chain.run() == "default"
    assert second.calls == 0


@pytest.mark.asyncio
async def test_stopped_chain_skips_default(make_provider):
    defaults = []
    first = make_provider("first", fail=True)
    failures = []

    def default():
        defaults.append("called")
        return "default"

    chain = FallbackChain(
        Phase.BUILDING,
        [ProviderAttempt(first, _complete)],
        default,
        on_failure=lambda name, error: failures.append(name),
        should_stop=lambda: bool(failures),
        on_stop=lambda: "",
    )

    assert await chain.run() == ""
    assert defaults == []
    assert chain.used_provider is None
