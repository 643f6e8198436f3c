"""Ordered provider fallback for a single phase."""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from tabibi.config.constants import Phase
from tabibi.infrastructure.llm import LLMProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ProviderAttempt(Generic[T]):
    """One provider and the phase work to run against it."""

    provider: LLMProvider
    run: Callable[[LLMProvider], Awaitable[T]]


class FallbackChain(Generic[T]):
    """
    Try each attempt in order until one returns.

    Any exception counts as a failure of that provider. When every attempt
    failed, the phase's static ``default`` is returned instead. When
    ``should_stop`` turns true the chain gives up without running
    ``default`` and returns ``on_stop()`` if given.
    """

    def __init__(
        self,
        phase: Phase,
        attempts: Sequence[ProviderAttempt[T]],
        default: Callable[[], T],
        *,
        on_failure: Callable[[str, Exception], None] | None = None,
        should_stop: Callable[[], bool] | None = None,
        on_stop: Callable[[], T] | None = None,
    ):
        self.phase = phase
        self.attempts = list(attempts)
        self.default = default
        self.on_failure = on_failure
        self.should_stop = should_stop
        self.on_stop = on_stop
        self.used_provider: str | None = None

    def _stopped(self) -> bool:
        return self.should_stop is not None and self.should_stop()

    async def run(self) -> T:
        for attempt in self.attempts:
            if self._stopped():
                logger.info("%s: stopping before %s", self.phase.value, attempt.provider.name)
                return self._stop_result()
            try:
                result = await attempt.run(attempt.provider)
            except Exception as e:
                logger.warning(
                    "%s: provider %s failed: %s", self.phase.value, attempt.provider.name, e
                )
                if self.on_failure is not None:
                    self.on_failure(attempt.provider.name, e)
                continue
            self.used_provider = attempt.provider.name
            return result

        if self._stopped():
            logger.info("%s: stopped after the last provider", self.phase.value)
            return self._stop_result()
        logger.warning("%s: no provider succeeded, using static default", self.phase.value)
        return self.default()

    def _stop_result(self) -> T:
        if self.on_stop is not None:
            return self.on_stop()
        return self.default()
