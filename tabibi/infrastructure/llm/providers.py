"""
Text-generation provider adapters.

Every adapter exposes the same two capabilities: ``complete`` returns the
whole reply, ``stream`` yields text fragments as they arrive. Adapters do
not retry or fall back; provider and network errors surface unchanged so
the orchestrator can decide what to try next.
"""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol, runtime_checkable

import httpx
from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

Message = dict[str, str]

_SSE_PREFIX = "data: "
_SSE_DONE = "[DONE]"


@runtime_checkable
class LLMProvider(Protocol):
    """Uniform surface of a chat-completion provider."""

    name: str

    async def complete(
        self, messages: list[Message], *, temperature: float, max_tokens: int
    ) -> str: ...

    def stream(
        self, messages: list[Message], *, temperature: float, max_tokens: int
    ) -> AsyncIterator[str]: ...

    async def aclose(self) -> None: ...


class OpenAICompatibleProvider:
    """Provider backed by an OpenAI-compatible chat completions API."""

    def __init__(
        self,
        name: str,
        client: AsyncOpenAI,
        model: str,
        max_tokens_param: str = "max_tokens",
    ) -> None:
        self.name = name
        self.client = client
        self.model = model
        self.max_tokens_param = max_tokens_param

    def _request_kwargs(
        self, messages: list[Message], temperature: float, max_tokens: int
    ) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            self.max_tokens_param: max_tokens,
        }

    async def complete(
        self, messages: list[Message], *, temperature: float, max_tokens: int
    ) -> str:
        """Return the full reply text."""
        response = await self.client.chat.completions.create(
            **self._request_kwargs(messages, temperature, max_tokens)
        )
        content = response.choices[0].message.content or ""
        logger.debug("%s completion received (%d chars)", self.name, len(content))
        return content

    async def stream(
        self, messages: list[Message], *, temperature: float, max_tokens: int
    ) -> AsyncIterator[str]:
        """Yield reply fragments; closing the generator closes the HTTP stream."""
        response = await self.client.chat.completions.create(
            **self._request_kwargs(messages, temperature, max_tokens),
            stream=True,
        )
        try:
            async for chunk in response:
                if not chunk.choices:
                    continue
                text = chunk.choices[0].delta.content
                if text:
                    yield text
        finally:
            await response.close()

    async def aclose(self) -> None:
        await self.client.close()


class OpenRouterProvider:
    """Provider that talks to the OpenRouter chat completions endpoint over raw HTTP."""

    def __init__(
        self,
        name: str,
        api_url: str,
        api_key: str | None,
        model: str,
        *,
        referer: str = "",
        title: str = "",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ) -> None:
        self.name = name
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.referer = referer
        self.title = title
        self.http_client = http_client or httpx.AsyncClient(timeout=timeout)

    def _headers(self, streaming: bool = False) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key or ''}",
            "Content-Type": "application/json",
        }
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        if self.title:
            headers["X-Title"] = self.title
        if streaming:
            headers["Accept"] = "text/event-stream"
        return headers

    def _body(
        self, messages: list[Message], temperature: float, max_tokens: int, streaming: bool
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if streaming:
            body["stream"] = True
        return body

    async def complete(
        self, messages: list[Message], *, temperature: float, max_tokens: int
    ) -> str:
        """Return the full reply text."""
        response = await self.http_client.post(
            self.api_url,
            headers=self._headers(),
            json=self._body(messages, temperature, max_tokens, streaming=False),
        )
        response.raise_for_status()
        data = response.json()
        return data["choices"][0]["message"]["content"] or ""

    async def stream(
        self, messages: list[Message], *, temperature: float, max_tokens: int
    ) -> AsyncIterator[str]:
        """Yield reply fragments parsed from the server-sent event stream."""
        async with self.http_client.stream(
            "POST",
            self.api_url,
            headers=self._headers(streaming=True),
            json=self._body(messages, temperature, max_tokens, streaming=True),
        ) as response:
            if response.is_error:
                await response.aread()
                response.raise_for_status()
            async for line in response.aiter_lines():
                text = parse_sse_line(line)
                if text:
                    yield text

    async def aclose(self) -> None:
        await self.http_client.aclose()


def parse_sse_line(line: str) -> str | None:
    """Return the delta text carried by one SSE line, or None.

    Lines without the ``data: `` prefix, the ``[DONE]`` marker and payloads
    that are not valid JSON are skipped.
    """
    if not line.startswith(_SSE_PREFIX) or _SSE_DONE in line:
        return None
    try:
        payload = json.loads(line[len(_SSE_PREFIX):])
    except json.JSONDecodeError:
        return None
    try:
        return payload["choices"][0]["delta"].get("content") or None
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
