"""Tests for the provider adapters."""

import json

import httpx
import pytest
from openai import AsyncOpenAI

from tabibi.infrastructure.llm import (
    OpenAICompatibleProvider,
    OpenRouterProvider,
    build_providers,
    parse_sse_line,
)

MESSAGES = [{"role": "user", "content": "سلام"}]


def _chunk(text):
    return {
        "id": "c1",
        "object": "chat.completion.chunk",
        "created": 0,
        "model": "m",
        "choices": [{"index": 0, "delta": {"content": text}, "finish_reason": None}],
    }


def _sse_body(*events):
    lines = [f"data: {json.dumps(event, ensure_ascii=False)}\n\n" for event in events]
    return ("".join(lines) + "data: [DONE]\n\n").encode()


# ==========================================
#  SSE line parsing
# ==========================================


def test_parse_sse_line_content():
    assert parse_sse_line("data: " + json.dumps(_chunk("أهلا"))) == "أهلا"


@pytest.mark.parametrize(
    "line",
    [
        "",
        ": keep-alive",
        "event: message",
        "data: [DONE]",
        "data: {not json",
        'data: {"choices": []}',
        'data: {"choices": [{"delta": {}}]}',
        'data: {"choices": [{"delta": {"content": null}}]}',
    ],
)
def test_parse_sse_line_skips(line):
    assert parse_sse_line(line) is None


# ==========================================
#  OpenAI-compatible adapter
# ==========================================


def _openai_provider(handler, max_tokens_param="max_completion_tokens"):
    client = AsyncOpenAI(
        api_key="test",
        base_url="https://llm.test/v1",
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    return OpenAICompatibleProvider("cerebras", client, "llama", max_tokens_param)


@pytest.mark.asyncio
async def test_openai_complete_sends_token_param():
    seen = {}

    def handler(request):
        seen.update(json.loads(request.content))
        return httpx.Response(
            200,
            json={
                "id": "x",
                "object": "chat.completion",
                "created": 0,
                "model": "llama",
                "choices": [
                    {
                        "index": 0,
                        "message": {"role": "assistant", "content": "تمام"},
                        "finish_reason": "stop",
                    }
                ],
            },
        )

    provider = _openai_provider(handler)
    assert await provider.complete(MESSAGES, temperature=0.3, max_tokens=1024) == "تمام"
    assert seen["max_completion_tokens"] == 1024
    assert "max_tokens" not in seen
    assert seen["temperature"] == 0.3
    assert seen["model"] == "llama"


@pytest.mark.asyncio
async def test_openai_stream_yields_fragments():
    def handler(request):
        assert json.loads(request.content)["stream"] is True
        return httpx.Response(
            200,
            headers={"content-type": "text/event-stream"},
            content=_sse_body(_chunk("أهلا "), _chunk("بك")),
        )

    provider = _openai_provider(handler, max_tokens_param="max_tokens")
    fragments = [f async for f in provider.stream(MESSAGES, temperature=0.7, max_tokens=1000)]
    assert fragments == ["أهلا ", "بك"]


@pytest.mark.asyncio
async def test_openai_errors_surface():
    provider = _openai_provider(lambda request: httpx.Response(500, json={"error": "boom"}))
    with pytest.raises(Exception):
        await provider.complete(MESSAGES, temperature=0.3, max_tokens=10)


# ==========================================
#  OpenRouter adapter
# ==========================================


def _openrouter(handler):
    return OpenRouterProvider(
        "openrouter",
        "https://openrouter.test/api/v1/chat/completions",
        "key",
        "deepseek/deepseek-chat",
        referer="https://tabibi.app",
        title="Tabibi AI",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_openrouter_complete_headers_and_body():
    seen = {}

    def handler(request):
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "تحليل"}}]})

    provider = _openrouter(handler)
    assert await provider.complete(MESSAGES, temperature=0.5, max_tokens=1000) == "تحليل"
    assert seen["headers"]["authorization"] == "Bearer key"
    assert seen["headers"]["http-referer"] == "https://tabibi.app"
    assert seen["headers"]["x-title"] == "Tabibi AI"
    assert seen["body"]["max_tokens"] == 1000
    assert "stream" not in seen["body"]


@pytest.mark.asyncio
async def test_openrouter_complete_http_error():
    provider = _openrouter(lambda request: httpx.Response(429, text="rate limited"))
    with pytest.raises(httpx.HTTPStatusError):
        await provider.complete(MESSAGES, temperature=0.5, max_tokens=10)


@pytest.mark.asyncio
async def test_openrouter_stream_skips_noise():
    body = (
        ": OPENROUTER PROCESSING\n\n"
        + f"data: {json.dumps(_chunk('رد '))}\n\n"
        + "data: {broken json\n\n"
        + f"data: {json.dumps(_chunk('بسيط'), ensure_ascii=False)}\n\n"
        + "data: [DONE]\n\n"
    ).encode()

    def handler(request):
        assert request.headers["accept"] == "text/event-stream"
        assert json.loads(request.content)["stream"] is True
        return httpx.Response(200, headers={"content-type": "text/event-stream"}, content=body)

    provider = _openrouter(handler)
    fragments = [f async for f in provider.stream(MESSAGES, temperature=0.7, max_tokens=1500)]
    assert fragments == ["رد ", "بسيط"]


@pytest.mark.asyncio
async def test_openrouter_stream_http_error():
    provider = _openrouter(lambda request: httpx.Response(503, text="unavailable"))
    with pytest.raises(httpx.HTTPStatusError):
        async for _ in provider.stream(MESSAGES, temperature=0.7, max_tokens=10):
            pass


# ==========================================
#  Factory
# ==========================================


@pytest.mark.asyncio
async def test_build_providers_roles(settings):
    providers = build_providers(settings)
    try:
        assert providers.fast.name == "cerebras"
        assert providers.build.name == "groq"
        assert providers.deep.name == "openrouter"
        assert providers.fast.max_tokens_param == "max_completion_tokens"
        assert providers.build.max_tokens_param == "max_tokens"
    finally:
        await providers.aclose()
