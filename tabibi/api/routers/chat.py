"""Chat and health endpoints."""

import asyncio
import contextlib
import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from tabibi.api.dependencies import DataSourceFactory, get_data_source_factory, get_providers
from tabibi.api.models import ChatRequest, ChatResponse, HealthResponse
from tabibi.config.constants import PHASE_LABELS, Phase
from tabibi.config.settings import Settings, get_settings
from tabibi.infrastructure.llm import ProviderSet
from tabibi.orchestrator.pipeline import create_pipeline

logger = logging.getLogger(__name__)

router = APIRouter()


def _sse(event: dict[str, Any]) -> str:
    return f"data: {json.dumps(event, ensure_ascii=False, default=str)}\n\n"


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    settings: Settings = Depends(get_settings),
    open_data_source: DataSourceFactory = Depends(get_data_source_factory),
    providers: ProviderSet = Depends(get_providers),
) -> ChatResponse:
    """Answer a question about the clinic in one response."""
    phases: list[str] = []
    try:
        async with open_data_source() as data_source:
            pipeline = create_pipeline(
                on_phase_change=lambda phase: phases.append(phase.value),
                data_source=data_source,
                providers=providers,
                settings=settings,
            )
            response = await pipeline.run(
                request.message,
                request.messages,
                request.user,
                request.clinic,
                request.subscription,
            )
    except Exception as e:
        logger.error("Error processing chat request: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error") from e

    return ChatResponse(response=response, cancelled=response is None, phases=phases)


@router.post("/chat/stream", response_class=StreamingResponse)
async def chat_stream(
    request: ChatRequest,
    settings: Settings = Depends(get_settings),
    open_data_source: DataSourceFactory = Depends(get_data_source_factory),
    providers: ProviderSet = Depends(get_providers),
) -> StreamingResponse:
    """Stream phases, logs and answer chunks as Server-Sent Events."""

    async def generate() -> AsyncIterator[str]:
        queue: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()

        def on_phase_change(phase: Phase) -> None:
            queue.put_nowait(
                {"event": "phase", "phase": phase.value, "label": PHASE_LABELS[phase]}
            )

        def on_log(message: str, data: Any = None) -> None:
            queue.put_nowait({"event": "log", "message": message, "data": data})

        def on_chunk(fragment: str, accumulated: str) -> None:
            queue.put_nowait({"event": "chunk", "text": fragment, "content": accumulated})

        try:
            async with open_data_source() as data_source:
                pipeline = create_pipeline(
                    on_phase_change,
                    on_log,
                    data_source=data_source,
                    providers=providers,
                    settings=settings,
                )

                async def run_pipeline() -> None:
                    try:
                        response = await pipeline.run(
                            request.message,
                            request.messages,
                            request.user,
                            request.clinic,
                            request.subscription,
                            on_chunk=on_chunk,
                        )
                        if response is None:
                            queue.put_nowait({"event": "cancelled"})
                        else:
                            queue.put_nowait({"event": "complete", "response": response})
                    except Exception as e:
                        logger.error("Error in streaming pipeline: %s", e, exc_info=True)
                        queue.put_nowait({"event": "error", "error": "An error occurred"})
                    finally:
                        queue.put_nowait(None)

                task = asyncio.create_task(run_pipeline())
                try:
                    while (event := await queue.get()) is not None:
                        yield _sse(event)
                finally:
                    if not task.done():
                        logger.info("Client went away, aborting pipeline")
                        pipeline.abort()
                        with contextlib.suppress(asyncio.CancelledError):
                            await asyncio.shield(task)
            logger.info("Stream completed")
        except Exception as e:
            logger.error("Error in streaming: %s", e, exc_info=True)
            yield _sse({"event": "error", "error": "An error occurred"})

    return StreamingResponse(
        generate(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("/health", response_model=HealthResponse)
async def health(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """Health check."""
    return HealthResponse(status="healthy", version=settings.app_version)
