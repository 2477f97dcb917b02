"""
Brief routes: streamed generation and export.

POST /brief answers with text/event-stream. Each event is
`event: <name>\\ndata: <json>\\n\\n` where name is one of status, delta,
error or done. Exactly one of error/done ends the stream.
"""

import asyncio
import json
import logging
from typing import Annotated, AsyncIterator

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from ..config import config, get_pipeline
from ..exceptions import (
    ConfigurationError,
    GenerationError,
    GenerationTimeoutError,
    ProviderAPIError,
    ProviderHTTPError,
)
from ..formatting import format_brief_html, format_brief_markdown, format_brief_plain_text
from ..models import Source
from ..pipeline import BriefOptions, BriefPipeline, BriefResult
from ..schemas import (
    BriefRequest,
    BriefSectionsSchema,
    FormatRequest,
    FormatResponse,
    SourceResultResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/brief", tags=["brief"])


def sse_event(event: str, payload: dict) -> str:
    """Encode one server-sent event."""
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"


def done_payload(result: BriefResult) -> dict:
    return {
        "text": result.text,
        "sections": BriefSectionsSchema.from_sections(result.sections).model_dump(),
        "sourceResults": [
            SourceResultResponse.from_result(r).model_dump() for r in result.source_results
        ],
        "coverageSummary": result.coverage_summary,
        "expandedWindowUsed": result.expanded_window_used,
        "dedupCount": result.dedup_count,
        "archiveId": result.archive_id,
    }


def error_status(error: Exception) -> int:
    """HTTP-style status reported in an error event."""
    if isinstance(error, ConfigurationError):
        return 400
    if isinstance(error, GenerationTimeoutError):
        return 504
    if isinstance(error, (ProviderAPIError, ProviderHTTPError)) and error.status:
        return error.status
    if isinstance(error, GenerationError):
        return 502
    return 500


async def stream_brief(
    pipeline: BriefPipeline,
    sources: list[Source],
    options: BriefOptions,
) -> AsyncIterator[str]:
    """
    Run the pipeline in a task and relay its callbacks as events.

    If the client goes away the generator is closed and the task is
    cancelled, which aborts the in-flight model request.
    """
    queue: asyncio.Queue[str | None] = asyncio.Queue()

    def on_status(message: str):
        queue.put_nowait(sse_event("status", {"message": message}))

    def on_delta(text: str):
        queue.put_nowait(sse_event("delta", {"text": text}))

    async def run():
        try:
            result = await pipeline.generate(sources, options, on_status, on_delta)
            queue.put_nowait(sse_event("done", done_payload(result)))
        except (ConfigurationError, GenerationError) as e:
            queue.put_nowait(sse_event("error", {"message": str(e), "status": error_status(e)}))
        except Exception as e:
            logger.exception(f"Unexpected error during brief generation: {e}")
            queue.put_nowait(sse_event("error", {"message": "Brief generation failed.", "status": 500}))
        finally:
            queue.put_nowait(None)

    task = asyncio.create_task(run())
    try:
        while True:
            chunk = await queue.get()
            if chunk is None:
                break
            yield chunk
    finally:
        if not task.done():
            logger.info("Client disconnected, cancelling brief generation")
            task.cancel()


# ─────────────────────────────────────────────────────────────
# Generation
# ─────────────────────────────────────────────────────────────

@router.post("")
async def generate_brief(
    request: BriefRequest,
    pipeline: Annotated[BriefPipeline, Depends(get_pipeline)],
) -> StreamingResponse:
    """Generate a brief, streaming progress and text deltas."""
    sources = [s.to_source() for s in request.sources]
    options = request.settings.to_options(default_model=config.LLM_MODEL)

    # Configuration problems are reported as plain 400s before streaming starts
    try:
        pipeline.validate(sources, options)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return StreamingResponse(
        stream_brief(pipeline, sources, options),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


# ─────────────────────────────────────────────────────────────
# Export
# ─────────────────────────────────────────────────────────────

@router.post("/format")
async def format_brief(request: FormatRequest) -> FormatResponse:
    """Render parsed sections as markdown, plain text or HTML."""
    sections = request.sections.to_sections()
    if request.format == "markdown":
        content = format_brief_markdown(sections, [s.to_item() for s in request.sources])
    elif request.format == "text":
        content = format_brief_plain_text(sections)
    else:
        content = format_brief_html(sections)
    return FormatResponse(format=request.format, content=content)
