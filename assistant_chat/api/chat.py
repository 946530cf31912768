"""Chat endpoints: streaming relay and unary completion.

The streaming endpoint forwards the upstream server-sent events verbatim, so
any consumer (including our own UI) decodes them with the same StreamDecoder.
The relay stops right after the finish frame. A failure after streaming has
started is reported in-band as an ``event: error`` frame carrying the usual
``{status, message}`` envelope.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import aclosing
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse

from assistant_chat.api.dependencies import error_response, get_assistant_client
from assistant_chat.assistant.client import AssistantClient
from assistant_chat.errors import StreamTransportError, UpstreamHTTPError
from assistant_chat.models.schemas import ChatRequest, ErrorResponse
from assistant_chat.streaming.sse import format_sse
from assistant_chat.streaming.stream import EventStream

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


async def _relay(stream: EventStream) -> AsyncGenerator[str]:
    """Re-emit upstream frames until the finish signal or a failure."""
    try:
        async with aclosing(stream.frames()) as frames:
            async for frame, _ in frames:
                yield format_sse(frame.data)
    except StreamTransportError as e:
        logger.error(f"Chat stream interrupted: {e}")
        envelope = ErrorResponse(message=str(e))
        yield format_sse(envelope.model_dump_json(exclude_none=True), event="error")
    finally:
        # Also runs when the downstream client disconnects
        await stream.aclose()


@router.post("/stream", response_model=None)
async def chat_stream(
    request: ChatRequest,
    client: AssistantClient = Depends(get_assistant_client),
) -> StreamingResponse | JSONResponse:
    """Stream an assistant response as server-sent events.

    Args:
        request: Conversation so far and an optional assistant override.

    Returns:
        A text/event-stream response relaying the upstream events.

    Raises:
        400: Missing or empty messages, or missing configuration.
        500: Assistant API unreachable.
        Upstream status: Assistant API rejected the request.
    """
    stream = client.stream_chat(request.messages, request.assistant_name)
    try:
        await stream.open()
    except UpstreamHTTPError as e:
        return error_response(
            e.status_code,
            f"Error from assistant chat API: {e.upstream_message}",
            details=e.body,
        )

    return StreamingResponse(
        _relay(stream),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.post("", response_model=None)
async def chat(
    request: ChatRequest,
    client: AssistantClient = Depends(get_assistant_client),
) -> dict[str, Any] | JSONResponse:
    """Get a complete, non-streamed assistant response.

    Returns:
        The upstream JSON response as-is.
    """
    try:
        return await client.chat(request.messages, request.assistant_name)
    except UpstreamHTTPError as e:
        return error_response(
            e.status_code,
            f"Error from assistant chat API: {e.upstream_message}",
            details=e.body,
        )
