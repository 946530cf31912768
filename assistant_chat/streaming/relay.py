"""Drives one chat turn from user input to a sealed (or failed) message."""

import asyncio
import logging
from collections.abc import Callable
from contextlib import aclosing

from assistant_chat.errors import UpstreamConnectionError, UpstreamHTTPError
from assistant_chat.models.domain import ChatMessage
from assistant_chat.streaming.stream import EventStream
from assistant_chat.streaming.transcript import Transcript, TranscriptState

logger = logging.getLogger(__name__)

StreamOpener = Callable[[list[ChatMessage]], EventStream]


def describe_failure(error: UpstreamConnectionError) -> str:
    """User-facing text for a failed turn."""
    if isinstance(error, UpstreamHTTPError):
        return f"The assistant returned an error ({error.status_code}): {error.upstream_message}"
    return f"An error occurred while streaming the response: {error}"


async def relay_turn(
    transcript: Transcript,
    open_stream: StreamOpener,
    text: str,
    on_update: Callable[[TranscriptState], None] | None = None,
) -> TranscriptState:
    """Submit ``text`` and fold the resulting event stream into the transcript.

    Args:
        transcript: The conversation to update.
        open_stream: Builds an unopened EventStream for the given history.
        text: The user's message.
        on_update: Called with the new state after every change.

    Returns:
        The transcript state once the turn is over.

    Raises:
        InputValidationError: If the text is blank or a turn is in progress.
            Nothing is sent in that case.
    """

    def notify() -> None:
        if on_update is not None:
            on_update(transcript.state)

    transcript.submit(text)
    notify()

    try:
        async with (
            open_stream(transcript.history()) as stream,
            aclosing(aiter(stream)) as events,
        ):
            async for event in events:
                transcript.apply(event)
                notify()
                if not transcript.is_streaming:
                    break
    except UpstreamConnectionError as e:
        logger.error(f"Chat turn failed: {e}")
        transcript.fail(describe_failure(e))
        notify()
    except asyncio.CancelledError:
        transcript.fail("The response was cancelled.")
        notify()
        raise

    return transcript.state
