"""Cancellable, pull-based stream of decoded assistant events.

Wraps one streaming httpx response. Consumers iterate it with ``async for``
and get StreamEvent objects in arrival order; the stream ends right after the
finish signal. Everything else that stops the feed (dropped connection,
server-side error frame, premature end of body, ``cancel()``) surfaces as
StreamTransportError.
"""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from types import TracebackType

import httpx

from assistant_chat.errors import StreamTransportError, UpstreamHTTPError
from assistant_chat.models.events import FinishSignal, StreamEvent
from assistant_chat.streaming.decoder import StreamDecoder
from assistant_chat.streaming.sse import SseFrame, iter_sse_frames

logger = logging.getLogger(__name__)


def _error_frame_message(data: str) -> str:
    try:
        payload = json.loads(data)
    except ValueError:
        return data or "Stream reported an error"
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return data


class EventStream:
    """One chat turn's event feed.

    Usage::

        async with EventStream(client, request) as stream:
            async for event in stream:
                ...
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        request: httpx.Request,
        decoder: StreamDecoder | None = None,
    ) -> None:
        self._client = client
        self._request = request
        self._decoder = decoder or StreamDecoder()
        self._response: httpx.Response | None = None
        self._cancelled = False
        self._finished = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def finished(self) -> bool:
        """Whether the upstream delivered its finish signal."""
        return self._finished

    @property
    def closed(self) -> bool:
        """Whether the underlying response has been released."""
        return self._response is not None and self._response.is_closed

    async def open(self) -> "EventStream":
        """Send the request and check the response status.

        Raises:
            StreamTransportError: If the endpoint cannot be reached.
            UpstreamHTTPError: If the endpoint answers with a non-success status.
        """
        try:
            response = await self._client.send(self._request, stream=True)
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach {self._request.url}: {e}")
            raise StreamTransportError(f"Could not reach the assistant API: {e}") from e

        if not response.is_success:
            body = (await response.aread()).decode("utf-8", errors="replace")
            await response.aclose()
            logger.error(
                f"Assistant API error! status: {response.status_code}, body: {body}"
            )
            raise UpstreamHTTPError(response.status_code, body)

        self._response = response
        return self

    async def aclose(self) -> None:
        """Close the underlying connection. Safe to call more than once."""
        if self._response is not None and not self._response.is_closed:
            await self._response.aclose()

    async def cancel(self) -> None:
        """Stop event delivery; the consumer sees StreamTransportError."""
        self._cancelled = True
        await self.aclose()

    async def __aenter__(self) -> "EventStream":
        return await self.open()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def frames(self) -> AsyncIterator[tuple[SseFrame, list[StreamEvent]]]:
        """Yield each raw frame together with the events decoded from it.

        Closing the generator early releases the connection.

        Raises:
            StreamTransportError: On any termination other than a finish signal.
        """
        if self._response is None:
            raise RuntimeError("EventStream.open() must be awaited before iterating")

        try:
            async with aclosing(iter_sse_frames(self._response.aiter_lines())) as sse_frames:
                async for frame in sse_frames:
                    if self._cancelled:
                        break
                    if frame.event == "error":
                        raise StreamTransportError(_error_frame_message(frame.data))

                    events = self._decoder.decode(frame.data)
                    if any(isinstance(event, FinishSignal) for event in events):
                        self._finished = True
                    yield frame, events

                    if self._finished:
                        return
        except (httpx.HTTPError, httpx.StreamError) as e:
            if self._cancelled:
                raise StreamTransportError("Stream cancelled") from e
            logger.error(f"Stream from {self._request.url} failed: {e}")
            raise StreamTransportError(f"Connection to the assistant API was lost: {e}") from e
        finally:
            await self.aclose()

        if self._cancelled:
            raise StreamTransportError("Stream cancelled")
        raise StreamTransportError("Stream ended before the assistant finished responding")

    async def __aiter__(self) -> AsyncIterator[StreamEvent]:
        async with aclosing(self.frames()) as frames:
            async for _, events in frames:
                for event in events:
                    yield event
