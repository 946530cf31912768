"""Server-sent event framing.

Groups text lines into events following the EventSource wire rules:
``data:`` lines accumulate (joined with newlines), ``event:`` sets the event
name, lines starting with ``:`` are comments and a blank line dispatches.
"""

from collections.abc import AsyncIterable, AsyncIterator

from pydantic import BaseModel


class SseFrame(BaseModel):
    """One dispatched server-sent event."""

    event: str = "message"
    data: str
    id: str | None = None


def _split_field(line: str) -> tuple[str, str]:
    name, sep, value = line.partition(":")
    if not sep:
        return line, ""
    # A single space after the colon is part of the syntax, not the value
    if value.startswith(" "):
        value = value[1:]
    return name, value


async def iter_sse_frames(lines: AsyncIterable[str]) -> AsyncIterator[SseFrame]:
    """Yield frames from an async stream of lines.

    Frames with no data lines are dropped, as an EventSource would.

    Args:
        lines: Lines without their terminators (e.g. ``response.aiter_lines()``).

    Yields:
        SseFrame for every dispatched event, in arrival order.
    """
    data: list[str] = []
    event = "message"
    event_id: str | None = None

    async for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if not line:
            if data:
                yield SseFrame(event=event, data="\n".join(data), id=event_id)
            data, event = [], "message"
            continue
        if line.startswith(":"):
            continue

        name, value = _split_field(line)
        if name == "data":
            data.append(value)
        elif name == "event":
            event = value or "message"
        elif name == "id":
            event_id = value

    # Stream closed without a trailing blank line
    if data:
        yield SseFrame(event=event, data="\n".join(data), id=event_id)


def format_sse(data: str, event: str | None = None) -> str:
    """Serialize one event for a text/event-stream response."""
    lines = [f"event: {event}"] if event else []
    lines.extend(f"data: {part}" for part in data.split("\n"))
    return "\n".join(lines) + "\n\n"
