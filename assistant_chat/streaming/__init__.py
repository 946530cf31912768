"""Streaming relay: from server-sent events to an updated transcript.

Responsibilities:
    - SSE framing of the raw upstream feed
    - Decoding payloads into content, reference and finish events
    - Cancellable pull-based iteration over one chat turn
    - Accumulating events into the transcript state machine
"""

from assistant_chat.streaming.decoder import StreamDecoder
from assistant_chat.streaming.relay import relay_turn
from assistant_chat.streaming.sse import SseFrame, format_sse, iter_sse_frames
from assistant_chat.streaming.stream import EventStream
from assistant_chat.streaming.transcript import Transcript, TranscriptState, TurnStatus

__all__ = [
    "EventStream",
    "SseFrame",
    "StreamDecoder",
    "Transcript",
    "TranscriptState",
    "TurnStatus",
    "format_sse",
    "iter_sse_frames",
    "relay_turn",
]
