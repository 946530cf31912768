"""Pydantic models for the transcript, stream events and HTTP payloads.

Models:
    - Message / Reference: transcript entries and their citations
    - FileDescriptor: normalized upstream file metadata
    - ChatMessage: {role, content} pair sent upstream
    - ContentDelta / ReferenceDelta / FinishSignal / ParseError: decoded stream events
"""

from assistant_chat.models.domain import (
    ChatMessage,
    FileDescriptor,
    Message,
    Reference,
    Role,
    merge_references,
)
from assistant_chat.models.events import (
    ContentDelta,
    FinishSignal,
    ParseError,
    ReferenceDelta,
    StreamEvent,
)

__all__ = [
    "ChatMessage",
    "ContentDelta",
    "FileDescriptor",
    "FinishSignal",
    "Message",
    "ParseError",
    "Reference",
    "ReferenceDelta",
    "Role",
    "StreamEvent",
    "merge_references",
]
