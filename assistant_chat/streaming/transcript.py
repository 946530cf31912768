"""Transcript accumulator.

The chat turn state machine as pure functions over a frozen TranscriptState:

    Idle --submit--> AwaitingResponse
    AwaitingResponse --ContentDelta--> AwaitingResponse   (append text)
    AwaitingResponse --ReferenceDelta--> AwaitingResponse (merge references)
    AwaitingResponse --FinishSignal--> Idle               (seal message)
    AwaitingResponse --fail--> Idle                       (drop empty message, flag error)

At most one assistant message is open at a time. Events that arrive while
Idle are ignored, so a sealed message never changes.
"""

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict

from assistant_chat.errors import InputValidationError, TranscriptBusyError
from assistant_chat.models.domain import (
    ChatMessage,
    Message,
    Reference,
    Role,
    merge_references,
)
from assistant_chat.models.events import (
    ContentDelta,
    FinishSignal,
    ReferenceDelta,
    StreamEvent,
)

logger = logging.getLogger(__name__)


class TurnStatus(str, Enum):
    """Where the transcript is in the current chat turn."""

    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"


class TranscriptState(BaseModel):
    """Snapshot of a conversation.

    Attributes:
        messages: All messages in insertion order.
        referenced_files: Every reference seen this session, de-duplicated.
        status: Current turn status.
        open_message_id: Id of the assistant message receiving deltas, if any.
        error: User-facing error from the last failed turn.
    """

    model_config = ConfigDict(frozen=True)

    messages: tuple[Message, ...] = ()
    referenced_files: tuple[Reference, ...] = ()
    status: TurnStatus = TurnStatus.IDLE
    open_message_id: str | None = None
    error: str | None = None

    @property
    def open_message(self) -> Message | None:
        if self.open_message_id is None:
            return None
        for message in reversed(self.messages):
            if message.id == self.open_message_id:
                return message
        return None


def _replace_open(state: TranscriptState, updated: Message) -> tuple[Message, ...]:
    return tuple(updated if m.id == updated.id else m for m in state.messages)


def submit(state: TranscriptState, text: str) -> TranscriptState:
    """Start a chat turn: append the user message and an open assistant message.

    Raises:
        TranscriptBusyError: If a response is still streaming.
        InputValidationError: If the text is blank.
    """
    if state.status is TurnStatus.AWAITING_RESPONSE:
        raise TranscriptBusyError("Wait for the current response to finish")
    if not text or not text.strip():
        raise InputValidationError("Message must not be empty")

    user_message = Message(role=Role.USER, content=text)
    assistant_message = Message(role=Role.ASSISTANT)
    return state.model_copy(
        update={
            "messages": (*state.messages, user_message, assistant_message),
            "status": TurnStatus.AWAITING_RESPONSE,
            "open_message_id": assistant_message.id,
            "error": None,
        }
    )


def apply(event: StreamEvent, state: TranscriptState) -> TranscriptState:
    """Fold one stream event into the transcript.

    Returns the state unchanged for parse errors and for any event that
    arrives when no message is open.
    """
    open_message = state.open_message
    if state.status is not TurnStatus.AWAITING_RESPONSE or open_message is None:
        logger.debug(f"Ignoring {event.kind} event: no open message")
        return state

    if isinstance(event, ContentDelta):
        updated = open_message.model_copy(update={"content": open_message.content + event.text})
        return state.model_copy(update={"messages": _replace_open(state, updated)})

    if isinstance(event, ReferenceDelta):
        updated = open_message.model_copy(
            update={"references": merge_references(open_message.references, event.references)}
        )
        return state.model_copy(
            update={
                "messages": _replace_open(state, updated),
                "referenced_files": merge_references(state.referenced_files, event.references),
            }
        )

    if isinstance(event, FinishSignal):
        return state.model_copy(
            update={"status": TurnStatus.IDLE, "open_message_id": None}
        )

    return state


def fail(state: TranscriptState, message: str) -> TranscriptState:
    """End the current turn with an error.

    The open assistant message is dropped when it has no content and kept
    (sealed) with its partial content otherwise.
    """
    open_message = state.open_message
    messages = state.messages
    if open_message is not None and not open_message.content:
        messages = tuple(m for m in messages if m.id != open_message.id)
    return state.model_copy(
        update={
            "messages": messages,
            "status": TurnStatus.IDLE,
            "open_message_id": None,
            "error": message,
        }
    )


def history(state: TranscriptState) -> list[ChatMessage]:
    """Conversation to send upstream: every message except the open one."""
    return [
        m.to_chat_message()
        for m in state.messages
        if m.id != state.open_message_id and m.content
    ]


class Transcript:
    """Owner of a TranscriptState for one conversation.

    Not thread-safe: only the single consumer of a chat turn's event stream
    may call ``apply``.
    """

    def __init__(self, state: TranscriptState | None = None) -> None:
        self._state = state or TranscriptState()

    @property
    def state(self) -> TranscriptState:
        return self._state

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._state.messages

    @property
    def referenced_files(self) -> tuple[Reference, ...]:
        return self._state.referenced_files

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def is_streaming(self) -> bool:
        return self._state.status is TurnStatus.AWAITING_RESPONSE

    def submit(self, text: str) -> Message:
        """Start a turn and return the user message."""
        self._state = submit(self._state, text)
        return self._state.messages[-2]

    def apply(self, event: StreamEvent) -> None:
        self._state = apply(event, self._state)

    def fail(self, message: str) -> None:
        self._state = fail(self._state, message)

    def history(self) -> list[ChatMessage]:
        return history(self._state)

    def clear(self) -> None:
        """Start a new conversation. Refused while a response is streaming."""
        if self.is_streaming:
            raise TranscriptBusyError("Wait for the current response to finish")
        self._state = TranscriptState()
