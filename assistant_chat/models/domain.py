"""Transcript data model: messages, references and file descriptors."""

import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Speaker of a transcript message."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """A {role, content} pair as sent to the assistant API.

    Attributes:
        role: The speaker identifier (user or assistant).
        content: The message text.
    """

    role: Role = Field(..., description="Message role: 'user' or 'assistant'")
    content: str = Field(..., description="The message content")


class Reference(BaseModel):
    """A citation pointing from an answer back to a source file.

    Attributes:
        file_id: Identifier of the cited file in the assistant's file list.
        quote: Excerpt supporting the answer.
        name: Display name of the file.
        url: Link to the file, when upstream provides one.
    """

    model_config = ConfigDict(frozen=True)

    file_id: str | None = None
    quote: str = ""
    name: str | None = None
    url: str | None = None

    @property
    def key(self) -> str | None:
        """Identity used for de-duplication."""
        return self.file_id or self.name


def merge_references(
    existing: tuple[Reference, ...], incoming: list[Reference] | tuple[Reference, ...]
) -> tuple[Reference, ...]:
    """Append references whose key is not yet present; first occurrence wins."""
    seen = {ref.key for ref in existing}
    merged = list(existing)
    for ref in incoming:
        if ref.key is None or ref.key in seen:
            continue
        seen.add(ref.key)
        merged.append(ref)
    return tuple(merged)


def _as_int(value: Any) -> int | None:
    """Size as an int, or None when upstream reports something unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_str(value: Any) -> str | None:
    return str(value) if value is not None else None


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(UTC)


class Message(BaseModel):
    """A single transcript entry.

    Frozen: the accumulator replaces the open message with an updated copy
    instead of mutating it, so read snapshots handed to the UI stay stable.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    role: Role
    content: str = ""
    timestamp: datetime = Field(default_factory=_now)
    references: tuple[Reference, ...] = ()

    def to_chat_message(self) -> ChatMessage:
        return ChatMessage(role=self.role, content=self.content)


class FileDescriptor(BaseModel):
    """Upstream file metadata, normalized.

    Attributes:
        id: Upstream file identifier.
        name: File name.
        size_bytes: Size in bytes, when reported.
        created_at: Creation timestamp as reported upstream.
        status: Processing status (e.g. Processing, Available).
        metadata: User metadata attached at upload time.
    """

    id: str
    name: str | None = None
    size_bytes: int | None = None
    created_at: str | None = None
    status: str | None = None
    metadata: dict[str, Any] | None = None

    @classmethod
    def from_upstream(cls, entry: dict[str, Any]) -> "FileDescriptor":
        """Build a descriptor from one upstream file entry."""
        size = entry.get("size_bytes", entry.get("size"))
        created = entry.get("created_at", entry.get("created_on"))
        metadata = entry.get("metadata")
        return cls(
            id=str(entry["id"]),
            name=_as_str(entry.get("name")),
            size_bytes=_as_int(size),
            created_at=_as_str(created),
            status=_as_str(entry.get("status")),
            metadata=metadata if isinstance(metadata, dict) else None,
        )
