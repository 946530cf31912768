from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from assistant_chat.models.domain import ChatMessage, FileDescriptor


class EnvelopeStatus(str, Enum):
    """Status values carried by every JSON response."""

    SUCCESS = "success"
    ERROR = "error"


class Envelope(BaseModel):
    """Base response shape: a status plus a human readable message.

    Attributes:
        status: success or error.
        message: Description of the outcome.
    """

    status: EnvelopeStatus
    message: str


class ErrorResponse(Envelope):
    """Error envelope, optionally carrying upstream details verbatim."""

    status: EnvelopeStatus = EnvelopeStatus.ERROR
    details: Any | None = None


class ChatRequest(BaseModel):
    """Request payload for the chat endpoints.

    Attributes:
        messages: Prior conversation, oldest first, ending with the new user turn.
        assistant_name: Optional override of the configured assistant.
    """

    messages: list[ChatMessage] = Field(..., min_length=1)
    assistant_name: str | None = None

    @field_validator("messages")
    @classmethod
    def reject_blank_messages(cls, v: list[ChatMessage]) -> list[ChatMessage]:
        """Reject conversations whose messages are all whitespace."""
        if not any(m.content.strip() for m in v):
            raise ValueError("'messages' must contain at least one non-empty message")
        return v


class FileListResponse(Envelope):
    """Files attached to an assistant."""

    files: list[FileDescriptor] = Field(default_factory=list)


class FileUploadResponse(Envelope):
    """Outcome of a file upload.

    Attributes:
        file_info: Upstream-assigned descriptor of the uploaded file.
    """

    file_info: dict[str, Any]


class AssistantStatusResponse(Envelope):
    """Whether the configured assistant exists upstream.

    Also carries the display flags so the UI follows the server configuration.
    """

    exists: bool
    assistant_name: str
    show_assistant_files: bool = True
    show_citations: bool = True


class CreateAssistantRequest(BaseModel):
    """Request payload for creating an assistant.

    Attributes:
        assistant_name: Name of the new assistant.
        instructions: System instructions (upstream default when omitted).
        model: Model backing the assistant.
        region: Deployment region.
    """

    assistant_name: str = Field(..., min_length=1)
    instructions: str | None = None
    model: str = "gpt-4o"
    region: str = "us-east-1"

    @field_validator("assistant_name", mode="before")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Strip whitespace from the name before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class CreateAssistantResponse(Envelope):
    """Outcome of creating an assistant."""

    assistant: dict[str, Any]
