"""Decoded units of the upstream event stream.

Each raw server-sent event decodes into zero or more of these variants,
discriminated by ``kind``.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from assistant_chat.models.domain import Reference


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)


class ContentDelta(_Event):
    """A suffix to append to the open assistant message."""

    kind: Literal["content"] = "content"
    text: str


class ReferenceDelta(_Event):
    """Citations delivered alongside (or between) content deltas."""

    kind: Literal["references"] = "references"
    references: tuple[Reference, ...]


class FinishSignal(_Event):
    """The upstream finished the response; the only normal end of a stream."""

    kind: Literal["finish"] = "finish"
    reason: str


class ParseError(_Event):
    """A raw event that could not be decoded. Skipped, never fatal."""

    kind: Literal["parse_error"] = "parse_error"
    raw: str
    error: str


StreamEvent = Annotated[
    ContentDelta | ReferenceDelta | FinishSignal | ParseError,
    Field(discriminator="kind"),
]
