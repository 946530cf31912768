"""Stream decoder: raw event payloads to typed stream events.

The assistant API is not consistent about where it puts things. Content may
arrive as ``choices[0].delta.content`` or as a flat ``delta.content``;
citations show up under ``delta.references``, a top-level ``references`` list
or a ``citation`` object; the finish reason may sit on the choice or on the
payload. The decoder accepts all of them.
"""

import json
import logging
from typing import Any

from assistant_chat.errors import EventParseError
from assistant_chat.models.domain import Reference
from assistant_chat.models.events import (
    ContentDelta,
    FinishSignal,
    ParseError,
    ReferenceDelta,
    StreamEvent,
)

logger = logging.getLogger(__name__)


def _parse_payload(data: str) -> dict[str, Any]:
    """Parse one event payload.

    Raises:
        EventParseError: If the payload is not a JSON object.
    """
    try:
        payload = json.loads(data)
    except ValueError as e:
        raise EventParseError(f"Invalid JSON in stream event: {e}", raw=data) from e
    if not isinstance(payload, dict):
        raise EventParseError(
            f"Expected a JSON object, got {type(payload).__name__}", raw=data
        )
    return payload


def _body(payload: dict[str, Any]) -> dict[str, Any]:
    choices = payload.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        return choices[0]
    return payload


def normalize_reference(entry: Any) -> Reference | None:
    """Normalize one upstream reference entry.

    Returns:
        The Reference, or None when the entry carries no identifying key.
    """
    if not isinstance(entry, dict):
        return None
    file_info = entry.get("file") if isinstance(entry.get("file"), dict) else {}

    file_id = entry.get("file_id") or file_info.get("id") or entry.get("id")
    name = entry.get("name") or file_info.get("name") or entry.get("title")
    url = entry.get("url") or file_info.get("signed_url")
    quote = entry.get("quote") or entry.get("excerpt") or ""

    if not file_id and not name:
        return None
    return Reference(
        file_id=str(file_id) if file_id else None,
        quote=str(quote),
        name=str(name) if name else None,
        url=str(url) if url else None,
    )


def _collect_references(payload: dict[str, Any], body: dict[str, Any]) -> list[Reference]:
    sources: list[Any] = []
    delta = body.get("delta")
    if isinstance(delta, dict):
        sources.append(delta.get("references"))
    sources.append(payload.get("references"))
    citation = payload.get("citation")
    if isinstance(citation, dict):
        sources.append(citation.get("references"))

    references: list[Reference] = []
    for source in sources:
        if not isinstance(source, list):
            continue
        for entry in source:
            ref = normalize_reference(entry)
            if ref is None:
                logger.debug(f"Dropping reference without identifier: {entry!r}")
                continue
            references.append(ref)
    return references


class StreamDecoder:
    """Classifies raw event payloads into StreamEvent variants.

    Stateless: each payload is decoded on its own, in arrival order, with no
    buffering across events.
    """

    def decode(self, data: str) -> list[StreamEvent]:
        """Decode one raw event payload.

        A payload may produce several events (content and references can
        co-occur). A finish signal is always emitted last so content that
        arrives with it is not lost.

        Args:
            data: The event's data field.

        Returns:
            Decoded events; a single ParseError for malformed payloads.
        """
        try:
            payload = _parse_payload(data)
        except EventParseError as e:
            logger.warning(f"Skipping malformed stream event: {e}")
            return [ParseError(raw=e.raw, error=str(e))]

        body = _body(payload)
        events: list[StreamEvent] = []

        delta = body.get("delta")
        if isinstance(delta, dict):
            content = delta.get("content")
            if isinstance(content, str) and content:
                events.append(ContentDelta(text=content))

        references = _collect_references(payload, body)
        if references:
            events.append(ReferenceDelta(references=tuple(references)))

        finish_reason = body.get("finish_reason") or payload.get("finish_reason")
        if finish_reason:
            events.append(FinishSignal(reason=str(finish_reason)))

        return events
