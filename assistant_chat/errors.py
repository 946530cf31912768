"""Error taxonomy for the assistant relay.

Configuration and validation errors are raised before any network call.
Upstream and transport errors derive from the built-in ConnectionError so
callers can treat "the assistant could not be reached" uniformly.
"""

import json


class AssistantError(Exception):
    """Base class for all relay errors."""

    pass


class ConfigurationError(AssistantError):
    """Raised when the credential or assistant name is missing."""

    pass


class InputValidationError(AssistantError):
    """Raised when a request is missing required fields or is malformed."""

    pass


class TranscriptBusyError(InputValidationError):
    """Raised when a message is submitted while a response is still streaming."""

    pass


class EventParseError(AssistantError):
    """Raised when a single stream event payload cannot be decoded."""

    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw


class UpstreamConnectionError(AssistantError, ConnectionError):
    """Raised when the assistant API cannot deliver a usable response."""

    pass


class UpstreamHTTPError(UpstreamConnectionError):
    """Raised when the assistant API answers with a non-success status.

    Attributes:
        status_code: HTTP status returned by the upstream API.
        body: Raw response body, kept verbatim for diagnostics.
    """

    def __init__(self, status_code: int, body: str, message: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"Assistant API returned HTTP {status_code}")

    @property
    def upstream_message(self) -> str:
        """Best-effort human readable message from the upstream body."""
        try:
            data = json.loads(self.body)
        except ValueError:
            return self.body or str(self)
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if data.get("message"):
                return str(data["message"])
        return self.body


class StreamTransportError(UpstreamConnectionError):
    """Raised when the event stream is dropped, cancelled or cut short."""

    pass


class UpstreamResponseError(AssistantError):
    """Raised when the assistant API returns JSON in an unexpected shape."""

    pass
