"""Shared FastAPI dependencies and response helpers."""

import logging
from typing import Any

from fastapi.responses import JSONResponse

from assistant_chat.assistant.client import AssistantClient
from assistant_chat.models.schemas import ErrorResponse

logger = logging.getLogger(__name__)

# Module-level singleton instance
_assistant_client: AssistantClient | None = None


def get_assistant_client() -> AssistantClient:
    """Get or create the global assistant client.

    Configuration is read on first use, so a missing credential or assistant
    name surfaces as ConfigurationError before any upstream request.

    Returns:
        The AssistantClient instance.
    """
    global _assistant_client
    if _assistant_client is None:
        _assistant_client = AssistantClient()
    return _assistant_client


async def close_assistant_client() -> None:
    """Close the global client, if one was created."""
    global _assistant_client
    if _assistant_client is not None:
        await _assistant_client.aclose()
        _assistant_client = None


def error_response(status_code: int, message: str, details: Any | None = None) -> JSONResponse:
    """Build a ``{status: "error", message}`` JSON response."""
    body = ErrorResponse(message=message, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )
