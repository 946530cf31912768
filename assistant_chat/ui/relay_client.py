"""Client the chat page uses to reach this app's own HTTP API.

The chat stream relayed by ``POST /chat/stream`` carries the upstream events
verbatim, so it is consumed with the same EventStream and decoder as the
upstream feed itself.
"""

import logging
import os
from typing import Any

import httpx

from assistant_chat.errors import UpstreamConnectionError, UpstreamHTTPError
from assistant_chat.models.domain import ChatMessage, FileDescriptor
from assistant_chat.streaming.stream import EventStream

logger = logging.getLogger(__name__)

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")


class RelayClient:
    """Async client for the chat API."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get_envelope(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise UpstreamConnectionError(f"Connection failed: {e}") from e
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            logger.warning(f"{method} {path} returned a non-object body: {response.text[:200]}")
            data = {}
        if not response.is_success or data.get("status") != "success":
            message = data.get("message") or f"HTTP {response.status_code}"
            raise UpstreamHTTPError(response.status_code, response.text, message)
        return data

    async def check_assistant(self) -> dict[str, Any]:
        """Returns the ``{exists, assistant_name}`` envelope with the display flags."""
        return await self._get_envelope("GET", "/assistants")

    async def list_files(self) -> list[FileDescriptor]:
        data = await self._get_envelope("GET", "/files")
        return [FileDescriptor.model_validate(f) for f in data.get("files", [])]

    async def upload_file(
        self, filename: str, content: bytes, content_type: str | None = None
    ) -> dict[str, Any]:
        files = {"file": (filename, content, content_type or "application/octet-stream")}
        return await self._get_envelope("POST", "/files", files=files)

    def stream_chat(self, messages: list[ChatMessage]) -> EventStream:
        """Prepare a relayed chat stream; opened with ``async with``."""
        request = self._http.build_request(
            "POST",
            "/chat/stream",
            json={"messages": [m.model_dump(mode="json") for m in messages]},
            headers={"Accept": "text/event-stream"},
        )
        return EventStream(self._http, request)
