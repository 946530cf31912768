"""HTTP client for the hosted assistant API.

Thin async wrapper over httpx for the endpoints this app relays:

    POST {base}/assistant/assistants/{name}/chat    streaming or unary chat
    GET  {base}/assistant/assistants/{name}/files   list files
    POST {base}/assistant/assistants/{name}/files   upload a file (multipart)
    GET  {base}/assistant/assistants                list assistants
    POST {base}/assistant/assistants                create an assistant

Every failure is surfaced to the caller; nothing is retried.
"""

import json
import logging
from typing import Any

import httpx

from assistant_chat.assistant.config import AssistantConfig, get_assistant_config
from assistant_chat.errors import (
    UpstreamConnectionError,
    UpstreamHTTPError,
    UpstreamResponseError,
)
from assistant_chat.models.domain import ChatMessage, FileDescriptor
from assistant_chat.streaming.decoder import StreamDecoder
from assistant_chat.streaming.stream import EventStream

logger = logging.getLogger(__name__)

DEFAULT_INSTRUCTIONS = "You are a helpful assistant."


def _serialize_messages(messages: list[ChatMessage]) -> list[dict[str, str]]:
    return [m.model_dump(mode="json") for m in messages]


def normalize_files(data: Any) -> list[FileDescriptor]:
    """Normalize a files listing that is either a bare array or ``{files: [...]}``.

    Raises:
        UpstreamResponseError: If neither shape matches.
    """
    if isinstance(data, list):
        entries = data
    elif isinstance(data, dict) and isinstance(data.get("files"), list):
        entries = data["files"]
    else:
        raise UpstreamResponseError(
            "Unexpected response format: files is not an array or not in expected structure"
        )

    files: list[FileDescriptor] = []
    for entry in entries:
        if not isinstance(entry, dict) or "id" not in entry:
            logger.warning(f"Skipping file entry without id: {entry!r}")
            continue
        files.append(FileDescriptor.from_upstream(entry))
    return files


class AssistantClient:
    """Client for one configured assistant.

    Holds a single httpx.AsyncClient for the lifetime of the app; call
    ``aclose()`` on shutdown.
    """

    def __init__(
        self,
        config: AssistantConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Optional configuration. Loads from environment if not provided.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        self._config = config or get_assistant_config()
        self._http = httpx.AsyncClient(
            headers={"Api-Key": self._config.api_key},
            timeout=httpx.Timeout(self._config.timeout),
            transport=transport,
        )
        self._decoder = StreamDecoder()

    @property
    def config(self) -> AssistantConfig:
        return self._config

    @property
    def assistant_name(self) -> str:
        return self._config.assistant_name

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise UpstreamConnectionError(f"Could not reach the assistant API: {e}") from e

        if not response.is_success:
            logger.error(
                f"HTTP error! {method} {url} status: {response.status_code}, body: {response.text}"
            )
            raise UpstreamHTTPError(response.status_code, response.text)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamResponseError(f"Assistant API returned invalid JSON: {e}") from e

    def stream_chat(
        self,
        messages: list[ChatMessage],
        assistant_name: str | None = None,
    ) -> EventStream:
        """Prepare a streaming chat request.

        The request is sent when the returned stream is opened
        (``async with client.stream_chat(...) as stream``).

        Args:
            messages: Conversation so far, oldest first.
            assistant_name: Optional override of the configured assistant.

        Returns:
            An unopened EventStream.
        """
        request = self._http.build_request(
            "POST",
            self._config.chat_url(assistant_name),
            json={"stream": True, "messages": _serialize_messages(messages)},
            headers={"Accept": "text/event-stream"},
        )
        return EventStream(self._http, request, self._decoder)

    async def chat(
        self,
        messages: list[ChatMessage],
        assistant_name: str | None = None,
    ) -> dict[str, Any]:
        """Get a complete, non-streamed chat response.

        Returns:
            The upstream JSON response.
        """
        response = await self._request(
            "POST",
            self._config.chat_url(assistant_name),
            json={"stream": False, "messages": _serialize_messages(messages)},
        )
        data = self._json(response)
        if not isinstance(data, dict):
            raise UpstreamResponseError("Unexpected chat response: expected a JSON object")
        return data

    async def list_files(self, assistant_name: str | None = None) -> list[FileDescriptor]:
        """List the files attached to an assistant."""
        response = await self._request("GET", self._config.files_url(assistant_name))
        return normalize_files(self._json(response))

    async def upload_file(
        self,
        filename: str,
        content: bytes,
        content_type: str | None = None,
        metadata: dict[str, Any] | None = None,
        assistant_name: str | None = None,
    ) -> dict[str, Any]:
        """Upload a file to an assistant.

        Args:
            filename: Name to store the file under.
            content: Raw file bytes.
            content_type: MIME type of the file.
            metadata: Optional metadata, sent as a JSON string form field.
            assistant_name: Optional override of the configured assistant.

        Returns:
            The upstream-assigned file descriptor.

        Raises:
            UpstreamHTTPError: With the upstream status and body verbatim.
        """
        files = {"file": (filename, content, content_type or "application/octet-stream")}
        data = {"metadata": json.dumps(metadata)} if metadata else None
        response = await self._request(
            "POST", self._config.files_url(assistant_name), files=files, data=data
        )
        logger.info(f"Uploaded {filename} to assistant {assistant_name or self.assistant_name}")
        return self._json(response)

    async def list_assistants(self) -> list[dict[str, Any]]:
        """List every assistant visible to the credential."""
        response = await self._request("GET", self._config.assistants_url)
        payload = self._json(response)
        if not isinstance(payload, dict) or not isinstance(payload.get("assistants"), list):
            raise UpstreamResponseError(
                "Unexpected response structure from the assistant API. "
                "Expected an object with an 'assistants' array."
            )
        return payload["assistants"]

    async def assistant_exists(self, assistant_name: str | None = None) -> bool:
        name = assistant_name or self.assistant_name
        assistants = await self.list_assistants()
        return any(a.get("name") == name for a in assistants if isinstance(a, dict))

    async def create_assistant(
        self,
        name: str,
        instructions: str | None = None,
        model: str = "gpt-4o",
        region: str = "us-east-1",
    ) -> dict[str, Any]:
        """Create a new assistant.

        Returns:
            The upstream description of the created assistant.
        """
        payload = {
            "name": name,
            "instructions": instructions or DEFAULT_INSTRUCTIONS,
            "model": {"name": model},
            "region": region,
        }
        response = await self._request("POST", self._config.assistants_url, json=payload)
        logger.info(f"Created assistant {name}")
        return self._json(response)
