"""Integration tests for the chat endpoints.

Drives the real FastAPI app through ASGITransport with the assistant API
faked by httpx.MockTransport, and validates the relayed SSE protocol.
"""

import json
from collections.abc import AsyncIterator

import httpx
import pytest_check as check
from httpx import AsyncClient

from assistant_chat.models.events import ContentDelta, FinishSignal
from assistant_chat.streaming.decoder import StreamDecoder
from tests.conftest import CHAT_PATH, FakeAssistantAPI, encode_events

HELLO = {"messages": [{"role": "user", "content": "Hello"}]}


def _frames(text: str) -> list[tuple[str, str]]:
    """Split an event-stream body into (event, data) pairs."""
    frames = []
    for block in text.strip().split("\n\n"):
        event, data = "message", []
        for line in block.split("\n"):
            if line.startswith("event: "):
                event = line.removeprefix("event: ")
            elif line.startswith("data: "):
                data.append(line.removeprefix("data: "))
        frames.append((event, "\n".join(data)))
    return frames


class TestStreamingEndpoint:
    """Integration tests for POST /chat/stream."""

    async def test_stream_returns_sse_content_type(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        """Streaming endpoint returns text/event-stream with caching disabled."""
        fake_api.stream(encode_events({"finish_reason": "stop"}))

        async with api_client.stream("POST", "/chat/stream", json=HELLO) as response:
            check.equal(response.status_code, 200)
            check.is_in("text/event-stream", response.headers["content-type"])
            check.equal(response.headers["cache-control"], "no-cache")

    async def test_upstream_frames_are_relayed_verbatim(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        """Each upstream event is forwarded unchanged, ending at the finish frame."""
        upstream = [
            {"delta": {"content": "Hi"}},
            {"delta": {"content": " there"}},
            {"finish_reason": "stop"},
        ]
        fake_api.stream(encode_events(*upstream, {"delta": {"content": "ignored"}}))

        response = await api_client.post("/chat/stream", json=HELLO)

        frames = _frames(response.text)
        check.equal([event for event, _ in frames], ["message"] * 3)
        check.equal([json.loads(data) for _, data in frames], upstream)

    async def test_relayed_frames_decode_like_upstream(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        """A consumer of the relay sees the same events as a direct consumer."""
        fake_api.stream(
            encode_events(
                {"choices": [{"delta": {"content": "Hi"}}]},
                {"choices": [{"delta": {}, "finish_reason": "stop"}]},
            )
        )
        decoder = StreamDecoder()

        response = await api_client.post("/chat/stream", json=HELLO)

        events = [e for _, data in _frames(response.text) for e in decoder.decode(data)]
        assert events == [ContentDelta(text="Hi"), FinishSignal(reason="stop")]

    async def test_request_history_is_forwarded(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        fake_api.stream(encode_events({"finish_reason": "stop"}))
        conversation = {
            "messages": [
                {"role": "user", "content": "Hello"},
                {"role": "assistant", "content": "Hi"},
                {"role": "user", "content": "Tell me more"},
            ]
        }

        await api_client.post("/chat/stream", json=conversation)

        sent = json.loads(fake_api.last_request.content)
        check.is_true(sent["stream"])
        check.equal(sent["messages"], conversation["messages"])

    async def test_upstream_rejection_returns_upstream_status(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        """A non-success upstream status is returned before streaming starts."""
        fake_api.reply("POST", CHAT_PATH, 401, {"error": {"message": "Invalid API key"}})

        response = await api_client.post("/chat/stream", json=HELLO)

        check.equal(response.status_code, 401)
        body = response.json()
        check.equal(body["status"], "error")
        check.equal(body["message"], "Error from assistant chat API: Invalid API key")
        check.is_in("Invalid API key", body["details"])

    async def test_unreachable_upstream_returns_500(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        fake_api.on("POST", CHAT_PATH, refuse)

        response = await api_client.post("/chat/stream", json=HELLO)

        check.equal(response.status_code, 500)
        check.is_in("Could not reach the assistant API", response.json()["message"])

    async def test_mid_stream_failure_becomes_error_frame(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        """Frames already relayed stay; the failure arrives as ``event: error``."""

        async def body() -> AsyncIterator[bytes]:
            yield encode_events({"delta": {"content": "Hel"}})
            raise httpx.ReadError("connection reset")

        fake_api.stream(body)

        response = await api_client.post("/chat/stream", json=HELLO)

        frames = _frames(response.text)
        check.equal(response.status_code, 200)
        check.equal(frames[0], ("message", json.dumps({"delta": {"content": "Hel"}})))
        check.equal(frames[-1][0], "error")
        error = json.loads(frames[-1][1])
        check.equal(error["status"], "error")
        check.is_in("Connection to the assistant API was lost", error["message"])

    async def test_missing_messages_returns_400(self, api_client: AsyncClient) -> None:
        response = await api_client.post("/chat/stream", json={})

        check.equal(response.status_code, 400)
        check.equal(response.json()["status"], "error")
        check.is_in("messages", response.json()["message"])

    async def test_empty_messages_returns_400(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        """Nothing is sent upstream for an empty conversation."""
        response = await api_client.post("/chat/stream", json={"messages": []})

        check.equal(response.status_code, 400)
        check.equal(fake_api.requests, [])

    async def test_blank_messages_returns_400(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            "/chat/stream", json={"messages": [{"role": "user", "content": "   "}]}
        )

        check.equal(response.status_code, 400)
        check.is_in("non-empty message", response.json()["message"])

    async def test_invalid_json_body_returns_400(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            "/chat/stream",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

        check.equal(response.status_code, 400)
        check.equal(response.json()["message"], "Invalid JSON in request body.")

    async def test_get_is_not_allowed(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/chat/stream")

        assert response.status_code == 405


class TestUnaryChatEndpoint:
    """Integration tests for POST /chat."""

    async def test_returns_upstream_response(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        answer = {"message": {"role": "assistant", "content": "Hi"}, "finish_reason": "stop"}
        fake_api.reply("POST", CHAT_PATH, json_body=answer)

        response = await api_client.post("/chat", json=HELLO)

        check.equal(response.status_code, 200)
        check.equal(response.json(), answer)
        check.is_false(json.loads(fake_api.last_request.content)["stream"])

    async def test_upstream_rejection_returns_upstream_status(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        fake_api.reply("POST", CHAT_PATH, 429, {"message": "Rate limited"})

        response = await api_client.post("/chat", json=HELLO)

        check.equal(response.status_code, 429)
        check.equal(response.json()["message"], "Error from assistant chat API: Rate limited")
