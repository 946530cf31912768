"""Integration tests for the file endpoints.

Tests listing and multipart upload through the real app, including form
validation and upstream error propagation.
"""

import json

import pytest_check as check
from httpx import AsyncClient

from tests.conftest import ASSISTANTS_PATH, FILES_PATH, FakeAssistantAPI


class TestListFiles:
    """Tests for GET /files."""

    async def test_lists_normalized_files(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        fake_api.reply(
            "GET",
            FILES_PATH,
            json_body={"files": [{"id": "f1", "name": "a.pdf", "size": 1024, "status": "Available"}]},
        )

        response = await api_client.get("/files")

        check.equal(response.status_code, 200)
        body = response.json()
        check.equal(body["status"], "success")
        check.equal(body["message"], "Files for assistant 'test-assistant' retrieved successfully.")
        check.equal(body["files"][0]["id"], "f1")
        check.equal(body["files"][0]["size_bytes"], 1024)

    async def test_bare_array_listing(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        fake_api.reply("GET", FILES_PATH, json_body=[{"id": "f1"}, {"id": "f2"}])

        response = await api_client.get("/files")

        assert [f["id"] for f in response.json()["files"]] == ["f1", "f2"]

    async def test_assistant_name_override(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        fake_api.reply("GET", f"{ASSISTANTS_PATH}/other/files", json_body=[])

        response = await api_client.get("/files", params={"assistant_name": "other"})

        check.equal(response.status_code, 200)
        check.equal(response.json()["files"], [])

    async def test_unusable_size_still_lists_file(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        """A malformed size does not break the listing envelope."""
        fake_api.reply("GET", FILES_PATH, json_body=[{"id": "f1", "size": "n/a"}])

        response = await api_client.get("/files")

        check.equal(response.status_code, 200)
        check.equal(response.json()["status"], "success")
        check.is_none(response.json()["files"][0]["size_bytes"])

    async def test_unexpected_shape_returns_500(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        fake_api.reply("GET", FILES_PATH, json_body={"data": "nope"})

        response = await api_client.get("/files")

        check.equal(response.status_code, 500)
        check.is_in("Unexpected response format", response.json()["message"])

    async def test_upstream_error_returns_500(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        fake_api.reply("GET", FILES_PATH, 401, {"message": "Invalid API key"})

        response = await api_client.get("/files")

        check.equal(response.status_code, 500)
        check.equal(response.json()["status"], "error")


class TestUploadFile:
    """Tests for POST /files."""

    async def test_upload_success(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        """The file is forwarded and the upstream descriptor returned."""
        fake_api.reply("POST", FILES_PATH, json_body={"id": "f9", "name": "notes.txt"})

        response = await api_client.post(
            "/files",
            files={"file": ("notes.txt", b"hello world", "text/plain")},
            data={"metadata": json.dumps({"team": "docs"})},
        )

        check.equal(response.status_code, 201)
        body = response.json()
        check.equal(body["status"], "success")
        check.equal(body["file_info"], {"id": "f9", "name": "notes.txt"})
        forwarded = fake_api.last_request.content
        check.is_in(b'filename="notes.txt"', forwarded)
        check.is_in(b"hello world", forwarded)
        check.is_in(b'{"team": "docs"}', forwarded)

    async def test_missing_file_returns_400(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        response = await api_client.post("/files", data={"metadata": "{}"})

        check.equal(response.status_code, 400)
        check.equal(response.json()["message"], "No file provided in the request.")
        check.equal(fake_api.requests, [])

    async def test_invalid_metadata_json_returns_400(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            "/files",
            files={"file": ("a.txt", b"x", "text/plain")},
            data={"metadata": "{broken"},
        )

        check.equal(response.status_code, 400)
        check.equal(response.json()["message"], "Invalid JSON format for metadata.")

    async def test_non_object_metadata_returns_400(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            "/files",
            files={"file": ("a.txt", b"x", "text/plain")},
            data={"metadata": "[1, 2]"},
        )

        check.equal(response.status_code, 400)
        check.equal(response.json()["message"], "Metadata must be a JSON object.")

    async def test_upstream_rejection_keeps_status(
        self, api_client: AsyncClient, fake_api: FakeAssistantAPI
    ) -> None:
        """The upstream status and body are passed through."""
        fake_api.reply("POST", FILES_PATH, 409, {"message": "File already exists"})

        response = await api_client.post(
            "/files", files={"file": ("a.txt", b"x", "text/plain")}
        )

        check.equal(response.status_code, 409)
        body = response.json()
        check.equal(body["message"], "Failed to upload file: File already exists")
        check.is_in("File already exists", body["details"])
