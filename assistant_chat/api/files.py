"""File endpoints: list and upload files attached to an assistant.

Handles form validation here; the upload itself is forwarded to the
assistant API unchanged.
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import JSONResponse

from assistant_chat.api.dependencies import error_response, get_assistant_client
from assistant_chat.assistant.client import AssistantClient
from assistant_chat.errors import InputValidationError, UpstreamHTTPError
from assistant_chat.models.schemas import (
    EnvelopeStatus,
    FileListResponse,
    FileUploadResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


def _parse_metadata(metadata: str | None) -> dict[str, Any] | None:
    """Parse the optional metadata form field.

    Raises:
        InputValidationError: If it is not a JSON object.
    """
    if not metadata:
        return None
    try:
        parsed = json.loads(metadata)
    except ValueError as e:
        raise InputValidationError("Invalid JSON format for metadata.") from e
    if not isinstance(parsed, dict):
        raise InputValidationError("Metadata must be a JSON object.")
    return parsed


@router.get("", response_model=FileListResponse)
async def list_files(
    assistant_name: str | None = Query(None),
    client: AssistantClient = Depends(get_assistant_client),
) -> FileListResponse:
    """List the files attached to the assistant.

    Args:
        assistant_name: Optional override of the configured assistant.

    Returns:
        FileListResponse with normalized file descriptors.

    Raises:
        400: Missing configuration.
        500: Assistant API error or unexpected response shape.
    """
    name = assistant_name or client.assistant_name
    files = await client.list_files(name)
    return FileListResponse(
        status=EnvelopeStatus.SUCCESS,
        message=f"Files for assistant '{name}' retrieved successfully.",
        files=files,
    )


@router.post(
    "",
    response_model=FileUploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Missing file or invalid metadata"}},
)
async def upload_file(
    file: UploadFile | None = File(None),
    metadata: str | None = Form(None),
    assistant_name: str | None = Query(None),
    client: AssistantClient = Depends(get_assistant_client),
) -> FileUploadResponse | JSONResponse:
    """Upload a file to the assistant.

    Args:
        file: The uploaded file (multipart/form-data).
        metadata: Optional JSON object, as a string form field.
        assistant_name: Optional override of the configured assistant.

    Returns:
        FileUploadResponse with the upstream-assigned descriptor.

    Raises:
        400: No file, empty filename or invalid metadata.
        Upstream status: The assistant API rejected the upload.
    """
    if file is None:
        raise InputValidationError("No file provided in the request.")
    if not file.filename:
        raise InputValidationError("Filename is required.")

    parsed_metadata = _parse_metadata(metadata)
    content = await file.read()
    name = assistant_name or client.assistant_name

    try:
        file_info = await client.upload_file(
            filename=file.filename,
            content=content,
            content_type=file.content_type,
            metadata=parsed_metadata,
            assistant_name=name,
        )
    except UpstreamHTTPError as e:
        logger.warning(f"Upload of {file.filename} rejected: {e.status_code}")
        return error_response(
            e.status_code,
            f"Failed to upload file: {e.upstream_message}",
            details=e.body,
        )

    return FileUploadResponse(
        status=EnvelopeStatus.SUCCESS,
        message=f"File '{file.filename}' uploaded successfully to assistant '{name}'.",
        file_info=file_info,
    )
