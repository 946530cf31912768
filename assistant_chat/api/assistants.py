"""Assistant endpoints: existence check and creation."""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from assistant_chat.api.dependencies import error_response, get_assistant_client
from assistant_chat.assistant.client import AssistantClient
from assistant_chat.errors import UpstreamHTTPError
from assistant_chat.models.schemas import (
    AssistantStatusResponse,
    CreateAssistantRequest,
    CreateAssistantResponse,
    EnvelopeStatus,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assistants", tags=["assistants"])


@router.get("", response_model=AssistantStatusResponse)
async def check_assistant(
    client: AssistantClient = Depends(get_assistant_client),
) -> AssistantStatusResponse:
    """Check whether the configured assistant exists upstream."""
    name = client.assistant_name
    exists = await client.assistant_exists(name)
    return AssistantStatusResponse(
        status=EnvelopeStatus.SUCCESS,
        message=f"Assistant '{name}' check completed.",
        exists=exists,
        assistant_name=name,
        show_assistant_files=client.config.show_assistant_files,
        show_citations=client.config.show_citations,
    )


@router.post(
    "",
    response_model=CreateAssistantResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_assistant(
    request: CreateAssistantRequest,
    client: AssistantClient = Depends(get_assistant_client),
) -> CreateAssistantResponse | JSONResponse:
    """Create a new assistant.

    Raises:
        400: Missing assistant_name.
        Upstream status: The assistant API rejected the request.
    """
    try:
        assistant = await client.create_assistant(
            name=request.assistant_name,
            instructions=request.instructions,
            model=request.model,
            region=request.region,
        )
    except UpstreamHTTPError as e:
        return error_response(
            e.status_code,
            f"Failed to create assistant: {e.upstream_message}",
            details=e.body,
        )

    return CreateAssistantResponse(
        status=EnvelopeStatus.SUCCESS,
        message=f"Assistant '{request.assistant_name}' created successfully.",
        assistant=assistant,
    )
