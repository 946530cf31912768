"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
error envelopes and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from assistant_chat import __version__
from assistant_chat.api.assistants import router as assistants_router
from assistant_chat.api.chat import router as chat_router
from assistant_chat.api.dependencies import close_assistant_client, error_response
from assistant_chat.api.files import router as files_router
from assistant_chat.errors import (
    AssistantError,
    ConfigurationError,
    InputValidationError,
    UpstreamConnectionError,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    # Startup
    logger.info("Starting Assistant Chat API...")
    yield
    # Shutdown
    await close_assistant_client()
    logger.info("Shutting down Assistant Chat API...")


def _describe_validation_error(exc: RequestValidationError) -> str:
    problems = []
    for err in exc.errors():
        if err.get("type") == "json_invalid":
            return "Invalid JSON in request body."
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        msg = str(err.get("msg", "invalid value")).removeprefix("Value error, ")
        problems.append(f"'{location}': {msg}" if location else msg)
    return "Invalid request: " + "; ".join(problems)


def register_error_handlers(application: FastAPI) -> None:
    """Map the error taxonomy onto ``{status, message}`` JSON envelopes."""

    @application.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(status.HTTP_400_BAD_REQUEST, _describe_validation_error(exc))

    @application.exception_handler(ConfigurationError)
    async def handle_configuration(request: Request, exc: ConfigurationError) -> JSONResponse:
        logger.error(f"Configuration error: {exc}")
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc))

    @application.exception_handler(InputValidationError)
    async def handle_input_validation(request: Request, exc: InputValidationError) -> JSONResponse:
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc))

    @application.exception_handler(UpstreamConnectionError)
    async def handle_upstream(request: Request, exc: UpstreamConnectionError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} failed upstream: {exc}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Assistant API request failed: {exc}")

    @application.exception_handler(AssistantError)
    async def handle_assistant_error(request: Request, exc: AssistantError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="Assistant Chat API",
        description=(
            "Chat front end for a hosted document assistant. Relays streamed "
            "answers with citations and manages the files the assistant "
            "answers from."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    register_error_handlers(application)
    application.include_router(chat_router)
    application.include_router(files_router)
    application.include_router(assistants_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "assistant-chat"}

    return application


app = create_app()
