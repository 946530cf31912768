"""Process entry point.

Serves the HTTP API and the NiceGUI chat page, either from one uvicorn
server (RUN_MODE=integrated, the default) or as two processes
(RUN_MODE=separate: API on PORT, UI on UI_PORT).
Environment variables are loaded from .env file.
"""

import logging
import os
import subprocess
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Send log records to stdout at LOG_LEVEL (default INFO)."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # Every streamed chunk is a request line at INFO otherwise
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _host() -> str:
    return os.getenv("HOST", "0.0.0.0")


def _port() -> int:
    return int(os.getenv("PORT", "8000"))


def run_integrated() -> None:
    """Serve API routes and the chat page from a single server."""
    import uvicorn
    from nicegui import ui

    from assistant_chat.api.app import create_app
    from assistant_chat.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    app = create_app()
    ui.run_with(
        app,
        title="Assistant Chat",
        favicon="💬",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "assistant-chat-secret"),
    )

    logger.info(f"Chat UI on http://localhost:{_port()}/, API docs on /docs")
    uvicorn.run(
        app,
        host=_host(),
        port=_port(),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_separate() -> None:
    """Run the API under uvicorn in a child process and the UI in this one."""
    from assistant_chat.ui.chat_page import main as run_ui

    api_proc = subprocess.Popen(
        [
            sys.executable,
            "-m",
            "uvicorn",
            "assistant_chat.api.app:app",
            "--host",
            _host(),
            "--port",
            str(_port()),
        ]
    )
    logger.info(f"API started on port {_port()} (pid {api_proc.pid})")
    try:
        run_ui()
    finally:
        logger.info("Shutting down API process...")
        api_proc.terminate()
        api_proc.wait()


def main() -> None:
    """Application entry point."""
    configure_logging()
    mode = os.getenv("RUN_MODE", "integrated").lower()
    logger.info(f"Starting Assistant Chat in {mode} mode")

    if mode == "separate":
        run_separate()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
