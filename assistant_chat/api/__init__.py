"""FastAPI endpoints for the assistant chat front end.

HTTP and streaming routes with async request handling.
Supports Server-Sent Events for real-time chat streaming.

Endpoints:
    - GET /health: Service health status
    - POST /chat/stream: Streamed chat relay (text/event-stream)
    - POST /chat: Unary chat completion
    - GET /files, POST /files: List and upload assistant files
    - GET /assistants, POST /assistants: Check for and create assistants
"""

from assistant_chat.api.app import app, create_app

__all__ = ["app", "create_app"]
