"""Integration tests for the HTTP API.

Requests go through the real FastAPI app via httpx ASGITransport; only the
upstream assistant API is faked.

Coverage:
    - Chat relay over server-sent events and unary chat
    - File listing and upload
    - Assistant existence check and creation
    - Error envelopes for validation, configuration and upstream failures
"""
