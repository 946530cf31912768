"""Test package for Assistant Chat.

Unit tests cover the decoding and accumulation logic in isolation;
integration tests drive the FastAPI app end to end.

Structure:
    - unit/: Individual function and class tests
    - integration/: HTTP endpoint tests through ASGITransport

The hosted assistant API is replaced by httpx.MockTransport everywhere, so
no credential or network access is needed.
Leverages pytest with pytest-check for soft assertions.
"""
