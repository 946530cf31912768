"""Assistant Chat - web chat front end for a hosted document assistant.

Combines FastAPI for HTTP streaming, httpx for the upstream assistant API,
NiceGUI for visualization, and Pydantic for data validation.

Components:
    - assistant: Upstream API client and configuration
    - streaming: SSE decoding and transcript accumulation
    - api: HTTP endpoints and streaming responses
    - ui: Web interface for chat interactions
    - models: Transcript, event and request/response schemas
"""

__version__ = "0.1.0"
