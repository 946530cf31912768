"""Upstream assistant API access.

Responsibilities:
    - Configuration from the environment (credential, assistant name, endpoints)
    - Async HTTP client for chat, files and assistant management

Maintains clean separation from the HTTP layer.
"""

from assistant_chat.assistant.client import AssistantClient
from assistant_chat.assistant.config import AssistantConfig, get_assistant_config

__all__ = ["AssistantClient", "AssistantConfig", "get_assistant_config"]
