"""Assistant configuration with environment variable loading.

Pydantic-based configuration for the Pinecone Assistant relay.
The credential and assistant name are required; everything else has a default.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from assistant_chat.errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()

DEFAULT_BASE_URL = "https://api.pinecone.io"

_TRUTHY = {"1", "true", "yes", "on"}


def env_flag(name: str, default: bool = True) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


class AssistantConfig(BaseModel):
    """Configuration for talking to a hosted assistant.

    Attributes:
        api_key: Credential sent as the Api-Key header.
        assistant_name: Name of the assistant to chat with and attach files to.
        base_url: Root of the assistant API.
        chat_endpoint: Full chat URL override (None to derive from base_url).
        timeout: Request timeout in seconds, also bounds idle stream reads.
        show_assistant_files: Whether the UI shows the files panel.
        show_citations: Whether the UI shows per-message citations.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("PINECONE_API_KEY", ""),
        description="Credential for the assistant API",
    )
    assistant_name: str = Field(
        default_factory=lambda: os.getenv("PINECONE_ASSISTANT_NAME", ""),
        description="Assistant to target",
    )
    base_url: str = Field(
        default_factory=lambda: os.getenv("PINECONE_API_BASE_URL") or DEFAULT_BASE_URL,
        description="Assistant API base URL",
    )
    chat_endpoint: str | None = Field(
        default_factory=lambda: os.getenv("PINECONE_ASSISTANT_CHAT_ENDPOINT") or None,
        description="Chat URL override",
    )
    timeout: float = Field(
        default_factory=lambda: float(os.getenv("PINECONE_REQUEST_TIMEOUT", "120")),
        gt=0.0,
        description="Request timeout in seconds",
    )
    show_assistant_files: bool = Field(
        default_factory=lambda: env_flag("SHOW_ASSISTANT_FILES"),
    )
    show_citations: bool = Field(
        default_factory=lambda: env_flag("SHOW_CITATIONS"),
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that the credential is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("PINECONE_API_KEY is required. Set it in the environment or .env")
        return v.strip()

    @field_validator("assistant_name")
    @classmethod
    def validate_assistant_name(cls, v: str) -> str:
        """Validate that the assistant name is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError(
                "PINECONE_ASSISTANT_NAME is required. Set it in the environment or .env"
            )
        return v.strip()

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def assistants_url(self) -> str:
        return f"{self.base_url}/assistant/assistants"

    def chat_url(self, assistant_name: str | None = None) -> str:
        """Chat endpoint for an assistant, honoring the configured override."""
        if self.chat_endpoint and assistant_name in (None, self.assistant_name):
            return self.chat_endpoint
        return f"{self.assistants_url}/{assistant_name or self.assistant_name}/chat"

    def files_url(self, assistant_name: str | None = None) -> str:
        return f"{self.assistants_url}/{assistant_name or self.assistant_name}/files"


def get_assistant_config(**overrides: object) -> AssistantConfig:
    """Create assistant configuration from environment.

    Args:
        **overrides: Field values that take precedence over the environment.

    Returns:
        Configured AssistantConfig instance.

    Raises:
        ConfigurationError: If the credential or assistant name is missing,
            or any value fails validation.
    """
    try:
        return AssistantConfig(**overrides)
    except ValidationError as e:
        messages = "; ".join(str(err["msg"]).removeprefix("Value error, ") for err in e.errors())
        raise ConfigurationError(messages) from e
