"""Configuration settings for the application."""

from typing import List

from pydantic import (
    AliasChoices,
    Field,
)
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Pydantic settings class for the application."""

    # Define the settings with default values and types
    # These will be loaded from environment variables or a .env file if not provided
    API_PORT: int = 3000
    DEBUG: bool = False
    LOG_LEVEL: str = "info"  # Options: debug, info, warning, error, critical
    CORS_ORIGINS: List[str] = ["*"]
    FRONTEND_DIR: str | None = None

    # LLM Configuration
    BACKEND: str = "openai"  # Options: openai (any OpenAI-compatible API), anthropic
    OPENAI_API_KEY: str | None = Field(
        default=None, validation_alias=AliasChoices("OPENAI_API_KEY", "GROQ_API_KEY")
    )
    OPENAI_BASE_URL: str = "https://api.groq.com/openai/v1"
    OPENAI_MODEL: str = "llama-3.3-70b-versatile"
    ANTHROPIC_API_KEY: str | None = None
    ANTHROPIC_MODEL: str = "claude-3-5-haiku-latest"
    TEMPERATURE: float = 0.3
    LLM_TIMEOUT: float = 60.0

    # Orchestration
    MAX_TOOL_ROUNDS: int = 5
    PARALLEL_TOOL_CALLS: bool = True

    # Conversation memory
    HISTORY_LIMIT: int = 10  # Turns kept per conversation
    CONTEXT_WINDOW: int = 6  # Turns forwarded to the model

    # Outbound data fetchers
    HTTP_TIMEOUT: float = 10.0

    class Config:
        """Configuration for Pydantic settings."""

        # Load environment variables from a .env file
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def active_api_key(self) -> str | None:
        """Return the credential of the configured backend, if any."""
        if self.BACKEND.lower() == "anthropic":
            return self.ANTHROPIC_API_KEY
        return self.OPENAI_API_KEY


settings = Settings()
