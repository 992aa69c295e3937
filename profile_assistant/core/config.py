"""Configuration management for the profile assistant service."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    pass

# Placeholder credential shipped in sample .env files; treated as "not configured"
DEMO_API_KEY = "demo-key"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment
    PROFILE_ASSISTANT_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")

    # Language model configuration
    ANTHROPIC_API_KEY: str | None = Field(default=None, description="Anthropic API key")
    CHAT_MODEL: str = Field(default="claude-haiku-4-5-20251001", description="Model for chat replies")
    CHAT_MAX_TOKENS: int = Field(default=1024, description="Max tokens per chat reply")
    CHAT_TEMPERATURE: float = Field(default=0.7, description="Sampling temperature for chat")
    LLM_TIMEOUT_SECONDS: float = Field(default=60.0, description="Upstream model call timeout")

    # Profile storage
    PROFILE_DATA_PATH: str = Field(
        default="data/personal_data.json", description="Path of the profile JSON document"
    )
    PERSONAL_DATA_API_KEY: str | None = Field(
        default=None, description="Shared secret for profile routes (unset = open access)"
    )

    # Conversation context
    CONTEXT_MAX_TURNS: int = Field(default=10, description="Turns kept per chat session")
    PROMPT_HISTORY_TURNS: int = Field(default=4, description="Turns rendered into the prompt")

    # HTTP surface
    RATE_LIMIT_ENABLED: bool = Field(default=True, description="Enable in-process rate limits")
    CORS_ALLOW_ORIGINS: str = Field(default="*", description="Comma-separated CORS origins")

    @property
    def is_dev(self) -> bool:
        return self.PROFILE_ASSISTANT_ENV == "dev"

    @property
    def model_configured(self) -> bool:
        """Whether a usable model credential is present."""
        key = (self.ANTHROPIC_API_KEY or "").strip()
        return bool(key) and key != DEMO_API_KEY

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ALLOW_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance
    """
    return Settings()
