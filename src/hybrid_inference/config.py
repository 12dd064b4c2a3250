"""
Configuration settings for the Hybrid Inference Layer.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from functools import lru_cache
from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "Hybrid Inference Layer"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # === On-device Engine (local Ollama server) ===
    LOCAL_ENGINE_URL: str = "http://localhost:11434"
    LOCAL_TEXT_MODEL: str = "qwen2.5:3b"
    LOCAL_VISION_MODEL: str = "llava:7b"
    LOCAL_ENGINE_TIMEOUT: int = 60  # seconds
    LOCAL_PROBE_TIMEOUT: float = 5.0  # seconds, capability queries only

    # === Admission Control ===
    # Character ceilings, roughly CHARS_PER_TOKEN chars per token.
    # Heuristic policy constants, not tokenizer-exact limits.
    SUMMARISE_CHAR_LIMIT: int = 4000
    DRAFT_CHAR_LIMIT: int = 8000
    MULTIMODAL_CHAR_LIMIT: int = 6000
    CHARS_PER_TOKEN: int = 4

    # === Cloud Providers ===
    PROVIDER_TIMEOUT: int = 60  # seconds
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1/chat/completions"
    ANTHROPIC_BASE_URL: str = "https://api.anthropic.com/v1/messages"
    ANTHROPIC_API_VERSION: str = "2023-06-01"

    # === Shared Cloud Fallback ===
    FALLBACK_ENDPOINT_URL: str = "http://localhost:8000/api/fallback"
    FALLBACK_TIMEOUT: int = 90  # seconds
    # Server-side credential used by the fallback endpoint itself
    FALLBACK_PROVIDER: Optional[str] = None  # gemini | openai | anthropic
    FALLBACK_API_KEY: Optional[SecretStr] = None

    # === Image Questions ===
    MAX_IMAGE_ANSWER_LENGTH: int = 500  # chars before the answer is summarised

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return settings
