"""
Configuration management for the registration chatbot.

AI Assistant Notes:
- Central configuration using Pydantic Settings for type safety and validation
- All settings can be overridden via environment variables (.env file)
- Key categories: LLM, Langfuse, Storage, HTTP server, Sessions
- OPENAI_API_KEY is optional at import time; the text generator refuses to
  initialize without it
"""
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # LLM Configuration
    openai_api_key: Optional[str] = Field(None)
    openai_base_url: Optional[str] = Field(None)
    model_name: str = Field("gpt-4o-mini", validation_alias="openai_model")
    llm_max_tokens: int = Field(120)
    llm_temperature: float = Field(0.2)
    llm_phrase_prompts: bool = Field(False)

    # Langfuse Configuration
    langfuse_secret_key: Optional[str] = Field(None)
    langfuse_public_key: Optional[str] = Field(None)
    langfuse_base_url: str = Field(
        "https://cloud.langfuse.com")

    # Database Configuration
    database_path: str = Field("database/registrations.db")
    database_timeout: int = Field(30)
    registrations_table: str = Field("registrations")

    # HTTP Server Configuration
    host: str = Field("0.0.0.0")
    port: int = Field(3000)
    cors_allow_origins: List[str] = ["*"]

    # Session Configuration
    session_idle_eviction_minutes: Optional[int] = Field(None)

    # Application Configuration
    debug: bool = Field(False)
    log_level: str = Field("INFO")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",  # Ignore extra fields in .env
        "populate_by_name": True,
    }


# Global settings instance
settings = Settings()
