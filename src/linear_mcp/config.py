"""Configuration management for Linear MCP."""

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LINEAR_API_URL = "https://api.linear.app/graphql"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env" if os.getenv("ENVIRONMENT") != "test" else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Linear MCP"
    app_version: str = "0.1.0"
    debug: bool = Field(default=False)
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Linear API
    linear_api_key: Optional[str] = Field(default=None)
    linear_api_url: str = Field(default=DEFAULT_LINEAR_API_URL)

    # Outbound HTTP; None means no timeout
    http_timeout: Optional[float] = Field(default=None)

    @field_validator("linear_api_key", mode="before")
    @classmethod
    def validate_api_key(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v or None

    @field_validator("linear_api_url", mode="before")
    @classmethod
    def validate_api_url(cls, v):
        if not v:
            return DEFAULT_LINEAR_API_URL
        return str(v).strip()

    def get_log_level(self) -> str:
        """Effective log level; DEBUG wins when debug mode is on."""
        if self.debug:
            return "DEBUG"
        return self.log_level.upper()


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
