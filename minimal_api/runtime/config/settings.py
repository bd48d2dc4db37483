from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from minimal_api.runtime.config.config_data import DEV_JWT_SECRET


class EnvironmentVariables(BaseSettings):
    """Simple primitive values loaded from environment variables and .env files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Environment and deployment
    app_environment: Literal["development", "production", "test"] = Field(
        default="development"
    )
    log_level: str = Field(default="INFO")
    app_host: str = Field(default="localhost")
    app_port: int = Field(default=8000)

    # Infrastructure
    database_url: str = Field(default="sqlite:///./minimal_api.db")

    # Token signing
    jwt_secret: str = Field(default=DEV_JWT_SECRET)
