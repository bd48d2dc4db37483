"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, computed_field

DEV_JWT_SECRET = "dev-only-signing-secret-change-me-before-deploying"


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:3001"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class JWTConfig(BaseModel):
    """Bearer token signing and validation configuration."""

    secret: str = Field(
        default=DEV_JWT_SECRET,
        min_length=32,
        description="Symmetric secret used to sign and verify tokens",
    )
    algorithm: Literal["HS256", "HS384", "HS512"] = Field(
        default="HS256", description="HMAC algorithm used for signing"
    )
    expires_in_seconds: int | None = Field(
        default=None,
        description="Token lifetime. None issues tokens without an exp claim",
    )
    validate_lifetime: bool = Field(
        default=False, description="Reject tokens whose exp claim has passed"
    )
    clock_skew: int = Field(default=0, description="Clock skew tolerance in seconds")


class LockoutConfig(BaseModel):
    """Failed login lockout policy."""

    enabled: bool = Field(default=True, description="Lock accounts after failures")
    max_failed_access_attempts: int = Field(
        default=5, ge=1, description="Failures before the account is locked"
    )
    lockout_seconds: int = Field(
        default=300, ge=1, description="How long a locked account stays locked"
    )


class PasswordPolicyConfig(BaseModel):
    """Rules every new password must satisfy."""

    required_length: int = Field(default=6, ge=1)
    required_unique_chars: int = Field(default=1, ge=1)
    require_digit: bool = True
    require_lowercase: bool = True
    require_uppercase: bool = True
    require_non_alphanumeric: bool = True


class UserPolicyConfig(BaseModel):
    """Rules for user names."""

    allowed_username_characters: str = Field(
        default="abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-._@+",
        description="Characters a username may contain. Empty allows anything",
    )


class IdentityConfig(BaseModel):
    """Credential store configuration."""

    lockout: LockoutConfig = Field(default_factory=LockoutConfig)
    password: PasswordPolicyConfig = Field(default_factory=PasswordPolicyConfig)
    user: UserPolicyConfig = Field(default_factory=UserPolicyConfig)
    hash_schemes: list[str] = Field(
        default_factory=lambda: ["pbkdf2_sha256"],
        description="passlib schemes; the first one hashes new passwords",
    )


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str = Field(default="", description="Log file path. Empty disables it")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./minimal_api.db",
        description="Database connection URL",
    )
    create_tables: bool = Field(
        default=True, description="Create missing tables at application startup"
    )
    echo: bool = Field(default=False, description="Log every SQL statement")
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")

    @computed_field
    @property
    def connection_string(self) -> str:
        """Normalized SQLAlchemy URL."""
        if self.url.startswith("postgres://"):
            logger.warning(
                "Database URL uses the legacy 'postgres://' scheme; rewriting to 'postgresql://'"
            )
            return self.url.replace("postgres://", "postgresql://", 1)
        return self.url

    @property
    def is_sqlite(self) -> bool:
        return self.connection_string.startswith("sqlite")


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    jwt: JWTConfig = Field(
        default_factory=JWTConfig, description="Bearer token configuration"
    )
    identity: IdentityConfig = Field(
        default_factory=IdentityConfig, description="Credential store configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
