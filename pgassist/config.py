"""
Application Configuration

Pydantic-based settings management using environment variables.
Each concern gets its own settings class and environment prefix.

Usage:
    from pgassist.config import get_settings

    settings = get_settings()
    print(settings.database.url)
    print(settings.schema_cache.ttl_seconds)
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import AliasChoices, AnyUrl, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pgassist.core.identifiers import is_safe_identifier


class DatabaseSettings(BaseSettings):
    """Target PostgreSQL database configuration."""

    url: AnyUrl | None = Field(
        None,
        description="PostgreSQL connection URL",
        validation_alias=AliasChoices("DATABASE_URL", "NEON_PG_CONNECTION_STRING"),
    )
    schema_name: str = Field(
        default="public",
        description="Default schema used for catalog lookups",
    )
    pool_size: int = Field(
        default=10,
        gt=0,
        le=50,
        description="Maximum connections in the pool",
    )
    statement_timeout: int = Field(
        default=30,
        gt=0,
        description="Statement timeout in seconds",
    )
    ssl: Literal["disable", "prefer", "require"] = Field(
        default="prefer",
        description="SSL mode passed to the driver",
    )

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("url", mode="before")
    @classmethod
    def normalize_url(cls, v: str | AnyUrl | None) -> str | AnyUrl | None:
        """Treat empty strings as missing."""
        if v == "":
            return None
        return v

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: AnyUrl | None) -> AnyUrl | None:
        """Only PostgreSQL URLs with a host are accepted."""
        if v is None:
            return v
        parsed = urlparse(str(v))
        scheme = parsed.scheme.split("+")[0].lower() if parsed.scheme else ""
        if scheme not in {"postgres", "postgresql"}:
            raise ValueError("DATABASE_URL must use the postgresql scheme.")
        if not parsed.hostname:
            raise ValueError("DATABASE_URL must include a host.")
        return v

    @field_validator("schema_name")
    @classmethod
    def validate_schema_name(cls, v: str) -> str:
        """Schema name is interpolated into catalog queries as a literal."""
        if not is_safe_identifier(v):
            raise ValueError(f"Invalid schema name: {v!r}")
        return v


class SchemaCacheSettings(BaseSettings):
    """Schema metadata cache configuration."""

    ttl_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Seconds a schema snapshot stays fresh",
    )

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_CACHE_",
        env_file=".env",
        extra="ignore",
    )


class QuerySettings(BaseSettings):
    """Limits applied by the query tools."""

    max_rows: int = Field(
        default=1000,
        gt=0,
        le=100000,
        description="Row cap appended to read queries without a LIMIT",
    )
    sample_default_rows: int = Field(
        default=10,
        gt=0,
        description="Rows returned by sample_data when no limit is given",
    )
    sample_max_rows: int = Field(
        default=100,
        gt=0,
        le=10000,
        description="Upper bound for sample_data limits",
    )
    structure_max_depth: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Nesting depth explored when inferring JSON structure",
    )
    json_key_probe_limit: int = Field(
        default=50,
        gt=0,
        le=1000,
        description="Maximum distinct JSONB keys reported per column",
    )

    model_config = SettingsConfigDict(
        env_prefix="QUERY_",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_sample_rows(self) -> "QuerySettings":
        """Default sample size must fit inside the maximum."""
        if self.sample_default_rows > self.sample_max_rows:
            raise ValueError(
                f"sample_default_rows ({self.sample_default_rows}) must not exceed "
                f"sample_max_rows ({self.sample_max_rows})"
            )
        return self


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Application log level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Log timestamp format",
    )
    file: Path | None = Field(
        default=None,
        description="Optional log file path (None = stderr only)",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore",
    )

    def configure(self) -> None:
        """Configure Python logging with these settings."""
        handlers: list[logging.Handler] = [logging.StreamHandler()]

        if self.file:
            self.file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self.file))

        logging.basicConfig(
            level=getattr(logging, self.level),
            format=self.format,
            datefmt=self.date_format,
            handlers=handlers,
            force=True,
        )


class ToolsSettings(BaseSettings):
    """Tooling configuration."""

    policy_path: str | None = Field(
        default=None,
        description="Path to a YAML tool policy file",
    )

    model_config = SettingsConfigDict(
        env_prefix="TOOLS_",
        env_file=".env",
        extra="ignore",
    )


class Settings(BaseSettings):
    """
    Main application settings.

    Environment Variables:
        ENVIRONMENT: Deployment environment (development, staging, production)
        APP_NAME: Application name for logging
        DEBUG: Enable debug mode
        DATABASE_*: Target database configuration (see DatabaseSettings)
        SCHEMA_CACHE_*: Schema cache configuration (see SchemaCacheSettings)
        QUERY_*: Query limits (see QuerySettings)
        LOG_*: Logging configuration (see LoggingSettings)
        TOOLS_*: Tool policy configuration (see ToolsSettings)

    Example:
        >>> settings = get_settings()
        >>> settings.query.max_rows
        1000
    """

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    app_name: str = Field(
        default="pg-assist",
        description="Application name",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    schema_cache: SchemaCacheSettings = Field(default_factory=SchemaCacheSettings)
    query: QuerySettings = Field(default_factory=QuerySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    tools: ToolsSettings = Field(default_factory=ToolsSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @model_validator(mode="after")
    def configure_logging(self) -> "Settings":
        """Configure logging when settings are loaded."""
        self.logging.configure()
        return self

    def model_post_init(self, __context) -> None:
        """Log configuration on initialization."""
        logger = logging.getLogger(__name__)
        logger.info(
            f"Settings loaded for {self.app_name} ({self.environment})",
            extra={
                "environment": self.environment,
                "debug": self.debug,
                "database_pool_size": self.database.pool_size,
                "schema_cache_ttl": self.schema_cache.ttl_seconds,
            },
        )


_DOTENV_PATH = Path(__file__).resolve().parents[1] / ".env"


def _apply_dotenv_precedence() -> None:
    env_source = os.getenv("PG_ASSIST_ENV_SOURCE", "dotenv").lower()
    if env_source not in {"dotenv", "envfile", "file"}:
        return
    if _DOTENV_PATH.exists():
        load_dotenv(_DOTENV_PATH, override=True)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Singleton settings instance
    """
    _apply_dotenv_precedence()
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next call reloads the environment."""
    get_settings.cache_clear()
