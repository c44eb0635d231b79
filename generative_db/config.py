"""
Application Configuration

Pydantic-based settings management using environment variables.
Supports nested configuration, validation, and caching.

Usage:
    from generative_db.config import get_settings

    settings = get_settings()
    print(settings.llm.openai_model)
    print(settings.database.hostname)
"""

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class LLMSettings(BaseSettings):
    """Completion engine configuration."""

    provider: Literal["openai", "anthropic"] = Field(
        default="openai", description="LLM provider used by the SQL agent"
    )

    # OpenAI configuration
    openai_api_key: str | None = Field(
        None,
        description="OpenAI API key",
        min_length=20,
    )
    openai_model: str = Field(default="gpt-4o", description="OpenAI chat model")

    # Anthropic configuration
    anthropic_api_key: str | None = Field(
        None,
        description="Anthropic API key",
        min_length=20,
    )
    anthropic_model: str = Field(
        default="claude-3-5-sonnet-20241022", description="Anthropic chat model"
    )

    # Common settings
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="Temperature for LLM responses (0.0 = deterministic)",
    )
    max_tokens: int = Field(
        default=2000,
        gt=0,
        le=16000,
        description="Maximum tokens per LLM response",
    )
    timeout: int = Field(
        default=60,
        gt=0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("openai_api_key")
    @classmethod
    def validate_openai_key(cls, v: str | None) -> str | None:
        """Validate OpenAI API key format."""
        if v and not v.startswith("sk-"):
            raise ValueError("OpenAI API key must start with 'sk-'")
        return v

    @field_validator("anthropic_api_key")
    @classmethod
    def validate_anthropic_key(cls, v: str | None) -> str | None:
        """Validate Anthropic API key format."""
        if v and not v.startswith("sk-ant-"):
            raise ValueError("Anthropic API key must start with 'sk-ant-'")
        return v

    # The selected provider's key is checked by LLMProviderFactory, so
    # commands that never call the model run without one.


class DatabaseSettings(BaseSettings):
    """Target SQL Server configuration."""

    hostname: str = Field(default="localhost", description="SQL Server host")
    port: int = Field(default=1433, gt=0, le=65535, description="SQL Server port")
    username: str = Field(default="sa", description="Login name")
    password: SecretStr | None = Field(default=None, description="Login password")
    catalog: str = Field(default="master", description="Database (catalog) to query")
    schema_name: str | None = Field(
        default=None,
        description="Restrict introspection to a single schema (None = all schemas)",
    )
    encrypt: bool = Field(default=True, description="Request an encrypted connection")
    login_timeout: int = Field(
        default=30,
        gt=0,
        description="Login timeout in seconds",
    )
    query_timeout: int = Field(
        default=30,
        gt=0,
        description="Query timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("schema_name", mode="before")
    @classmethod
    def normalize_schema_name(cls, v: str | None) -> str | None:
        """Treat empty strings as missing."""
        if v == "":
            return None
        return v


def _split_table_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return []
        if raw.startswith("["):
            return json.loads(raw)
        return [item.strip() for item in raw.split(",") if item.strip()]
    return value


class SchemaSettings(BaseSettings):
    """Table selection and prompt rendering configuration."""

    include_tables: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Allow-list of table names (empty = all tables)",
    )
    ignore_tables: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Deny-list of table names, applied after include_tables",
    )
    custom_descriptions: dict[str, str] = Field(
        default_factory=dict,
        description="Per-table description overrides keyed by table name",
    )
    sample_rows: int = Field(
        default=3,
        ge=0,
        le=100,
        description="Sample rows shown per table in the schema prompt",
    )

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("include_tables", "ignore_tables", mode="before")
    @classmethod
    def parse_table_list(cls, v: Any) -> Any:
        """Accept comma-separated strings as well as JSON lists."""
        return _split_table_list(v)


class AgentSettings(BaseSettings):
    """SQL agent loop configuration."""

    max_iterations: int = Field(
        default=15,
        gt=0,
        le=100,
        description="Maximum tool-calling iterations before giving up",
    )
    top_k: int = Field(
        default=10,
        gt=0,
        description="Default row limit the agent applies with TOP",
    )
    dialect: str = Field(default="mssql", description="SQL dialect named in prompts")

    model_config = SettingsConfigDict(
        env_prefix="AGENT_",
        env_file=".env",
        extra="ignore",
    )


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
            force=True,  # Override any existing configuration
        )


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    Settings are nested by domain (llm, database, schema, agent, logging).

    Environment Variables:
        ENVIRONMENT: Deployment environment (development, production)
        APP_NAME: Application name for logging
        LLM_*: Completion engine configuration (see LLMSettings)
        DB_*: Target SQL Server configuration (see DatabaseSettings)
        SCHEMA_*: Table selection configuration (see SchemaSettings)
        AGENT_*: Agent loop configuration (see AgentSettings)
        LOG_*: Logging configuration (see LoggingSettings)
    """

    environment: Literal["development", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    app_name: str = Field(
        default="Generative DB",
        description="Application name",
    )

    # Nested settings
    llm: LLMSettings = Field(default_factory=LLMSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    schema_selection: SchemaSettings = Field(default_factory=SchemaSettings)
    agent: AgentSettings = Field(default_factory=AgentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

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
                "llm_provider": self.llm.provider,
                "database": f"{self.database.hostname}:{self.database.port}/{self.database.catalog}",
                "sample_rows": self.schema_selection.sample_rows,
            },
        )


_DOTENV_PATH = Path(__file__).resolve().parents[1] / ".env"


def _apply_dotenv_precedence() -> None:
    env_source = os.getenv("GENERATIVE_DB_ENV_SOURCE", "dotenv").lower()
    if env_source not in {"dotenv", "envfile", "file"}:
        return
    if _DOTENV_PATH.exists():
        load_dotenv(_DOTENV_PATH, override=True)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once per process; the CLI builds everything else
    from this object and passes it down explicitly.

    Returns:
        Settings: Singleton settings instance
    """
    _apply_dotenv_precedence()
    return Settings()


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
