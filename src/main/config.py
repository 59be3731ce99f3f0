"""
Application Settings - Main Layer

Use Pydantic Settings for configuration management.
This module handles configuration settings provided using
environment variables, .env files and default values.
"""

from typing import Any, Dict, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.shared import EnumEnvironment, EnumLogLevel, EnumRegistryType
from src.shared.env import load_secret_file_variables


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    mongo_uri: str = Field(
        default="mongodb://localhost:27017/iotagent_web",
        description="MongoDB connection URI",
    )
    database_name: str = Field(
        default="iotagent_web", description="Name of the MongoDB database"
    )

    model_config = SettingsConfigDict(
        env_prefix="DB_", case_sensitive=False, extra="ignore"
    )


class RegistrySettings(BaseSettings):
    """Web service registry backend selection."""

    type: EnumRegistryType = Field(
        default=EnumRegistryType.MEMORY,
        description="Registry backend: 'memory' or 'mongodb'",
    )

    model_config = SettingsConfigDict(
        env_prefix="REGISTRY_", case_sensitive=False, extra="ignore"
    )


class AgentSettings(BaseSettings):
    """Agent identity and provisioning defaults."""

    title: str = Field(default="IoT Agent for Web Services", description="Agent title")
    description: str = Field(
        default="Provisioning agent that projects web services into the "
        "FIWARE Context Broker",
        description="Agent description",
    )
    version: str = Field(default="1.0.0", description="Agent version")
    git_commit: str = Field(
        default="unknown",
        description="Git commit hash",
        validation_alias=AliasChoices("AGENT_GIT_COMMIT", "GIT_COMMIT"),
    )
    build_time: str = Field(
        default="unknown",
        description="Build timestamp",
        validation_alias=AliasChoices("AGENT_BUILD_TIME", "BUILD_TIME"),
    )
    port: int = Field(default=4041, description="Port to bind the server")
    default_type: str = Field(
        default="WebService",
        description="Entity type used when neither request nor group sets one",
    )
    timestamp: bool = Field(
        default=False,
        description="Add a TimeInstant attribute to every entity pushed",
    )
    provider_url: str = Field(
        default="http://localhost:4041",
        description="URL announced to the Context Broker for lazy attributes "
        "and commands",
    )
    types: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Attribute templates per entity type, as JSON",
    )

    model_config = SettingsConfigDict(
        env_prefix="AGENT_", case_sensitive=False, extra="ignore"
    )


class FiwareSettings(BaseSettings):
    """Fiware configuration settings."""

    orion_url: str = Field(
        default="http://localhost:1026", description="Orion Context Broker URL"
    )
    timeout: float = Field(
        default=30.0, gt=0, description="Timeout in seconds for Orion requests"
    )

    model_config = SettingsConfigDict(
        env_prefix="FIWARE_", case_sensitive=False, extra="ignore"
    )


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: EnumLogLevel = Field(default=EnumLogLevel.INFO, description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Logging format",
    )
    file_path: Optional[str] = Field(
        default=None, description="Log file path (if None, logs to console)"
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_", case_sensitive=False, extra="ignore"
    )


class AppSettings(BaseSettings):
    """Main application settings, aggregating all sub-settings."""

    environment: EnumEnvironment = Field(
        default=EnumEnvironment.DEVELOPMENT, description="Application environment"
    )

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    registry: RegistrySettings = Field(default_factory=RegistrySettings)
    agent: AgentSettings = Field(default_factory=AgentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    fiware: FiwareSettings = Field(default_factory=FiwareSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )


def get_settings() -> AppSettings:
    """
    Get application settings instance Factory.

    Secrets mounted as ``*_FILE`` variables are resolved first. Used to be
    mocked in tests, allowing different settings based on environment.
    """
    load_secret_file_variables()
    return AppSettings()
