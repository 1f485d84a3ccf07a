"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of JTOQ, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Configuration management for JTOQ.

This module handles environment variables, default values, and validation of
the application-level settings: logging and the qTest transport. Pipeline
configuration (what to submit and where) lives in ``jtoq.pipeline_models``.
"""

import logging
import os
from typing import Any, ClassVar, Never

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


def env_flag(value: str) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")


class BaseConfig(BaseModel):
    """Base configuration class with common functionality."""

    ENV_PREFIX: ClassVar[str] = "JTOQ_"

    @classmethod
    def from_env(cls, **overrides) -> Never:
        """
        Create a configuration instance from environment variables.

        Args:
        ----
            **overrides: Key-value pairs that override environment variables

        """
        raise NotImplementedError("Subclasses must implement from_env method")

    @classmethod
    def get_env_var(cls, key: str, default: Any = None) -> Any:
        """
        Get an environment variable with the class prefix.

        Args:
        ----
            key: Key name without prefix
            default: Default value if environment variable is not found

        """
        env_key = f"{cls.ENV_PREFIX}{key.upper()}"
        return os.environ.get(env_key, default)


class LoggingConfig(BaseConfig):
    """Configuration for logging settings."""

    level: str = Field(
        default_factory=lambda: os.environ.get("JTOQ_LOG_LEVEL", "INFO"),
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    use_rich: bool = Field(
        default=True,
        description="Whether to use rich for console logging",
    )
    log_file: str | None = Field(
        default=None,
        description="Path to the log file (None for console-only logging)",
    )
    json_format: bool = Field(
        default=False,
        description="Whether to use JSON format for logs",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, value):
        """Validate that the log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        value = value.upper()
        if value not in valid_levels:
            logger.warning(f"Invalid log level '{value}', defaulting to INFO")
            return "INFO"
        return value

    @classmethod
    def from_env(cls, **overrides) -> "LoggingConfig":
        """Create a logging configuration from environment variables."""
        config = {
            "level": cls.get_env_var("LOG_LEVEL", "INFO"),
            "use_rich": env_flag(cls.get_env_var("LOG_USE_RICH", "true")),
            "log_file": cls.get_env_var("LOG_FILE", None),
            "json_format": env_flag(cls.get_env_var("LOG_JSON", "false")),
        }
        config.update(overrides)
        return cls(**config)

    def get_log_level_int(self) -> int:
        """Get the numeric logging level."""
        return getattr(logging, self.level)

    def configure_logging(self, debug: bool = False) -> None:
        """
        Configure logging based on the settings.

        Args:
        ----
            debug: Whether to force debug mode

        """
        from jtoq.core.logging import configure_logging

        configure_logging(
            level=self.get_log_level_int(),
            log_file=self.log_file,
            json_format=self.json_format,
            use_rich=self.use_rich,
            debug=debug,
        )


class SubmitterConfig(BaseConfig):
    """Configuration for the qTest submission transport."""

    timeout: float = Field(
        default=30.0,
        description="HTTP request timeout in seconds",
        gt=0,
    )
    verify_ssl: bool = Field(
        default=True,
        description="Whether to verify the qTest server certificate",
    )

    @classmethod
    def from_env(cls, **overrides) -> "SubmitterConfig":
        """Create a submitter configuration from environment variables."""
        config = {
            "timeout": float(cls.get_env_var("QTEST_TIMEOUT", "30.0")),
            "verify_ssl": env_flag(cls.get_env_var("QTEST_VERIFY_SSL", "true")),
        }
        config.update(overrides)
        return cls(**config)


class AppConfig(BaseConfig):
    """Main application configuration that aggregates all other configurations."""

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )
    submitter: SubmitterConfig = Field(
        default_factory=SubmitterConfig,
        description="qTest transport configuration",
    )
    debug: bool = Field(
        default=False,
        description="Debug mode flag",
    )
    app_version: str = Field(
        default="0.0.0",
        description="Application version",
    )

    @classmethod
    def from_env(cls, **overrides) -> "AppConfig":
        """Create an application configuration from environment variables."""
        config = {
            "logging": LoggingConfig.from_env(),
            "submitter": SubmitterConfig.from_env(),
            "debug": env_flag(cls.get_env_var("DEBUG", "false")),
            "app_version": cls.get_env_var("APP_VERSION", "0.0.0"),
        }
        config.update(overrides)
        return cls(**config)

    def configure_logging(self) -> None:
        """Configure logging based on the settings."""
        self.logging.configure_logging(debug=self.debug)


_app_config = None


def get_app_config() -> AppConfig:
    """
    Get the global application configuration, building it from the environment on first use.
    """
    global _app_config
    if _app_config is None:
        _app_config = AppConfig.from_env()
    return _app_config


def init_app_config(config: AppConfig = None, **kwargs) -> AppConfig:
    """
    Initialize the global application configuration.

    Args:
    ----
        config: An existing AppConfig instance
        **kwargs: Key-value pairs for creating a new AppConfig

    """
    global _app_config
    _app_config = config if config is not None else AppConfig.from_env(**kwargs)
    return _app_config
