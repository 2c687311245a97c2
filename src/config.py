"""
Configuration management using Pydantic for File Tools.
Provides type-safe configuration with validation and environment variable support.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.constants import (
    APIConstants,
    ImageConstants,
    PaletteConstants,
    PdfConstants,
    SessionConstants,
    SystemConstants,
)

logger = logging.getLogger(__name__)


class ImageConfig(BaseSettings):
    """Image tool configuration."""

    thumbnail_width: int = Field(
        default=ImageConstants.DEFAULT_THUMBNAIL_WIDTH,
        ge=ImageConstants.MIN_THUMBNAIL_WIDTH,
        le=ImageConstants.MAX_THUMBNAIL_WIDTH,
        description="Preview thumbnail width in pixels",
    )

    model_config = SettingsConfigDict(env_prefix="FT_IMAGE_", extra="ignore")


class SessionConfig(BaseSettings):
    """Session management configuration."""

    max_sessions: int = Field(
        default=SessionConstants.DEFAULT_MAX_SESSIONS,
        ge=SessionConstants.MIN_SESSIONS,
        le=SessionConstants.MAX_SESSIONS,
        description="Maximum number of open tool sessions",
    )

    model_config = SettingsConfigDict(env_prefix="FT_SESSION_", extra="ignore")


class PaletteConfig(BaseSettings):
    """Palette extraction configuration."""

    sample_size: int = Field(
        default=PaletteConstants.SAMPLE_SIZE,
        ge=10,
        le=1000,
        description="Side of the square images are resampled to before counting colors",
    )

    model_config = SettingsConfigDict(env_prefix="FT_PALETTE_", extra="ignore")


class PdfConfig(BaseSettings):
    """PDF tool configuration."""

    max_files: int = Field(
        default=PdfConstants.DEFAULT_MAX_FILES,
        ge=1,
        le=500,
        description="Maximum files per merge or image to PDF request",
    )

    model_config = SettingsConfigDict(env_prefix="FT_PDF_", extra="ignore")


class APIConfig(BaseSettings):
    """API configuration."""

    host: str = Field(default="0.0.0.0", description="API host address")
    port: int = Field(default=8000, ge=1, le=65535, description="API port")
    api_version: str = Field(default=APIConstants.API_VERSION, description="API version")
    cors_enabled: bool = Field(default=True, description="Enable CORS")
    cors_origins: List[str] = Field(default=["*"], description="CORS allowed origins")
    max_upload_size_mb: int = Field(
        default=APIConstants.MAX_UPLOAD_SIZE_MB,
        ge=1,
        le=500,
        description="Maximum upload file size in MB",
    )

    model_config = SettingsConfigDict(env_prefix="FT_API_", extra="ignore")


class SystemConfig(BaseSettings):
    """System configuration."""

    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default=SystemConstants.LOG_LEVEL_DEFAULT, description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    model_config = SettingsConfigDict(env_prefix="FT_SYSTEM_", extra="ignore")


class Settings(BaseSettings):
    """Main application settings."""

    # Sub-configurations
    image: ImageConfig = Field(default_factory=ImageConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    palette: PaletteConfig = Field(default_factory=PaletteConfig)
    pdf: PdfConfig = Field(default_factory=PdfConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)

    # Environment
    environment: str = Field(
        default="production", description="Environment (development, staging, production)"
    )

    # Config file support
    config_file: Optional[str] = Field(default=None, description="Path to YAML config file")

    @model_validator(mode="before")
    @classmethod
    def load_config_file(cls, values):
        """Load configuration from YAML file if specified."""
        config_file = values.get("config_file") or os.getenv("FT_CONFIG_FILE")

        if config_file and Path(config_file).exists():
            try:
                with open(config_file, "r") as f:
                    file_config = yaml.safe_load(f)
                    if file_config:
                        # Merge file config with values (env vars take precedence)
                        for key, value in file_config.items():
                            if key not in values or values[key] is None:
                                values[key] = value
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config file {config_file}: {e}")

        return values

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        valid_envs = ["development", "staging", "production", "test"]
        if v not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of {valid_envs}")
        return v

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return self.model_dump(exclude_none=True)

    def save_to_file(self, path: str) -> None:
        """Save current configuration to YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    model_config = SettingsConfigDict(
        env_prefix="FT_", case_sensitive=False, env_nested_delimiter="__", extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings object with validated configuration
    """
    return Settings()


# Convenience function to reload settings (clears cache)
def reload_settings() -> Settings:
    """
    Reload settings, clearing the cache.

    Returns:
        Fresh Settings object
    """
    get_settings.cache_clear()
    return get_settings()
