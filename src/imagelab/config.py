"""
Configuration management using Pydantic for the image processing toolkit.
Provides type-safe configuration with validation and environment variable support.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from imagelab.domain_types import (
    ConvolutionConstants,
    InspectionConstants,
    MorphologyConstants,
    PointConstants,
)
from imagelab.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

LOG_FORMAT_DEFAULT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ProcessingConfig(BaseSettings):
    """Default parameters handed to the engines."""

    kernel_size: int = Field(
        default=ConvolutionConstants.KERNEL_SIZE_DEFAULT,
        ge=ConvolutionConstants.KERNEL_SIZE_MIN,
        le=ConvolutionConstants.KERNEL_SIZE_MAX,
        description="Default kernel size for blur and median filters",
    )
    gaussian_sigma: float = Field(
        default=ConvolutionConstants.GAUSSIAN_SIGMA_DEFAULT,
        ge=ConvolutionConstants.GAUSSIAN_SIGMA_MIN,
        description="Default Gaussian standard deviation",
    )
    threshold: int = Field(
        default=MorphologyConstants.THRESHOLD_DEFAULT,
        ge=MorphologyConstants.THRESHOLD_MIN,
        le=MorphologyConstants.THRESHOLD_MAX,
        description="Default binarization threshold",
    )
    quantization_levels: int = Field(
        default=PointConstants.DEFAULT_QUANTIZATION_LEVELS,
        ge=PointConstants.MIN_QUANTIZATION_LEVELS,
        le=PointConstants.MAX_QUANTIZATION_LEVELS,
        description="Default number of quantization levels",
    )
    sampling_factor: int = Field(
        default=PointConstants.DEFAULT_SAMPLING_FACTOR,
        ge=PointConstants.MIN_SAMPLING_FACTOR,
        le=PointConstants.MAX_SAMPLING_FACTOR,
        description="Default subsampling block size",
    )
    neighborhood_radius: int = Field(
        default=InspectionConstants.NEIGHBORHOOD_RADIUS_DEFAULT,
        ge=0,
        le=InspectionConstants.NEIGHBORHOOD_RADIUS_MAX,
        description="Radius of the pixel inspector neighborhood",
    )

    @field_validator("kernel_size")
    @classmethod
    def validate_odd_number(cls, v):
        """Ensure kernel size is odd."""
        if v % 2 == 0:
            return v + 1
        return v

    model_config = SettingsConfigDict(env_prefix="IMAGELAB_PROCESSING_", extra="ignore")


class SystemConfig(BaseSettings):
    """System configuration."""

    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default=LOG_FORMAT_DEFAULT, description="Logging format string")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    model_config = SettingsConfigDict(env_prefix="IMAGELAB_SYSTEM_", extra="ignore")


class Settings(BaseSettings):
    """Main toolkit settings."""

    # Sub-configurations
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)

    environment: str = Field(
        default="production", description="Environment (development, test, production)"
    )

    # Config file support
    config_file: Optional[str] = Field(default=None, description="Path to YAML config file")

    @model_validator(mode="before")
    @classmethod
    def load_config_file(cls, values):
        """Load configuration from YAML file if specified."""
        if not isinstance(values, dict):
            return values

        config_file = values.get("config_file") or os.getenv("IMAGELAB_CONFIG_FILE")

        if config_file and Path(config_file).exists():
            with open(config_file, "r") as f:
                try:
                    file_config = yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise ConfigurationError("config_file", f"cannot parse {config_file}: {e}") from e

            if file_config is None:
                return values
            if not isinstance(file_config, dict):
                raise ConfigurationError("config_file", f"{config_file} must contain a mapping")

            # Merge file config with values (env vars take precedence)
            for key, value in file_config.items():
                if key not in values or values[key] is None:
                    values[key] = value
        elif config_file:
            logger.warning(f"Config file not found: {config_file}")

        return values

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        valid_envs = ["development", "test", "production"]
        if v not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of {valid_envs}")
        return v

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return self.model_dump(exclude_none=True)

    def save_to_file(self, path: str) -> None:
        """Save current configuration to YAML file."""
        config_dict = self.to_dict()
        with open(path, "w") as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False)

    model_config = SettingsConfigDict(
        env_prefix="IMAGELAB_",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
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
