"""
==============================================================================
Application Settings Module
==============================================================================

Service-level configuration using Pydantic Settings.

Scanner behaviour (symbologies, result cap, profile) lives in
ScannerConfiguration; this module only holds what the CLI and the HTTP
service need around it: the default preset, backend budgets, worker count,
logging and server options.

Features:
---------
- Environment variable loading with type validation
- .env file support for local development
- Singleton access through get_settings()

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scanfuse.scanner.configuration import preset_names


# Module logger
logger = logging.getLogger(__name__)


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        app_env: Environment mode (development/staging/production)
        debug: Enable debug mode for verbose logging
        log_level: Root log level when debug is off
        host: Server bind address
        port: Server port number
        cors_origins: Allowed CORS origins (JSON array string)
        default_preset: Scanner preset used when a request names none
        matrix_timeout_ms: Wall-clock budget of one DataMatrix decode call
        matrix_region_cap: Upper bound on DataMatrix regions inspected
        decode_workers: Threads for the variant x backend matrix
        max_upload_bytes: Largest decoded image accepted by the API

    Example:
        >>> settings = Settings()
        >>> settings.default_preset
        'shipping-label'
    """

    # =========================================================================
    # PYDANTIC SETTINGS CONFIGURATION
    # =========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="Scanfuse Barcode Scanner",
        description="Display name for the application"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode for verbose logging"
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level when debug is off"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    max_upload_bytes: int = Field(
        default=20 * 1024 * 1024,
        ge=1024,
        description="Largest decoded image accepted by POST /scan"
    )

    # =========================================================================
    # SCANNER SETTINGS
    # =========================================================================
    default_preset: str = Field(
        default="shipping-label",
        description="Scanner preset used when none is requested"
    )

    matrix_timeout_ms: int = Field(
        default=2000,
        ge=1,
        le=60000,
        description="Wall-clock budget of one DataMatrix decode call"
    )

    matrix_region_cap: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Upper bound on DataMatrix regions inspected per call"
    )

    decode_workers: int = Field(
        default=1,
        ge=1,
        le=32,
        description="Threads for the variant x backend decode matrix"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """Normalize the environment name, defaulting unknown values."""
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """
        Validate the log level name.

        Raises:
            ValueError: If the level is not a standard logging level
        """
        supported = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}

        if value.upper() not in supported:
            raise ValueError(
                f"Unsupported log level: {value}. "
                f"Supported: {', '.join(sorted(supported))}"
            )

        return value.upper()

    @field_validator("default_preset")
    @classmethod
    def validate_default_preset(cls, value: str) -> str:
        """
        Validate the preset name against the known presets.

        Raises:
            ValueError: If the preset is unknown
        """
        normalized = value.strip().lower().replace("_", "-")

        if normalized not in preset_names():
            raise ValueError(
                f"Unknown scanner preset: {value}. "
                f"Supported: {', '.join(preset_names())}"
            )

        return normalized

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def effective_log_level(self) -> int:
        """DEBUG when debug is on, otherwise the configured level."""
        if self.debug:
            return logging.DEBUG
        return getattr(logging, self.log_level)

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from JSON string to list.

        Returns:
            List of allowed origin strings
        """
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"default_preset={self.default_preset!r}, "
            f"debug={self.debug})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance (singleton pattern).

    Uses lru_cache to ensure only one Settings instance is created
    throughout the application lifecycle. Tests reset it with
    get_settings.cache_clear().

    Returns:
        Global Settings instance
    """
    settings = Settings()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings


def configure_logging(settings: Settings) -> None:
    """Root logging setup, called once at process entry."""
    logging.basicConfig(level=settings.effective_log_level, format=LOG_FORMAT)
