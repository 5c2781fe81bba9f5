"""
==============================================================================
Configuration Package
==============================================================================

Centralized configuration management using Pydantic Settings.

This package provides:
- Environment-based configuration loading
- Type-safe settings with validation
- Singleton pattern for global access

Usage:
------
    from scanfuse.config import get_settings, Settings

    # Get the global settings instance
    settings = get_settings()

    # Access configuration values
    print(settings.app_name)
    print(settings.default_preset)

==============================================================================
"""

from .settings import Settings, configure_logging, get_settings

__all__ = [
    "Settings",
    "configure_logging",
    "get_settings",
]
