"""Configuration module for Canopy.

Provides centralized configuration management with type-safe enums.

Usage:
    from canopy.core.config import settings, Environment

    if settings.ENVIRONMENT == Environment.PRD:
        ...
"""

from canopy.core.config.enums import Environment, LogLevel
from canopy.core.config.settings import Settings

__all__ = [
    "Settings",
    "Environment",
    "LogLevel",
    "settings",
]

# Singleton settings instance
settings = Settings()
