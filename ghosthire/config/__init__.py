"""
Configuration Module
====================

Centralized configuration management using Pydantic Settings.
Loads from environment variables with type validation and defaults.

Usage:
    from ghosthire.config import settings

    print(settings.environment)
    print(settings.ledger.mode)
"""

from ghosthire.config.settings import (
    Environment,
    LedgerMode,
    LogLevel,
    ProvingBackendKind,
    Settings,
    VerificationMode,
    get_settings,
)


# Global settings instance (singleton)
settings = get_settings()

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "Environment",
    "LogLevel",
    "LedgerMode",
    "ProvingBackendKind",
    "VerificationMode",
]
