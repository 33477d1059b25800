"""
Core module - Base abstractions and interfaces

Provides foundational components used across the toolkit:
- Interfaces and protocols for the vendor SDKs
- Base exception hierarchy
- Configuration management
"""

from logix_cicd.core.config import Settings, get_settings, reset_settings
from logix_cicd.core.exceptions import (
    ConfigurationError,
    ResourceNotFoundError,
    LogixCicdError,
    ValidationError,
)

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "LogixCicdError",
    "ConfigurationError",
    "ValidationError",
    "ResourceNotFoundError",
]
