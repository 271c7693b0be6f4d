"""Configuration for the directory client."""

from .models import (
    Config,
    DirectorySettings,
    GroupSearchSettings,
    LoggingConfig,
    TLSSettings,
    UserSearchSettings,
)
from .loader import load_config, validate_config

__all__ = [
    "Config",
    "DirectorySettings",
    "GroupSearchSettings",
    "LoggingConfig",
    "TLSSettings",
    "UserSearchSettings",
    "load_config",
    "validate_config",
]
