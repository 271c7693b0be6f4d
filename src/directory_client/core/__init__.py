"""Core functionality for the directory client."""

from .exceptions import (
    DirectoryConfigError,
    DirectoryConnectionError,
    DirectoryError,
    EnumerationError,
    ServiceBindError,
    UnauthorizedError,
    UserNotFoundError,
)
from .logging import setup_logging
from .service import DirectoryService
from .tls import build_secure_transport_config

__all__ = [
    "DirectoryConfigError",
    "DirectoryConnectionError",
    "DirectoryError",
    "DirectoryService",
    "EnumerationError",
    "ServiceBindError",
    "UnauthorizedError",
    "UserNotFoundError",
    "build_secure_transport_config",
    "setup_logging",
]
