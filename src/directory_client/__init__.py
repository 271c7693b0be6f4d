"""
directory_client - LDAP/Active Directory authentication and identity resolution.

Validates user credentials and resolves group memberships against one or more
directory servers, with ordered server failover, LDAPS/StartTLS support and
several independently configured search bases.
"""

__version__ = "0.1.0"

from .config.models import DirectorySettings, GroupSearchSettings, TLSSettings, UserSearchSettings
from .core import (
    DirectoryConfigError,
    DirectoryConnectionError,
    DirectoryError,
    DirectoryService,
    EnumerationError,
    ServiceBindError,
    UnauthorizedError,
    UserNotFoundError,
)
from .models import DirectoryGroupMembership

__all__ = [
    "DirectoryConfigError",
    "DirectoryConnectionError",
    "DirectoryError",
    "DirectoryGroupMembership",
    "DirectoryService",
    "DirectorySettings",
    "EnumerationError",
    "GroupSearchSettings",
    "ServiceBindError",
    "TLSSettings",
    "UnauthorizedError",
    "UserNotFoundError",
    "UserSearchSettings",
]
