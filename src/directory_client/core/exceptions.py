"""Errors raised by the directory client.

Low-level ldap3 and socket errors are re-raised as one of these, with the
original exception chained as ``__cause__``.
"""

from typing import Any, List, Optional


class DirectoryError(Exception):
    """Base class for all directory client errors."""


class DirectoryConnectionError(DirectoryError):
    """No configured LDAP server could be reached."""

    def __init__(self, message: str = "No valid connection"):
        super().__init__(message)


class DirectoryConfigError(DirectoryError):
    """Invalid settings or TLS material."""


class ServiceBindError(DirectoryConfigError):
    """The service account (reader DN) was rejected by the server."""


class UnauthorizedError(DirectoryError):
    """End-user credentials could not be verified."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class UserNotFoundError(DirectoryError):
    """The username matched no entry, or more than one."""

    def __init__(self, message: str = "User not found or too many entries returned"):
        super().__init__(message)


class EnumerationError(DirectoryError):
    """A bulk enumeration stopped on a failed search.

    ``partial_results`` holds what was collected before the failure.
    """

    def __init__(self, message: str, partial_results: Optional[List[Any]] = None):
        super().__init__(message)
        self.partial_results = list(partial_results or [])
