"""Bind operations on an open connection."""

import ldap3
from ldap3 import Connection
from ldap3.core.exceptions import LDAPException

from ..config.models import DirectorySettings
from .exceptions import DirectoryConnectionError, ServiceBindError, UnauthorizedError
from .logging import log_ldap_operation


def _bind(connection: Connection, user, password, authentication) -> bool:
    return bool(connection.rebind(user=user, password=password, authentication=authentication))


def bind_service_account(connection: Connection, settings: DirectorySettings) -> None:
    """
    Bind with the configured reader DN and password.

    Raises:
        ServiceBindError: If the service account is rejected
    """
    try:
        ok = _bind(connection, settings.reader_dn, settings.password or "", ldap3.SIMPLE)
    except LDAPException as e:
        log_ldap_operation("bind", settings.reader_dn, False, str(e))
        raise ServiceBindError("Service account bind failed") from e

    if not ok:
        log_ldap_operation("bind", settings.reader_dn, False, str(connection.result))
        raise ServiceBindError("Service account bind failed")

    log_ldap_operation("bind", settings.reader_dn, True)


def bind_anonymous(connection: Connection) -> None:
    """
    Perform an unauthenticated bind.

    Raises:
        DirectoryConnectionError: If the server refuses the anonymous bind
    """
    try:
        ok = _bind(connection, None, None, ldap3.ANONYMOUS)
    except LDAPException as e:
        log_ldap_operation("bind", "anonymous", False, str(e))
        raise DirectoryConnectionError("Anonymous bind failed") from e

    if not ok:
        log_ldap_operation("bind", "anonymous", False, str(connection.result))
        raise DirectoryConnectionError("Anonymous bind failed")

    log_ldap_operation("bind", "anonymous", True)


def bind_for_search(connection: Connection, settings: DirectorySettings) -> None:
    """Bind with the service account unless anonymous mode is on."""
    if not settings.anonymous_mode:
        bind_service_account(connection, settings)


def verify_user_credentials(connection: Connection, user_dn: str, password: str) -> None:
    """
    Re-bind as the end user to check their password.

    Every failure is reported the same way so callers cannot tell a wrong
    password from any other rejection.

    Raises:
        UnauthorizedError: If the bind does not succeed
    """
    try:
        ok = _bind(connection, user_dn, password, ldap3.SIMPLE)
    except LDAPException as e:
        log_ldap_operation("bind", user_dn, False, type(e).__name__)
        raise UnauthorizedError() from None

    if not ok:
        log_ldap_operation("bind", user_dn, False)
        raise UnauthorizedError()

    log_ldap_operation("bind", user_dn, True)
