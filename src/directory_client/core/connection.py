"""Connection establishment and transport security negotiation.

Each URL is tried in order until one yields a live connection. Depending on
the TLS settings, the connection is plaintext, TLS from the first byte
(LDAPS) or upgraded with StartTLS. Implicit TLS wins when both flags are set.
"""

import enum
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Tuple

import ldap3
from ldap3 import Server, Connection
from ldap3.core.exceptions import LDAPException, LDAPStartTLSError

from ..config.models import URL_SCHEMES, DirectorySettings, TLSSettings
from .exceptions import DirectoryConnectionError
from .logging import get_logger, log_ldap_operation
from .tls import build_secure_transport_config

logger = get_logger("connection")

DEFAULT_PORT = 389
DEFAULT_TLS_PORT = 636

TLSFactory = Callable[..., ldap3.Tls]


class TransportMode(enum.Enum):
    PLAINTEXT = "plaintext"
    TLS = "tls"
    STARTTLS = "starttls"


def select_transport_mode(tls_config: TLSSettings) -> TransportMode:
    """Pick the transport for a connection. Implicit TLS takes precedence."""
    if tls_config.tls:
        return TransportMode.TLS
    if tls_config.start_tls:
        return TransportMode.STARTTLS
    return TransportMode.PLAINTEXT


def split_url(url: str, mode: TransportMode) -> Tuple[str, int]:
    """
    Split a server URL into host and port.

    The host is everything before the first colon, after an optional
    ldap:// or ldaps:// prefix.
    """
    address = url
    for scheme in URL_SCHEMES:
        if address.startswith(scheme):
            address = address[len(scheme):]
    address = address.rstrip('/')

    host, _, port = address.partition(':')
    if port:
        return host, int(port)
    return host, DEFAULT_TLS_PORT if mode is TransportMode.TLS else DEFAULT_PORT


def close_connection(connection: Connection) -> None:
    """Unbind and close a connection, logging instead of raising on failure."""
    try:
        connection.unbind()
    except (LDAPException, OSError) as e:
        logger.warning(f"Error while closing LDAP connection: {e}")


def create_connection_for_url(url: str,
                              settings: DirectorySettings,
                              tls_factory: TLSFactory = build_secure_transport_config) -> Connection:
    """
    Open a connection to a single server.

    Returns:
        An open, unbound connection

    Raises:
        DirectoryConfigError: If the TLS configuration cannot be built
        LDAPException: If the server cannot be reached or StartTLS fails
    """
    tls_settings = settings.tls_config
    mode = select_transport_mode(tls_settings)
    host, port = split_url(url, mode)

    tls = None
    if mode is not TransportMode.PLAINTEXT:
        tls = tls_factory(
            tls_settings.ca_cert_path,
            tls_settings.cert_path,
            tls_settings.key_path,
            tls_settings.skip_verify,
            server_name=host,
        )

    server = Server(
        host,
        port=port,
        use_ssl=mode is TransportMode.TLS,
        tls=tls,
        get_info=ldap3.NONE,
    )
    connection = Connection(
        server,
        auto_bind=ldap3.AUTO_BIND_NONE,
        auto_referrals=False,
        read_only=True,
        raise_exceptions=True,
    )

    logger.debug(f"Attempting connection to {host}:{port} ({mode.value})")
    connection.open()

    if mode is TransportMode.STARTTLS:
        try:
            if not connection.start_tls():
                raise LDAPStartTLSError(f"StartTLS refused by {host}:{port}")
        except LDAPException:
            close_connection(connection)
            raise

    return connection


def create_connection(settings: DirectorySettings,
                      tls_factory: TLSFactory = build_secure_transport_config) -> Connection:
    """
    Connect to the first reachable server in ``settings.urls``.

    Raises:
        DirectoryConnectionError: If no server could be reached
        DirectoryConfigError: If the TLS configuration cannot be built
    """
    for url in settings.urls:
        try:
            connection = create_connection_for_url(url, settings, tls_factory)
        except (LDAPException, OSError) as e:
            log_ldap_operation("connect", url, False, f"failed creating LDAP connection: {e}")
            continue

        log_ldap_operation("connect", url, True)
        return connection

    logger.error(f"Failed to connect to any of {len(settings.urls)} LDAP server(s)")
    raise DirectoryConnectionError()


@contextmanager
def directory_connection(settings: DirectorySettings,
                         tls_factory: Optional[TLSFactory] = None) -> Iterator[Connection]:
    """Yield a live connection that is closed on every exit path."""
    connection = create_connection(settings, tls_factory or build_secure_transport_config)
    try:
        yield connection
    finally:
        close_connection(connection)
