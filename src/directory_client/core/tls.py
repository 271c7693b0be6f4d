"""TLS configuration built from certificate files on disk."""

import ssl
from typing import Optional

import ldap3
from ldap3.core.exceptions import LDAPSSLConfigurationError

from .exceptions import DirectoryConfigError
from .logging import get_logger

logger = get_logger("tls")


def validate_tls_material(ca_path: Optional[str],
                          cert_path: Optional[str],
                          key_path: Optional[str]) -> None:
    """
    Load the CA and the client key pair once so bad files fail here, not on connect.

    Raises:
        DirectoryConfigError: If a file is missing, unreadable or not valid PEM
    """
    if bool(cert_path) != bool(key_path):
        raise DirectoryConfigError("Client certificate and key must be given together")

    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    try:
        if ca_path:
            context.load_verify_locations(cafile=ca_path)
        if cert_path:
            context.load_cert_chain(certfile=cert_path, keyfile=key_path)
    except (ssl.SSLError, OSError) as e:
        logger.error(f"Invalid TLS material: {e}")
        raise DirectoryConfigError(f"Invalid TLS configuration: {e}") from e


def build_secure_transport_config(ca_path: Optional[str],
                                  cert_path: Optional[str],
                                  key_path: Optional[str],
                                  skip_verify: bool,
                                  server_name: Optional[str] = None) -> ldap3.Tls:
    """
    Build an ldap3 TLS configuration from certificate material.

    Args:
        ca_path: CA certificate used to validate the server, system store if empty
        cert_path: Client certificate for mutual TLS
        key_path: Client private key for mutual TLS
        skip_verify: Accept any server certificate
        server_name: Expected server host name, also sent as SNI

    Returns:
        ldap3.Tls instance

    Raises:
        DirectoryConfigError: If a file is missing or cannot be loaded
    """
    ca_path = ca_path or None
    cert_path = cert_path or None
    key_path = key_path or None

    validate_tls_material(ca_path, cert_path, key_path)

    try:
        return ldap3.Tls(
            local_private_key_file=key_path,
            local_certificate_file=cert_path,
            validate=ssl.CERT_NONE if skip_verify else ssl.CERT_REQUIRED,
            ca_certs_file=ca_path,
            valid_names=[server_name] if server_name else None,
            sni=server_name,
        )
    except (LDAPSSLConfigurationError, ssl.SSLError, OSError) as e:
        logger.error(f"Invalid TLS configuration: {e}")
        raise DirectoryConfigError(f"Invalid TLS configuration: {e}") from e
