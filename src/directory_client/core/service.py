"""Directory service: authentication and identity resolution against LDAP/AD.

Every operation opens its own connection, uses it for the whole sequence of
binds and searches, and closes it before returning. Settings are only read.
"""

from typing import List, Optional

from ..config.models import DirectorySettings
from ..models import DirectoryGroupMembership
from .bind import bind_anonymous, bind_for_search, bind_service_account, verify_user_credentials
from .connection import TLSFactory, directory_connection
from .exceptions import UnauthorizedError, UserNotFoundError
from .logging import get_logger
from .search import enumerate_group_memberships, enumerate_users, get_groups_by_user, search_user

logger = get_logger("service")


class DirectoryService:
    """
    Authenticates users and resolves group memberships against LDAP/AD.

    The service keeps no per-call state and can be shared between threads.
    """

    def __init__(self, tls_factory: Optional[TLSFactory] = None):
        """
        Initialize the service.

        Args:
            tls_factory: Builds the TLS configuration from certificate paths,
                defaults to build_secure_transport_config
        """
        self.tls_factory = tls_factory

    def authenticate(self, username: str, password: str, settings: DirectorySettings) -> None:
        """
        Verify a username and password.

        An unknown username and a wrong password raise the same error.

        Raises:
            UnauthorizedError: If the credentials are not valid
            DirectoryConnectionError: If no server is reachable
            DirectoryConfigError: If the TLS material or service account is invalid
        """
        with directory_connection(settings, self.tls_factory) as connection:
            bind_for_search(connection, settings)

            try:
                user_dn = search_user(connection, username, settings)
            except UserNotFoundError:
                logger.info("Authentication failed: user could not be resolved")
                raise UnauthorizedError() from None

            verify_user_credentials(connection, user_dn, password)
            logger.info(f"Authenticated {user_dn}")

    def get_user_groups(self, username: str, settings: DirectorySettings) -> List[str]:
        """
        Group names of a user, across every group search setting.

        Raises:
            UserNotFoundError: If the username does not resolve to a unique entry
            DirectoryConnectionError: If no server is reachable
            DirectoryConfigError: If the TLS material or service account is invalid
        """
        with directory_connection(settings, self.tls_factory) as connection:
            bind_for_search(connection, settings)
            user_dn = search_user(connection, username, settings)
            groups = get_groups_by_user(connection, user_dn, settings)

        logger.debug(f"Resolved {len(groups)} group(s) for {user_dn}")
        return groups

    def search_users(self, settings: DirectorySettings) -> List[str]:
        """
        Every username matched by the user search settings.

        Raises:
            EnumerationError: If a search fails; partial results are attached
            DirectoryConnectionError: If no server is reachable
        """
        with directory_connection(settings, self.tls_factory) as connection:
            bind_for_search(connection, settings)
            return enumerate_users(connection, settings)

    def search_groups(self, settings: DirectorySettings) -> List[DirectoryGroupMembership]:
        """
        Every (member, group) pair matched by the group search settings.

        Raises:
            EnumerationError: If a search fails; partial results are attached
            DirectoryConnectionError: If no server is reachable
        """
        with directory_connection(settings, self.tls_factory) as connection:
            bind_for_search(connection, settings)
            return enumerate_group_memberships(connection, settings)

    def test_connectivity(self, settings: DirectorySettings) -> None:
        """
        Check that a server is reachable and the bind succeeds. No search is made.

        Raises:
            DirectoryConnectionError: If no server is reachable or the anonymous bind fails
            DirectoryConfigError: If the TLS material or service account is invalid
        """
        with directory_connection(settings, self.tls_factory) as connection:
            if settings.anonymous_mode:
                bind_anonymous(connection)
            else:
                bind_service_account(connection, settings)

        logger.info("LDAP connectivity test succeeded")
