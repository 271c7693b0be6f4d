"""User and group searches on a bound connection.

A list of search settings is walked with one of two policies:

- ``iterate_best_effort``: a failing search is logged and skipped.
- ``iterate_fail_fast``: a failing search aborts the walk with an
  ``EnumerationError`` carrying what was collected so far.
"""

from typing import Any, Callable, Dict, Iterator, List, Sequence, Tuple, TypeVar

import ldap3
from ldap3 import Connection
from ldap3.core.exceptions import LDAPException
from ldap3.utils.conv import escape_filter_chars

from ..config.models import DirectorySettings, GroupSearchSettings, UserSearchSettings
from ..models import DirectoryGroupMembership
from .exceptions import EnumerationError, UserNotFoundError
from .logging import get_logger, log_ldap_operation

logger = get_logger("search")

S = TypeVar("S")
Entry = Dict[str, Any]

GROUP_NAME_ATTRIBUTE = "cn"


def escape_filter_value(value: str) -> str:
    """Escape ``* ( ) \\`` and NUL so the value is matched literally."""
    return escape_filter_chars(value)


def build_equality_filter(base_filter: str, attribute: str, value: str) -> str:
    """AND a configured filter with ``attribute=value``, escaping the value."""
    return f"(&{base_filter}({attribute}={escape_filter_value(value)}))"


def attribute_values(entry: Entry, name: str) -> List[str]:
    """Return every value of an attribute as a list of strings."""
    value = (entry.get("attributes") or {}).get(name)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def run_search(connection: Connection,
               search_base: str,
               search_filter: str,
               attributes: Sequence[str],
               settings: DirectorySettings) -> List[Entry]:
    """
    Subtree search that never dereferences aliases.

    Returns:
        Search result entries, referrals excluded

    Raises:
        LDAPException: If the search fails
    """
    logger.debug(f"Searching: base={search_base}, filter={search_filter}")
    connection.search(
        search_base=search_base,
        search_filter=search_filter,
        search_scope=ldap3.SUBTREE,
        dereference_aliases=ldap3.DEREF_NEVER,
        attributes=list(attributes),
        size_limit=settings.size_limit,
        time_limit=settings.time_limit,
    )
    return [r for r in (connection.response or []) if r.get("type") == "searchResEntry"]


def iterate_best_effort(search_configs: Sequence[S],
                        run: Callable[[S], List[Entry]],
                        describe: Callable[[S], str]) -> Iterator[Tuple[S, List[Entry]]]:
    """Yield ``(config, entries)`` for each config whose search succeeds."""
    for config in search_configs:
        try:
            entries = run(config)
        except LDAPException as e:
            log_ldap_operation("search", describe(config), False, f"skipping search settings: {e}")
            continue
        yield config, entries


def iterate_fail_fast(search_configs: Sequence[S],
                      run: Callable[[S], List[Entry]],
                      describe: Callable[[S], str],
                      accumulated: List[Any]) -> Iterator[Tuple[S, List[Entry]]]:
    """
    Yield ``(config, entries)`` for each config, stopping on the first failure.

    Raises:
        EnumerationError: With a copy of ``accumulated`` as partial results
    """
    for config in search_configs:
        try:
            entries = run(config)
        except LDAPException as e:
            log_ldap_operation("search", describe(config), False, str(e))
            raise EnumerationError(
                f"Search failed under {describe(config)}", partial_results=accumulated
            ) from e
        yield config, entries


def _user_base(config: UserSearchSettings) -> str:
    return config.base_dn


def _group_base(config: GroupSearchSettings) -> str:
    return config.group_base_dn


def search_user(connection: Connection, username: str, settings: DirectorySettings) -> str:
    """
    Resolve a username to a unique DN.

    The first search settings entry returning exactly one entry wins. Zero
    or several entries under a base are both treated as no match.

    Raises:
        UserNotFoundError: If no search settings entry yields a unique match
    """
    def run(config: UserSearchSettings) -> List[Entry]:
        search_filter = build_equality_filter(config.filter, config.username_attribute, username)
        return run_search(connection, config.base_dn, search_filter, [ldap3.NO_ATTRIBUTES], settings)

    for config, entries in iterate_best_effort(settings.search_settings, run, _user_base):
        if len(entries) == 1:
            user_dn = entries[0]["dn"]
            log_ldap_operation("search", config.base_dn, True, f"resolved user {user_dn}")
            return user_dn
        if entries:
            logger.warning(f"Ambiguous user search under {config.base_dn}: {len(entries)} entries")

    raise UserNotFoundError()


def get_groups_by_user(connection: Connection, user_dn: str, settings: DirectorySettings) -> List[str]:
    """Names of every group listing ``user_dn`` as a member, across all group bases."""
    groups: Dict[str, None] = {}

    def run(config: GroupSearchSettings) -> List[Entry]:
        search_filter = build_equality_filter(config.group_filter, config.group_attribute, user_dn)
        return run_search(connection, config.group_base_dn, search_filter, [GROUP_NAME_ATTRIBUTE], settings)

    for _, entries in iterate_best_effort(settings.group_search_settings, run, _group_base):
        for entry in entries:
            names = attribute_values(entry, GROUP_NAME_ATTRIBUTE)
            if names:
                groups.setdefault(names[0])

    return list(groups)


def enumerate_users(connection: Connection, settings: DirectorySettings) -> List[str]:
    """
    Usernames of every entry matched by the user search settings.

    Raises:
        EnumerationError: If one of the searches fails
    """
    users: List[str] = []

    def run(config: UserSearchSettings) -> List[Entry]:
        return run_search(connection, config.base_dn, config.filter, [config.username_attribute], settings)

    for config, entries in iterate_fail_fast(settings.search_settings, run, _user_base, users):
        for entry in entries:
            values = attribute_values(entry, config.username_attribute)
            if values:
                users.append(values[0])

    return users


def enumerate_group_memberships(connection: Connection,
                                settings: DirectorySettings) -> List[DirectoryGroupMembership]:
    """
    One membership per member value of every group matched by the group search settings.

    Raises:
        EnumerationError: If one of the searches fails
    """
    memberships: List[DirectoryGroupMembership] = []

    def run(config: GroupSearchSettings) -> List[Entry]:
        return run_search(
            connection,
            config.group_base_dn,
            config.group_filter,
            [GROUP_NAME_ATTRIBUTE, config.group_attribute],
            settings,
        )

    for config, entries in iterate_fail_fast(settings.group_search_settings, run, _group_base, memberships):
        for entry in entries:
            names = attribute_values(entry, GROUP_NAME_ATTRIBUTE)
            group_name = names[0] if names else ""
            for member in attribute_values(entry, config.group_attribute):
                memberships.append(DirectoryGroupMembership(name=member, group=group_name))

    return memberships
