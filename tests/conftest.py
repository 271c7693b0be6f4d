"""Shared fixtures for directory client tests."""

import pytest

from directory_client.config.models import (
    DirectorySettings,
    GroupSearchSettings,
    TLSSettings,
    UserSearchSettings,
)


class FakeConnection:
    """
    In-memory stand-in for an ldap3 Connection.

    ``results`` maps a search base to a list of entries (dicts with ``dn`` and
    ``attributes``) or to an exception raised by the search.
    ``bind_results`` maps a bind user to True/False or an exception.
    """

    def __init__(self, results=None, bind_results=None):
        self.results = results or {}
        self.bind_results = bind_results or {}
        self.searches = []
        self.binds = []
        self.response = []
        self.result = {}
        self.unbind_calls = 0

    def search(self, search_base, search_filter, **kwargs):
        self.searches.append(dict(search_base=search_base, search_filter=search_filter, **kwargs))
        outcome = self.results.get(search_base, [])
        if isinstance(outcome, Exception):
            raise outcome
        self.response = [dict(entry, type='searchResEntry') for entry in outcome]
        return bool(self.response)

    def rebind(self, user=None, password=None, authentication=None):
        self.binds.append((user, password, authentication))
        outcome = self.bind_results.get(user, True)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def unbind(self):
        self.unbind_calls += 1
        return True


def entry(dn, **attributes):
    """Build a search result entry."""
    return {'dn': dn, 'attributes': attributes}


@pytest.fixture
def user_search_settings():
    """Two user search bases."""
    return [
        UserSearchSettings(
            base_dn="OU=Staff,DC=test,DC=local",
            filter="(objectClass=user)",
            username_attribute="sAMAccountName",
        ),
        UserSearchSettings(
            base_dn="OU=Contractors,DC=test,DC=local",
            filter="(objectClass=user)",
            username_attribute="sAMAccountName",
        ),
    ]


@pytest.fixture
def group_search_settings():
    """Two group search bases."""
    return [
        GroupSearchSettings(
            group_base_dn="OU=Groups,DC=test,DC=local",
            group_filter="(objectClass=group)",
            group_attribute="member",
        ),
        GroupSearchSettings(
            group_base_dn="OU=Teams,DC=test,DC=local",
            group_filter="(objectClass=group)",
            group_attribute="member",
        ),
    ]


@pytest.fixture
def settings(user_search_settings, group_search_settings):
    """Plaintext settings with a service account."""
    return DirectorySettings(
        urls=["dc1.test.local:389", "dc2.test.local:389"],
        reader_dn="CN=reader,DC=test,DC=local",
        password="reader-password",
        search_settings=user_search_settings,
        group_search_settings=group_search_settings,
    )


@pytest.fixture
def make_settings(settings):
    """Copy of the base settings with some fields replaced."""
    def _make(**changes):
        data = settings.model_dump()
        data.update(changes)
        return DirectorySettings.model_validate(data)
    return _make


@pytest.fixture
def tls_settings():
    """Implicit TLS settings with CA and client key pair."""
    return TLSSettings(
        tls=True,
        ca_cert_path="/etc/ssl/ca.pem",
        cert_path="/etc/ssl/client.pem",
        key_path="/etc/ssl/client.key",
    )
