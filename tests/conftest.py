"""Shared fixtures for connector tests."""

from unittest.mock import Mock

import httpx
import pytest

from crm_connector.core.cache import TTLFieldCache
from crm_connector.core.credentials import InMemoryCredentialStore
from crm_connector.core.crypto import Crypter
from crm_connector.core.models import OAuthSettings, TokenRecord


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """Set up a temporary home directory for config storage."""
    monkeypatch.setenv("CRM_CONNECTOR_HOME", str(tmp_path))
    return tmp_path

@pytest.fixture
def crypter():
    return Crypter([Crypter.generate_key()])

@pytest.fixture
def oauth():
    return OAuthSettings(client_id="client-123", client_secret="secret-456")

@pytest.fixture
def encrypted_refresh_token(crypter):
    return crypter.encrypt("plain-refresh-token")

@pytest.fixture
def token_record(crypter, encrypted_refresh_token):
    return TokenRecord(
        id=1,
        token=crypter.encrypt("old-access-token"),
        refresh_token=encrypted_refresh_token,
        integration_id=42,
    )

@pytest.fixture
def credential_store(token_record):
    return InMemoryCredentialStore([token_record])

@pytest.fixture
def field_cache():
    return TTLFieldCache()

@pytest.fixture
def mock_http_client():
    """Create a mock HTTP client."""
    return Mock(spec=httpx.Client)
