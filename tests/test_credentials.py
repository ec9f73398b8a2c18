"""Tests for credential stores."""

import pytest

from crm_connector.core.credentials import InMemoryCredentialStore, JsonCredentialStore
from crm_connector.core.models import TokenRecord, CredentialNotFoundError, ConfigError


@pytest.fixture(params=["memory", "json"])
def store(request, temp_home):
    if request.param == "memory":
        return InMemoryCredentialStore()
    return JsonCredentialStore()


def test_save_and_get(store):
    record = TokenRecord(id=1, token="enc-a", refresh_token="enc-r", integration_id=42)
    store.save(record)

    assert store.get(1).to_dict() == record.to_dict()


def test_get_missing(store):
    with pytest.raises(CredentialNotFoundError):
        store.get(99)


def test_find_by_refresh_token(store):
    store.save(TokenRecord(id=1, token="a1", refresh_token="r1"))
    store.save(TokenRecord(id=2, token="a2", refresh_token="r2"))

    assert store.find_by_refresh_token("r2").id == 2
    assert store.find_by_refresh_token("unknown") is None


def test_update_access_token(store):
    store.save(TokenRecord(id=1, token="old", refresh_token="r1"))

    store.update_access_token(1, "new")

    assert store.get(1).token == "new"
    assert store.get(1).refresh_token == "r1"


def test_update_access_token_missing(store):
    with pytest.raises(CredentialNotFoundError):
        store.update_access_token(5, "new")


def test_json_store_persists_across_instances(temp_home):
    JsonCredentialStore().save(TokenRecord(id=3, token="a", refresh_token="r"))

    reloaded = JsonCredentialStore()

    assert reloaded.get(3).token == "a"
    assert (temp_home / "credentials_tokens.json").exists()


def test_json_store_named_files_are_separate(temp_home):
    JsonCredentialStore("tenant_a").save(TokenRecord(id=1, token="a", refresh_token="r"))

    with pytest.raises(CredentialNotFoundError):
        JsonCredentialStore("tenant_b").get(1)


def test_json_store_rejects_non_list(temp_home):
    (temp_home / "credentials_tokens.json").write_text('{"id": 1}')

    with pytest.raises(ConfigError):
        JsonCredentialStore().get(1)


def test_json_store_rejects_malformed_records(temp_home):
    (temp_home / "credentials_tokens.json").write_text('[{"id": 1}]')

    with pytest.raises(ConfigError):
        JsonCredentialStore().get(1)
