"""Tests for core data models."""

import dataclasses

import pytest

from crm_connector.core.models import (
    ObjectType,
    ClientConfig,
    FieldDescriptor,
    FieldSet,
    TokenRecord,
    ConfigError,
    InvalidObjectTypeError,
    parse_object_type,
)


def test_object_type_enum():
    """Test ObjectType enum values."""
    assert ObjectType("Contact") == ObjectType.CONTACT
    assert ObjectType("Lead") == ObjectType.LEAD
    assert ObjectType("Account") == ObjectType.ACCOUNT
    assert len(ObjectType) == 3


@pytest.mark.parametrize("name", ["Contact", "Lead", "Account"])
def test_parse_object_type_valid(name):
    assert parse_object_type(name).value == name


@pytest.mark.parametrize("name", ["Opportunity", "contact", "", "Case"])
def test_parse_object_type_invalid(name):
    with pytest.raises(InvalidObjectTypeError) as exc_info:
        parse_object_type(name)

    assert "Contact, Lead, Account" in str(exc_info.value)


def test_invalid_object_type_is_value_error():
    """InvalidObjectTypeError can be caught as ValueError or ConfigError."""
    assert issubclass(InvalidObjectTypeError, ValueError)
    assert issubclass(InvalidObjectTypeError, ConfigError)


def test_client_config_is_immutable():
    config = ClientConfig(domain="https://acme.example.com", access_token="a", refresh_token="r")

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.access_token = "b"


def test_client_config_with_methods_return_new_config():
    config = ClientConfig(domain="https://acme.example.com", access_token="a", refresh_token="r")

    versioned = config.with_api_version("60.0")
    typed = versioned.with_object_type("Lead")

    assert config.api_version is None
    assert config.object_type is None
    assert versioned.api_version == "60.0"
    assert typed.object_type == ObjectType.LEAD
    assert typed.api_version == "60.0"


def test_client_config_rejects_invalid_type_at_construction():
    with pytest.raises(InvalidObjectTypeError):
        ClientConfig(
            domain="https://acme.example.com",
            access_token="a",
            refresh_token="r",
            object_type="Opportunity",
        )


def test_client_config_coerces_string_type():
    config = ClientConfig(
        domain="https://acme.example.com",
        access_token="a",
        refresh_token="r",
        object_type="Account",
    )
    assert config.object_type == ObjectType.ACCOUNT


def test_client_config_repr_hides_tokens():
    config = ClientConfig(domain="https://acme.example.com", access_token="secret-a", refresh_token="secret-r")
    assert "secret-a" not in repr(config)
    assert "secret-r" not in repr(config)


def test_client_config_base_url_strips_slash():
    config = ClientConfig(domain="https://acme.example.com/", access_token="a", refresh_token="r")
    assert config.base_url == "https://acme.example.com"


def test_field_descriptor_from_dict():
    descriptor = FieldDescriptor.from_dict(
        {"name": "Email", "label": "Email Address", "custom": False, "type": "email"}
    )
    assert descriptor == FieldDescriptor(name="Email", label="Email Address", is_custom=False)


def test_field_descriptor_missing_label_becomes_empty():
    descriptor = FieldDescriptor.from_dict({"name": "Blank__c", "label": None, "custom": True})
    assert descriptor.label == ""
    assert descriptor.is_custom is True


def test_field_set_partitions_by_custom_flag():
    field_set = FieldSet.from_descriptors([
        FieldDescriptor("Email", "Email Address", False),
        FieldDescriptor("X_Custom__c", "Custom X", True),
        FieldDescriptor("Empty__c", "", True),
    ])

    assert dict(field_set.default) == {"Email": "Email Address"}
    assert dict(field_set.custom) == {"X_Custom__c": "Custom X", "Empty__c": ""}
    assert field_set.to_dict() == {
        "custom": {"X_Custom__c": "Custom X", "Empty__c": ""},
        "default": {"Email": "Email Address"},
    }


def test_token_record_roundtrip():
    data = {"id": 3, "token": "enc-a", "refresh_token": "enc-r", "integration_id": 9}
    record = TokenRecord.from_dict(data)

    assert record.id == 3
    assert record.integration_id == 9
    assert record.to_dict() == data


def test_token_record_integration_id_optional():
    record = TokenRecord.from_dict({"id": 1, "token": "a", "refresh_token": "r"})
    assert record.integration_id is None


def test_field_set_is_read_only():
    """Cached FieldSets are shared, so neither they nor their mappings can change."""
    source = {"X_Custom__c": "Custom X"}
    field_set = FieldSet(custom=source)

    with pytest.raises(TypeError):
        field_set.custom["Injected__c"] = "Injected"
    with pytest.raises(dataclasses.FrozenInstanceError):
        field_set.custom = {}

    source["Later__c"] = "Later"
    assert "Later__c" not in field_set.custom
    assert field_set.to_dict()["custom"] == {"X_Custom__c": "Custom X"}
