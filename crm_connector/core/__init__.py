"""Core components for the CRM connector."""

from .models import (
    ObjectType,
    ClientConfig,
    OAuthSettings,
    FieldDescriptor,
    FieldSet,
    TokenRecord,
    ConfigError,
    InvalidObjectTypeError,
    CredentialNotFoundError,
    parse_object_type,
)
from .config_store import (
    get_base_dir,
    config_path,
    save_json,
    load_json,
    save_oauth_settings,
    load_oauth_settings,
)
from .crypto import Crypter
from .cache import FieldCache, TTLFieldCache, field_cache_key, get_default_field_cache
from .credentials import CredentialStore, InMemoryCredentialStore, JsonCredentialStore

__all__ = [
    "ObjectType",
    "ClientConfig",
    "OAuthSettings",
    "FieldDescriptor",
    "FieldSet",
    "TokenRecord",
    "ConfigError",
    "InvalidObjectTypeError",
    "CredentialNotFoundError",
    "parse_object_type",
    "get_base_dir",
    "config_path",
    "save_json",
    "load_json",
    "save_oauth_settings",
    "load_oauth_settings",
    "Crypter",
    "FieldCache",
    "TTLFieldCache",
    "field_cache_key",
    "get_default_field_cache",
    "CredentialStore",
    "InMemoryCredentialStore",
    "JsonCredentialStore",
]
