"""CRM connector: cached, token-refreshing access to CRM schema metadata."""

from .core import (
    ObjectType,
    ClientConfig,
    OAuthSettings,
    FieldSet,
    TokenRecord,
    ConfigError,
    InvalidObjectTypeError,
    CredentialNotFoundError,
    Crypter,
    TTLFieldCache,
    InMemoryCredentialStore,
    JsonCredentialStore,
)
from .client import (
    CrmApiClient,
    APIError,
    RemoteTransportError,
    AuthenticationFailedError,
    RemoteUnavailableError,
    TokenRefreshError,
    build_client,
)

__all__ = [
    "ObjectType",
    "ClientConfig",
    "OAuthSettings",
    "FieldSet",
    "TokenRecord",
    "ConfigError",
    "InvalidObjectTypeError",
    "CredentialNotFoundError",
    "Crypter",
    "TTLFieldCache",
    "InMemoryCredentialStore",
    "JsonCredentialStore",
    "CrmApiClient",
    "APIError",
    "RemoteTransportError",
    "AuthenticationFailedError",
    "RemoteUnavailableError",
    "TokenRefreshError",
    "build_client",
]
