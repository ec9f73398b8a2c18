"""Core data models for the CRM connector."""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class ObjectType(Enum):
    """CRM object categories whose schema can be described."""
    CONTACT = "Contact"
    LEAD = "Lead"
    ACCOUNT = "Account"


class ConfigError(Exception):
    """Raised when there is an error loading or saving configuration."""
    pass


class InvalidObjectTypeError(ConfigError, ValueError):
    """Raised when an unsupported object type is configured."""
    pass


class CredentialNotFoundError(Exception):
    """Raised when no stored credential matches a token."""
    pass


def parse_object_type(value: "ObjectType | str") -> ObjectType:
    """
    Coerce a string or ObjectType into an ObjectType.

    Args:
        value: Object type name (e.g., "Contact") or ObjectType member

    Returns:
        The matching ObjectType

    Raises:
        InvalidObjectTypeError: If value is not Contact, Lead or Account
    """
    if isinstance(value, ObjectType):
        return value
    try:
        return ObjectType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in ObjectType)
        raise InvalidObjectTypeError(
            f"Invalid object type '{value}'. Allowed types are: {allowed}."
        ) from None


@dataclass(frozen=True)
class OAuthSettings:
    """OAuth client credentials used for the refresh-token grant."""
    client_id: str
    client_secret: str
    token_path: str = "/services/oauth2/token"


@dataclass(frozen=True)
class ClientConfig:
    """
    Connection parameters for a CrmApiClient.

    Instances are immutable; the ``with_*`` methods return a new config.
    ``refresh_token`` is kept exactly as persisted (encrypted).
    """
    domain: str
    access_token: str = field(repr=False)
    refresh_token: str = field(repr=False)
    object_type: ObjectType | None = None
    api_version: str | None = None

    def __post_init__(self):
        if self.object_type is not None:
            object.__setattr__(self, "object_type", parse_object_type(self.object_type))

    def with_api_version(self, version: str) -> "ClientConfig":
        return replace(self, api_version=version)

    def with_object_type(self, object_type: "ObjectType | str") -> "ClientConfig":
        return replace(self, object_type=parse_object_type(object_type))

    def with_access_token(self, access_token: str) -> "ClientConfig":
        return replace(self, access_token=access_token)

    @property
    def base_url(self) -> str:
        return self.domain.rstrip("/")


@dataclass(frozen=True)
class FieldDescriptor:
    """A single field from a remote schema description."""
    name: str
    label: str
    is_custom: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FieldDescriptor":
        """Create a FieldDescriptor from a describe payload entry."""
        label = data.get("label")
        return cls(
            name=data["name"],
            label=label if label is not None else "",
            is_custom=bool(data.get("custom", False)),
        )


@dataclass(frozen=True)
class FieldSet:
    """
    Field names mapped to labels, partitioned into custom and default.

    Instances are shared through the field cache, so both mappings are
    read-only views.
    """
    custom: Mapping[str, str] = field(default_factory=dict)
    default: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "custom", MappingProxyType(dict(self.custom)))
        object.__setattr__(self, "default", MappingProxyType(dict(self.default)))

    @classmethod
    def from_descriptors(cls, descriptors: list[FieldDescriptor]) -> "FieldSet":
        """Partition descriptors by their custom flag."""
        custom: dict[str, str] = {}
        default: dict[str, str] = {}
        for descriptor in descriptors:
            if descriptor.is_custom:
                custom[descriptor.name] = descriptor.label
            else:
                default[descriptor.name] = descriptor.label
        return cls(custom=custom, default=default)

    def to_dict(self) -> dict[str, dict[str, str]]:
        """Convert FieldSet to a dictionary."""
        return {
            "custom": dict(self.custom),
            "default": dict(self.default),
        }


@dataclass
class TokenRecord:
    """
    A persisted OAuth credential.

    Both ``token`` (the access token) and ``refresh_token`` are stored
    encrypted.
    """
    id: int
    token: str
    refresh_token: str
    integration_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert TokenRecord to a dictionary."""
        return {
            "id": self.id,
            "token": self.token,
            "refresh_token": self.refresh_token,
            "integration_id": self.integration_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TokenRecord":
        """Create TokenRecord from a dictionary."""
        return cls(
            id=data["id"],
            token=data["token"],
            refresh_token=data["refresh_token"],
            integration_id=data.get("integration_id"),
        )
