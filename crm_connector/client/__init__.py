"""
Client for the CRM REST API.

Provides the token-refreshing, cached CrmApiClient and a builder that
wires it from stored credentials.
"""

from .crm_client import (
    CrmApiClient,
    APIError,
    RemoteTransportError,
    AuthenticationFailedError,
    RemoteUnavailableError,
    TokenRefreshError,
)
from .builder import build_client

__all__ = [
    "CrmApiClient",
    "APIError",
    "RemoteTransportError",
    "AuthenticationFailedError",
    "RemoteUnavailableError",
    "TokenRefreshError",
    "build_client",
]
