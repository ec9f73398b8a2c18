"""
Builder module for wiring a CrmApiClient from stored credentials.

This module provides the build_client function that combines a persisted
token record, OAuth settings and the encryption key into a ready client.
"""

import logging

import httpx

from ..core import CredentialStore, Crypter, FieldCache, OAuthSettings, ObjectType
from .crm_client import CrmApiClient

logger = logging.getLogger(__name__)


def build_client(
    token_id: int,
    domain: str,
    object_type: ObjectType | str,
    oauth: OAuthSettings,
    credential_store: CredentialStore,
    crypter: Crypter,
    api_version: str | None = None,
    cache: FieldCache | None = None,
    http_client: httpx.Client | None = None,
) -> CrmApiClient:
    """
    Build a configured client for a stored credential.

    Args:
        token_id: Id of the TokenRecord to connect with
        domain: Instance URL of the CRM
        object_type: Contact, Lead or Account
        oauth: Client id/secret for token refresh
        credential_store: Store holding the TokenRecord
        crypter: Decrypts the stored access token
        api_version: API version to use (latest is discovered if None)
        cache: Field cache (process-wide if None)
        http_client: Optional httpx client

    Returns:
        CrmApiClient with object type and API version set

    Raises:
        CredentialNotFoundError: If token_id is not stored
        InvalidObjectTypeError: If object_type is not supported
        APIError: If API version discovery fails

    Example:
        >>> client = build_client(7, "https://acme.my.salesforce.com", "Contact",
        ...                       oauth, JsonCredentialStore(), Crypter.from_env())
        >>> fields = client.get_fields(42)
        >>> client.close()
    """
    record = credential_store.get(token_id)

    client = CrmApiClient.create(
        domain,
        crypter.decrypt(record.token),
        record.refresh_token,
        oauth=oauth,
        credential_store=credential_store,
        crypter=crypter,
        cache=cache,
        http_client=http_client,
    ).with_object_type(object_type)

    if api_version is None:
        api_version = client.get_latest_api_version()
        logger.debug(f"Using discovered API version {api_version} for token {token_id}")

    return client.with_api_version(api_version)
