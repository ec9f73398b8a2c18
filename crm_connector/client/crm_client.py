"""
CRM API Client

Reads schema metadata from a Salesforce-style REST API, refreshing an
expired OAuth access token once per call and caching field lists per
integration.
"""

import logging
from typing import Any, Callable, TypeVar

import httpx
from semantic_version import Version

from ..core.cache import FieldCache, field_cache_key, get_default_field_cache
from ..core.credentials import CredentialStore
from ..core.crypto import Crypter
from ..core.models import (
    ClientConfig,
    ConfigError,
    CredentialNotFoundError,
    FieldDescriptor,
    FieldSet,
    OAuthSettings,
    ObjectType,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class APIError(Exception):
    """Base class for failures talking to the remote API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RemoteTransportError(APIError):
    """Raised on network failures and non-2xx responses other than 401."""
    pass


class AuthenticationFailedError(APIError):
    """Raised when the remote API rejects the bearer token."""
    pass


class RemoteUnavailableError(APIError):
    """Raised when the remote API reports no usable API versions."""
    pass


class TokenRefreshError(APIError):
    """Raised when the token endpoint does not return an access token."""
    pass


class CrmApiClient:
    """
    Authenticated client for the CRM REST API.

    Features:
    - Immutable configuration; ``with_*`` methods return a new client
    - Latest API version discovery
    - Field metadata fetch, cached per integration and object type
    - One token refresh and retry when a request gets a 401
    """

    def __init__(
        self,
        config: ClientConfig,
        oauth: OAuthSettings,
        credential_store: CredentialStore,
        crypter: Crypter,
        cache: FieldCache | None = None,
        http_client: httpx.Client | None = None,
        timeout_seconds: float = 10.0,
    ):
        """
        Initialize the client.

        Args:
            config: Connection parameters
            oauth: Client id/secret for the refresh-token grant
            credential_store: Where refreshed access tokens are persisted
            crypter: Decrypts the refresh token and encrypts new access tokens
            cache: Field cache (process-wide TTL cache if None)
            http_client: Optional httpx client (created if None)
            timeout_seconds: Request timeout in seconds
        """
        self._config = config
        self.oauth = oauth
        self.credential_store = credential_store
        self.crypter = crypter
        self.cache = cache if cache is not None else get_default_field_cache()
        self.timeout_seconds = timeout_seconds

        # Track if we own the HTTP client (for cleanup)
        self._owns_client = http_client is None

        if http_client is None:
            self.http_client = httpx.Client(timeout=timeout_seconds)
        else:
            self.http_client = http_client

    @classmethod
    def create(
        cls,
        domain: str,
        access_token: str,
        refresh_token: str,
        **kwargs: Any,
    ) -> "CrmApiClient":
        """
        Create a client without touching the network.

        Args:
            domain: Instance URL (e.g., "https://acme.my.salesforce.com")
            access_token: Plain bearer token
            refresh_token: Refresh token as persisted (encrypted)
            **kwargs: Collaborators forwarded to the constructor

        Returns:
            A client with no object type or API version configured yet
        """
        config = ClientConfig(
            domain=domain,
            access_token=access_token,
            refresh_token=refresh_token,
        )
        return cls(config, **kwargs)

    def _derive(self, config: ClientConfig) -> "CrmApiClient":
        """
        Build a sibling client sharing this client's collaborators.

        The httpx transport is shared and so is its ownership: closing any
        client derived from an owning client closes the transport for all
        of them.
        """
        client = CrmApiClient(
            config,
            oauth=self.oauth,
            credential_store=self.credential_store,
            crypter=self.crypter,
            cache=self.cache,
            http_client=self.http_client,
            timeout_seconds=self.timeout_seconds,
        )
        client._owns_client = self._owns_client
        return client

    def with_api_version(self, version: str) -> "CrmApiClient":
        """
        Return a client targeting the given API version (e.g., "60.0").

        The new client shares this client's HTTP transport; see close().
        """
        return self._derive(self._config.with_api_version(version))

    def with_object_type(self, object_type: ObjectType | str) -> "CrmApiClient":
        """
        Return a client describing the given object type.

        The new client shares this client's HTTP transport; see close().

        Raises:
            InvalidObjectTypeError: Unless object_type is Contact, Lead or Account
        """
        return self._derive(self._config.with_object_type(object_type))

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def access_token(self) -> str:
        return self._config.access_token

    def close(self) -> None:
        """
        Close the HTTP client if we created it.

        Clients returned by the with_* methods share one transport, so this
        closes it for every one of them. An injected http_client is never
        closed.
        """
        if self._owns_client and self.http_client:
            self.http_client.close()

    def __enter__(self):
        """Context manager support."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager cleanup."""
        self.close()
        return False

    def _build_url(self, path: str) -> str:
        """
        Build full URL from the configured domain and path.

        Args:
            path: API path (e.g., "/services/data")

        Returns:
            Full URL
        """
        return f"{self._config.base_url}/{path.lstrip('/')}"

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send a single request and classify the outcome.

        Raises:
            AuthenticationFailedError: On a 401 response
            RemoteTransportError: On network errors or any other non-2xx
        """
        url = self._build_url(path)
        logger.debug(f"{method} {url}")

        try:
            response = self.http_client.request(method=method, url=url, **kwargs)
        except httpx.RequestError as e:
            raise RemoteTransportError(f"Request failed: {e}") from e

        if 200 <= response.status_code < 300:
            return response

        if response.status_code == 401:
            raise AuthenticationFailedError(
                f"Authentication failed: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

        raise RemoteTransportError(
            f"API request failed: {response.status_code} {response.text}",
            status_code=response.status_code,
        )

    def _decode(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise RemoteTransportError(
                f"Invalid JSON in response: {e}",
                status_code=response.status_code,
            ) from e

    def _get_json(self, path: str) -> Any:
        """Make an authenticated GET and return the decoded body."""
        headers = {"Authorization": f"Bearer {self._config.access_token}"}
        return self._decode(self._send("GET", path, headers=headers))

    def _with_token_refresh(self, call: Callable[[], T]) -> T:
        """
        Run call, refreshing the access token and retrying once on a 401.

        A second 401 propagates as AuthenticationFailedError.
        """
        try:
            return call()
        except AuthenticationFailedError:
            logger.warning("Access token rejected, refreshing and retrying once")
            self._refresh_access_token(self._config.refresh_token)
            return call()

    def get_latest_api_version(self) -> str:
        """
        Discover the newest API version offered by the remote service.

        Returns:
            Highest version string (e.g., "60.0")

        Raises:
            RemoteUnavailableError: If the service lists no versions
            AuthenticationFailedError: If the token is rejected after a refresh
            RemoteTransportError: On any other failure
        """
        versions = self._with_token_refresh(lambda: self._get_json("/services/data"))

        if not versions:
            raise RemoteUnavailableError("Unable to retrieve API versions")

        try:
            ranked = sorted(
                versions,
                key=lambda entry: Version.coerce(str(entry["version"])),
                reverse=True,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteTransportError(f"Unexpected version list: {e}") from e

        latest = str(ranked[0]["version"])
        logger.info(f"Latest API version is {latest}")
        return latest

    def get_fields(self, integration_id: int) -> FieldSet:
        """
        Get the custom and default fields of the configured object type.

        Results are cached per integration and object type for an hour, and
        every caller within that window receives the same read-only FieldSet.
        A refresh-and-retry goes back to the network, never to the cache.

        Args:
            integration_id: Integration the fields belong to

        Returns:
            FieldSet for the configured object type

        Raises:
            ConfigError: If object type or API version is not configured
        """
        object_type = self._config.object_type
        if object_type is None or not self._config.api_version:
            raise ConfigError("Object type and API version must be configured before fetching fields")

        key = field_cache_key(integration_id, object_type)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        fields = self._with_token_refresh(self._fetch_fields)
        self.cache.set(key, fields)
        logger.info(
            f"Fetched {len(fields.custom)} custom and {len(fields.default)} default "
            f"{object_type.value} fields for integration {integration_id}"
        )
        return fields

    def _fetch_fields(self) -> FieldSet:
        path = (
            f"/services/data/v{self._config.api_version}"
            f"/sobjects/{self._config.object_type.value}/describe"
        )
        metadata = self._get_json(path)

        try:
            descriptors = [FieldDescriptor.from_dict(f) for f in metadata["fields"]]
        except (KeyError, TypeError, AttributeError) as e:
            raise RemoteTransportError(f"Unexpected describe payload: {e}") from e

        return FieldSet.from_descriptors(descriptors)

    def _refresh_access_token(self, refresh_token: str) -> str:
        """
        Exchange the refresh token for a new access token.

        The new token is persisted (encrypted) on the stored credential that
        holds refresh_token, then used for subsequent requests.

        Args:
            refresh_token: Refresh token as persisted (encrypted)

        Returns:
            The new access token

        Raises:
            RemoteTransportError: If the token endpoint returns any non-2xx
            TokenRefreshError: If the grant response has no access_token
            CredentialNotFoundError: If no stored credential holds refresh_token
        """
        try:
            response = self._send(
                "POST",
                self.oauth.token_path,
                data={
                    "grant_type": "refresh_token",
                    "refresh_token": self.crypter.decrypt(refresh_token),
                    "client_id": self.oauth.client_id,
                    "client_secret": self.oauth.client_secret,
                },
            )
        except AuthenticationFailedError as e:
            # 401 here means the grant was rejected, not the bearer token
            raise RemoteTransportError(
                f"Token endpoint rejected the refresh grant: {e}",
                status_code=e.status_code,
            ) from e

        token_data = self._decode(response)

        access_token = token_data.get("access_token") if isinstance(token_data, dict) else None
        if not access_token:
            raise TokenRefreshError("Failed to refresh the access token", status_code=response.status_code)

        record = self.credential_store.find_by_refresh_token(refresh_token)
        if record is None:
            raise CredentialNotFoundError("No stored credential matches the refresh token")

        self.credential_store.update_access_token(record.id, self.crypter.encrypt(access_token))
        self._config = self._config.with_access_token(access_token)

        logger.info(f"Refreshed access token for credential {record.id}")
        return access_token
