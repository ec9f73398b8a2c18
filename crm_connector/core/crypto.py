"""Symmetric encryption for tokens stored at rest."""

import os

from cryptography.fernet import Fernet, InvalidToken, MultiFernet

from .models import ConfigError

ENCRYPTION_KEYS_ENV = "CRM_CONNECTOR_ENCRYPTION_KEYS"


class Crypter:
    """
    Encrypts and decrypts token strings with Fernet.

    The first key encrypts; every key is tried when decrypting, so keys can
    be rotated by prepending a new one.
    """

    def __init__(self, keys: list[str | bytes]):
        if not keys:
            raise ConfigError("At least one encryption key is required")
        try:
            fernets = [Fernet(key) for key in keys]
        except (ValueError, TypeError) as e:
            raise ConfigError(f"Invalid encryption key: {e}") from e

        self._fernet = fernets[0] if len(fernets) == 1 else MultiFernet(fernets)

    @classmethod
    def from_env(cls) -> "Crypter":
        """Build a Crypter from the comma separated CRM_CONNECTOR_ENCRYPTION_KEYS."""
        raw = os.environ.get(ENCRYPTION_KEYS_ENV, "")
        keys = [key.strip() for key in raw.split(",") if key.strip()]
        if not keys:
            raise ConfigError(f"{ENCRYPTION_KEYS_ENV} is not set")
        return cls(keys)

    @staticmethod
    def generate_key() -> str:
        return Fernet.generate_key().decode()

    def encrypt(self, value: str) -> str:
        return self._fernet.encrypt(value.encode()).decode()

    def decrypt(self, value: str) -> str:
        try:
            return self._fernet.decrypt(value.encode()).decode()
        except InvalidToken as e:
            raise ConfigError("Unable to decrypt stored token") from e
