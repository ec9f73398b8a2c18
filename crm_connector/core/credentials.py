"""Stores for persisted OAuth credentials."""

import logging
from abc import ABC, abstractmethod

from .config_store import config_path, load_json, save_json
from .models import TokenRecord, CredentialNotFoundError, ConfigError

logger = logging.getLogger(__name__)


class CredentialStore(ABC):
    """
    Abstract base class for token persistence.

    Tokens are handed over and returned exactly as stored (encrypted);
    stores never decrypt.
    """

    @abstractmethod
    def get(self, record_id: int) -> TokenRecord:
        """
        Retrieve a record by id.

        Raises:
            CredentialNotFoundError: If no record has that id
        """
        pass

    @abstractmethod
    def find_by_refresh_token(self, refresh_token: str) -> TokenRecord | None:
        """Return the record holding refresh_token, or None."""
        pass

    @abstractmethod
    def save(self, record: TokenRecord) -> TokenRecord:
        """Insert or overwrite a record."""
        pass

    def update_access_token(self, record_id: int, token: str) -> TokenRecord:
        """
        Replace the stored (encrypted) access token of a record.

        Raises:
            CredentialNotFoundError: If no record has that id
        """
        record = self.get(record_id)
        record.token = token
        return self.save(record)


class InMemoryCredentialStore(CredentialStore):
    """CredentialStore kept in a dict, for tests and embedding."""

    def __init__(self, records: list[TokenRecord] | None = None):
        self._records: dict[int, TokenRecord] = {}
        for record in records or []:
            self.save(record)

    def get(self, record_id: int) -> TokenRecord:
        if record_id not in self._records:
            raise CredentialNotFoundError(f"Token {record_id} not found")
        return self._records[record_id]

    def find_by_refresh_token(self, refresh_token: str) -> TokenRecord | None:
        for record in self._records.values():
            if record.refresh_token == refresh_token:
                return record
        return None

    def save(self, record: TokenRecord) -> TokenRecord:
        self._records[record.id] = record
        return record


class JsonCredentialStore(CredentialStore):
    """
    CredentialStore persisted as a JSON list in the connector home directory.

    The file is re-read on every call so that several processes see each
    other's refreshes; concurrent writes are not locked and the last one
    wins.
    """

    def __init__(self, name: str = "credentials"):
        self.name = name

    @property
    def path(self):
        return config_path(self.name, "tokens")

    def _load(self) -> dict[int, TokenRecord]:
        if not self.path.exists():
            return {}
        data = load_json(self.name, "tokens")
        if not isinstance(data, list):
            raise ConfigError(f"Expected a list of tokens in {self.path}")
        try:
            records = [TokenRecord.from_dict(item) for item in data]
        except (KeyError, TypeError) as e:
            raise ConfigError(f"Failed to parse tokens in {self.path}: {e}") from e
        return {record.id: record for record in records}

    def _dump(self, records: dict[int, TokenRecord]) -> None:
        ordered = sorted(records.values(), key=lambda r: r.id)
        save_json(self.name, "tokens", [r.to_dict() for r in ordered])

    def get(self, record_id: int) -> TokenRecord:
        records = self._load()
        if record_id not in records:
            raise CredentialNotFoundError(f"Token {record_id} not found in {self.path}")
        return records[record_id]

    def find_by_refresh_token(self, refresh_token: str) -> TokenRecord | None:
        for record in self._load().values():
            if record.refresh_token == refresh_token:
                return record
        return None

    def save(self, record: TokenRecord) -> TokenRecord:
        records = self._load()
        records[record.id] = record
        self._dump(records)
        logger.debug(f"Saved token {record.id} to {self.path}")
        return record
