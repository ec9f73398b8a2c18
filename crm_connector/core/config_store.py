"""Configuration and persistence for connector settings."""

import json
import logging
import os
from pathlib import Path

from .models import OAuthSettings, ConfigError

logger = logging.getLogger(__name__)

CLIENT_ID_ENV = "CRM_CONNECTOR_CLIENT_ID"
CLIENT_SECRET_ENV = "CRM_CONNECTOR_CLIENT_SECRET"


def get_base_dir() -> Path:
    """
    Get the base directory for storing configuration.

    The directory is determined by:
    1. Environment variable CRM_CONNECTOR_HOME if set
    2. Otherwise, ~/.crm_connector

    The directory is created if it does not exist.

    Returns:
        Path to the base directory
    """
    env_home = os.environ.get("CRM_CONNECTOR_HOME")
    if env_home:
        base_dir = Path(env_home)
    else:
        base_dir = Path.home() / ".crm_connector"

    base_dir.mkdir(parents=True, exist_ok=True)
    return base_dir


def config_path(name: str, suffix: str = "config") -> Path:
    """
    Get the path for a named configuration file.

    Args:
        name: Configuration name (e.g., "oauth", "credentials")
        suffix: File suffix (default: "config")

    Returns:
        Path to the configuration file
    """
    return get_base_dir() / f"{name}_{suffix}.json"


def save_json(name: str, suffix: str, data: dict | list) -> Path:
    """
    Save data as JSON to a configuration file.

    Args:
        name: Configuration name
        suffix: File suffix
        data: JSON-serialisable data

    Returns:
        Path to the saved file
    """
    path = config_path(name, suffix)
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
        logger.debug(f"Saved JSON to {path}")
        return path
    except (OSError, TypeError) as e:
        raise ConfigError(f"Failed to save JSON to {path}: {e}") from e


def load_json(name: str, suffix: str) -> dict | list:
    """
    Load JSON data from a configuration file.

    Raises:
        ConfigError: If the file does not exist or JSON is invalid
    """
    path = config_path(name, suffix)

    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with open(path, "r") as f:
            data = json.load(f)
        logger.debug(f"Loaded JSON from {path}")
        return data
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to load JSON from {path}: {e}") from e


def save_oauth_settings(settings: OAuthSettings) -> Path:
    """Persist OAuth client settings to the base directory."""
    return save_json("oauth", "settings", {
        "client_id": settings.client_id,
        "client_secret": settings.client_secret,
        "token_path": settings.token_path,
    })


def load_oauth_settings() -> OAuthSettings:
    """
    Resolve OAuth client settings for an enclosing application.

    Environment variables CRM_CONNECTOR_CLIENT_ID and
    CRM_CONNECTOR_CLIENT_SECRET take precedence; otherwise the settings
    file written by save_oauth_settings() is used.

    Returns:
        The resolved OAuthSettings

    Raises:
        ConfigError: If no complete client id/secret pair is available
    """
    client_id = os.environ.get(CLIENT_ID_ENV)
    client_secret = os.environ.get(CLIENT_SECRET_ENV)
    if client_id and client_secret:
        return OAuthSettings(client_id=client_id, client_secret=client_secret)

    data = load_json("oauth", "settings")
    try:
        return OAuthSettings(
            client_id=data["client_id"],
            client_secret=data["client_secret"],
            token_path=data.get("token_path", OAuthSettings.token_path),
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise ConfigError(f"Incomplete OAuth settings: {e}") from e
