"""File-based storage for the urlscan.io API key."""

import json
import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path

from ..config import API_KEY_ENV, KEY_FILE, KEY_FORMAT_VERSION

logger = logging.getLogger(__name__)

API_KEY_PATTERN = re.compile(
    r"^[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}$", re.IGNORECASE
)


def is_valid_api_key(api_key: str | None) -> bool:
    """API keys are UUIDs."""
    return bool(api_key) and bool(API_KEY_PATTERN.match(api_key))


class CredentialStore:
    """
    Stores the API key in ``key.json`` inside the app directory.

    The ``URLSCAN_API_KEY`` environment variable takes precedence over the file.

    Usage:
        store = CredentialStore(app_dir)
        store.save_key("0b1c...")
        api_key = store.get_key()
    """

    def __init__(self, app_dir: Path, use_env: bool = True):
        self.app_dir = Path(app_dir)
        self.key_file = self.app_dir / KEY_FILE
        self.use_env = use_env

    def has_key(self) -> bool:
        return self._env_key() is not None or self.key_file.exists()

    def get_key(self) -> str | None:
        """
        Get the API key.

        Returns:
            The key, or None if missing, unreadable or malformed.
        """
        env_key = self._env_key()
        if env_key is not None:
            if is_valid_api_key(env_key):
                return env_key
            logger.error("%s is set but is not a valid API key", API_KEY_ENV)
            return None

        if not self.key_file.exists():
            return None

        try:
            data = json.loads(self.key_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Could not read %s: %s", self.key_file, e)
            return None

        if not isinstance(data, dict):
            logger.error("Key file %s is malformed", self.key_file)
            return None
        if data.get("version") != KEY_FORMAT_VERSION:
            logger.warning("Key file format is outdated, set the API key again")
            return None

        api_key = data.get("key")
        if not is_valid_api_key(api_key):
            logger.error("Stored API key is invalid or corrupted")
            return None
        return api_key

    def save_key(self, api_key: str) -> Path:
        """
        Store the API key, readable only by the owner on POSIX.

        Raises:
            ValueError: The key is not UUID-shaped.
        """
        api_key = api_key.strip()
        if not is_valid_api_key(api_key):
            raise ValueError("Invalid API key, expected a UUID")

        now = datetime.now(timezone.utc).isoformat()
        created_at = now
        if self.key_file.exists():
            try:
                previous = json.loads(self.key_file.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError):
                previous = None
            if isinstance(previous, dict):
                created_at = previous.get("created_at", now)

        self.app_dir.mkdir(parents=True, exist_ok=True)
        self.key_file.write_text(
            json.dumps({
                "version": KEY_FORMAT_VERSION,
                "key": api_key,
                "created_at": created_at,
                "updated_at": now,
            }, indent=2),
            encoding="utf-8",
        )
        if os.name == "posix":
            self.key_file.chmod(0o600)

        logger.info("API key saved to %s", self.key_file)
        return self.key_file

    def remove_key(self) -> bool:
        """
        Delete the stored key.

        Returns:
            True if deleted, False if there was nothing to delete.
        """
        if self.key_file.exists():
            self.key_file.unlink()
            logger.info("API key removed")
            return True
        return False

    def masked(self) -> str | None:
        """Key shortened for display, e.g. ``0b1c2d3e...9f0a``."""
        api_key = self.get_key()
        if not api_key:
            return None
        return f"{api_key[:8]}...{api_key[-4:]}"

    def _env_key(self) -> str | None:
        if not self.use_env:
            return None
        value = os.environ.get(API_KEY_ENV, "").strip()
        return value or None
