"""Configuration management for pybox.

Values are read from the environment first and then from a simple
``KEY=VALUE`` file stored at ``~/.config/pybox/config``.
"""

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://www.box.com"
DEFAULT_UPLOAD_URL = "https://upload.box.com"

API_KEY_VAR = "BOX_API_KEY"
AUTH_TOKEN_VAR = "BOX_AUTH_TOKEN"
API_URL_VAR = "BOX_API_URL"
UPLOAD_URL_VAR = "BOX_UPLOAD_URL"


class Config:
    """Reads and stores pybox settings."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Directory holding the config file. Defaults to
                       ~/.config/pybox/
        """
        if config_dir is None:
            config_dir = Path.home() / ".config" / "pybox"
        self.config_dir = config_dir
        self.config_file = config_dir / "config"

    def get_config_path(self) -> Path:
        """Return the path of the config file."""
        return self.config_file

    def _read_file(self) -> dict[str, str]:
        values: dict[str, str] = {}
        if not self.config_file.exists():
            return values

        try:
            with open(self.config_file, encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith("#") or "=" not in line:
                        continue
                    key, value = line.split("=", 1)
                    values[key.strip()] = value.strip()
        except OSError as e:
            logger.warning(f"Could not read config file {self.config_file}: {e}")
        return values

    def _get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = os.environ.get(key)
        if value:
            return value
        return self._read_file().get(key, default)

    def _save(self, key: str, value: Optional[str]) -> None:
        values = self._read_file()
        if value is None:
            values.pop(key, None)
        else:
            values[key] = value

        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            for k, v in values.items():
                f.write(f"{k}={v}\n")
        # Config holds credentials
        self.config_file.chmod(0o600)
        logger.debug(f"Saved {key} to {self.config_file}")

    @property
    def api_key(self) -> Optional[str]:
        return self._get(API_KEY_VAR)

    @property
    def auth_token(self) -> Optional[str]:
        return self._get(AUTH_TOKEN_VAR)

    @property
    def api_url(self) -> str:
        return self._get(API_URL_VAR) or DEFAULT_API_URL

    @property
    def upload_url(self) -> str:
        return self._get(UPLOAD_URL_VAR) or DEFAULT_UPLOAD_URL

    def is_configured(self) -> bool:
        """Check whether an API key is available."""
        return bool(self.api_key)

    def save_api_key(self, api_key: str) -> None:
        """Store the API key in the config file."""
        self._save(API_KEY_VAR, api_key)

    def save_auth_token(self, auth_token: Optional[str]) -> None:
        """Store (or remove, when None) the session auth token."""
        self._save(AUTH_TOKEN_VAR, auth_token)


# Global instance
config = Config()
