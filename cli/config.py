"""Configuration management for the ShareBox CLI."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from common.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / '.sharebox' / 'config.json'


class Config:
    """Manages CLI configuration stored in a JSON file."""

    DEFAULT_CONFIG = {
        "server_url": os.environ.get("SHAREBOX_SERVER_URL", "http://localhost:8000"),
        "timeout": 30,
        "max_retries": 3,
        "retry_backoff_multiplier": 2,
    }

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.sharebox/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, writing defaults if it does not exist.

        A corrupt file is backed up to config.json.bak and replaced by defaults.
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.sharebox' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.config_path.exists():
            config = self.DEFAULT_CONFIG.copy()
            self._write(config)
            return config

        try:
            with open(self.config_path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not read config {self.config_path}: {e}")
            backup_path = self.config_path.with_suffix('.json.bak')
            try:
                shutil.copy(self.config_path, backup_path)
            except OSError as copy_error:
                logger.warning(f"Could not back up config: {copy_error}")
            return self.DEFAULT_CONFIG.copy()

        config = self.DEFAULT_CONFIG.copy()
        if isinstance(data, dict):
            config.update(data)
        return config

    def _write(self, data: dict) -> None:
        try:
            with open(self.config_path, 'w') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not write config {self.config_path}: {e}")

    def save(self) -> None:
        """Save current configuration to file."""
        self._write(self.data)

    def get_token(self) -> Optional[str]:
        """Return the stored access token, or None when logged out."""
        return self.data.get('token')

    def set_token(self, token: str, username: Optional[str] = None) -> None:
        """
        Store an access token and save to file.

        Args:
            token: Access token returned by register or login
            username: Account the token belongs to
        """
        self.data['token'] = token
        if username:
            self.data['username'] = username
        self.save()

    def clear_token(self) -> None:
        """Forget the stored token and username."""
        self.data.pop('token', None)
        self.data.pop('username', None)
        self.save()

    def get_username(self) -> Optional[str]:
        return self.data.get('username')

    def get_base_url(self) -> str:
        """
        Get server base URL.

        Returns:
            Base URL string without trailing slash (e.g., "http://localhost:8000")
        """
        return str(self.data.get('server_url', 'http://localhost:8000')).rstrip('/')

    def get_timeout(self) -> int:
        return self.data.get('timeout', 30)

    def get_retry_config(self) -> dict:
        """
        Get retry configuration.

        Returns:
            Dictionary with 'max_retries' and 'retry_backoff_multiplier'
        """
        return {
            'max_retries': self.data.get('max_retries', 3),
            'retry_backoff_multiplier': self.data.get('retry_backoff_multiplier', 2),
        }
