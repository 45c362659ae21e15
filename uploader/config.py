"""Configuration management for the media uploader."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from common.constants import (
    API_KEY_ENV_VAR,
    CHUNK_SIZE_BYTES,
    DEFAULT_TIMEOUT_SECONDS,
    SESSION_BASE_URL,
    UPLOAD_BASE_URL,
    VIDEOS_BASE_URL,
)
from common.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / '.media-uploader' / 'config.json'


class Config:
    """Manages uploader configuration stored in a JSON file."""

    DEFAULT_CONFIG = {
        "upload_base_url": os.environ.get("BMDRM_UPLOAD_BASE_URL", UPLOAD_BASE_URL),
        "session_base_url": os.environ.get("BMDRM_SESSION_BASE_URL", SESSION_BASE_URL),
        "videos_base_url": os.environ.get("BMDRM_VIDEOS_BASE_URL", VIDEOS_BASE_URL),
        "chunk_size": CHUNK_SIZE_BYTES,
        "timeout": DEFAULT_TIMEOUT_SECONDS,
        "max_retries": 0,
        "retry_backoff_multiplier": 2,
        "strict_state_check": False,
    }

    def __init__(self, config_path: Optional[Path] = None, persist: bool = True):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (defaults to ~/.media-uploader/config.json)
            persist: Read and write the config file; False keeps defaults in memory only
        """
        if not persist:
            self.config_path = None
            self.data = self.DEFAULT_CONFIG.copy()
            return
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self.data = self._load()

    @classmethod
    def in_memory(cls, **overrides) -> 'Config':
        """Defaults plus overrides, never read from or written to disk."""
        config = cls(persist=False)
        config.data.update(overrides)
        return config

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.media-uploader' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        config = self.DEFAULT_CONFIG.copy()

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    config.update(json.load(f))
                return config
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Unreadable config at {self.config_path}, using defaults: {e}")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except IOError as copy_error:
                    logger.warning(f"Could not back up config: {copy_error}")
                return self.DEFAULT_CONFIG.copy()

        try:
            with open(self.config_path, 'w') as f:
                json.dump(config, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not write default config to {self.config_path}: {e}")
        return config

    def save(self) -> None:
        """Save current configuration to file; in-memory configs keep changes in memory."""
        if self.config_path is None:
            return
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not save config to {self.config_path}: {e}")

    def get_api_key(self) -> Optional[str]:
        """
        Get the ingestion API key.

        A key stored in the config file wins over the BMDRM_API_KEY environment variable.
        """
        return self.data.get('api_key') or os.environ.get(API_KEY_ENV_VAR) or None

    def set_api_key(self, key: str) -> None:
        """Set API key and save to file."""
        self.data['api_key'] = key
        self.save()

    def get_upload_base_url(self) -> str:
        return self.data.get('upload_base_url', UPLOAD_BASE_URL).rstrip('/')

    def get_upload_root_url(self) -> str:
        """
        Get the ingestion API root, one level above the file-upload endpoints.

        Returns:
            e.g. "https://uploads.bmdrm.com/api" for the default upload base URL
        """
        base = self.get_upload_base_url()
        suffix = '/public/fileupload'
        if base.lower().endswith(suffix):
            return base[:-len(suffix)]
        return base

    def get_session_base_url(self) -> str:
        return self.data.get('session_base_url', SESSION_BASE_URL).rstrip('/')

    def get_videos_base_url(self) -> str:
        return self.data.get('videos_base_url', VIDEOS_BASE_URL).rstrip('/')

    def get_chunk_size(self) -> int:
        return int(self.data.get('chunk_size', CHUNK_SIZE_BYTES))

    def get_timeout(self) -> float:
        """
        Get request timeout in seconds.

        Returns:
            Timeout value in seconds
        """
        return float(self.data.get('timeout', DEFAULT_TIMEOUT_SECONDS))

    def get_retry_config(self) -> dict:
        """
        Get retry configuration.

        Returns:
            Dictionary with 'max_retries' and 'retry_backoff_multiplier'
        """
        return {
            'max_retries': int(self.data.get('max_retries', 0)),
            'retry_backoff_multiplier': self.data.get('retry_backoff_multiplier', 2),
        }

    def is_strict_state_check(self) -> bool:
        return bool(self.data.get('strict_state_check', False))
