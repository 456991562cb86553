"""
CrownSync - Configuration Manager

Handles loading and saving configuration from/to config.json.
Manages OS credential store integration for password storage.

Author: CrownSync Project
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional, Dict, Any

# Configure logging
logger = logging.getLogger(__name__)

KEYRING_SERVICE = "CrownSync"

MIN_SIDECAR_WORKERS = 1
MAX_SIDECAR_WORKERS = 8

# Default configuration values
DEFAULT_CONFIG = {
    "server_url": "http://localhost:3000/api",
    "verify_ssl": True,
    "username": None,  # Username stored in config, password in OS credential store
    "database_path": "crownsync.db",
    "remote_prefix": "sessions/",
    "remote_root_prefix": "CrownRFEP/",
    "max_items": 1000,
    "sidecar_workers": 4,
    "signed_url_minutes": 10,
    "request_timeout": 30,
    "import_scope": "all",  # "all" or "linked_sessions"
    "log_level": "INFO",
    "log_retention_days": 30
}


class ConfigManager:
    """
    Manages configuration and credentials.

    Responsibilities:
    - Load/save config.json next to the executable (same location as logs folder)
    - Store/retrieve password from OS credential store via keyring
    - Provide configuration values to other modules
    """

    def __init__(self, base_dir: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            base_dir: Directory holding config.json (defaults to the
                      executable's folder when frozen, else the cwd)
        """
        if base_dir is None:
            if getattr(sys, 'frozen', False):
                # Running as compiled executable
                base_dir = Path(sys.executable).parent
            else:
                # Running as script
                base_dir = Path.cwd()

        self.base_dir = Path(base_dir)
        self.config_file = self.base_dir / "config.json"
        self.config: Dict[str, Any] = {}

    def load_config(self) -> Dict[str, Any]:
        """
        Load configuration from config.json.
        Creates default config if file doesn't exist.

        Returns:
            Configuration dictionary
        """
        if self.config_file.exists():
            logger.debug(f"Loading configuration from {self.config_file}")
            with open(self.config_file, 'r', encoding='utf-8') as f:
                self.config = json.load(f)
            # Merge with defaults for any missing keys
            for key, value in DEFAULT_CONFIG.items():
                if key not in self.config:
                    self.config[key] = value
            logger.info("Configuration loaded successfully")
        else:
            logger.info(f"Configuration file not found, creating default at {self.config_file}")
            self.config = DEFAULT_CONFIG.copy()
            self.save_config()

        return self.config

    def save_config(self):
        """Save current configuration to config.json."""
        logger.debug(f"Saving configuration to {self.config_file}")
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self.config, f, indent=2)

    def get(self, key: str, default=None) -> Any:
        """
        Get configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        return self.config.get(key, default)

    def set(self, key: str, value: Any):
        """
        Set configuration value and save to file.

        Args:
            key: Configuration key
            value: Configuration value
        """
        self.config[key] = value
        self.save_config()

    def sidecar_workers(self) -> int:
        """Worker pool size for sidecar loads, clamped to 1..8."""
        try:
            workers = int(self.get("sidecar_workers", DEFAULT_CONFIG["sidecar_workers"]))
        except (TypeError, ValueError):
            logger.warning("Invalid sidecar_workers value, using default")
            workers = DEFAULT_CONFIG["sidecar_workers"]
        return max(MIN_SIDECAR_WORKERS, min(MAX_SIDECAR_WORKERS, workers))

    def store_credentials(self, username: str, password: str):
        """
        Store credentials in OS credential store.

        Args:
            username: Username (email) to store
            password: Password to store (securely in OS credential store)
        """
        import keyring

        logger.info(f"Storing credentials for user: {username}")

        # Store username in config.json
        self.set("username", username)

        # Store password in OS credential store
        keyring.set_password(KEYRING_SERVICE, username, password)

        logger.debug("Credentials stored successfully")

    def get_credentials(self) -> Optional[tuple[str, str]]:
        """
        Retrieve credentials from OS credential store.

        Returns:
            Tuple of (username, password) or None if not found
        """
        import keyring

        username = self.get("username")
        if not username:
            logger.warning("No username found in configuration")
            return None

        password = keyring.get_password(KEYRING_SERVICE, username)
        if not password:
            logger.warning(f"No password found in credential store for user: {username}")
            return None

        logger.debug(f"Credentials retrieved successfully for user: {username}")
        return (username, password)
