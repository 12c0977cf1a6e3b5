"""Configuration management module"""

import os
import copy
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from loguru import logger

from ..core.storage.database import default_shared_dir, DATABASE_FILE
from ..core.preferences.channel import PREFERENCES_FILE


class ConfigManager:
    """Manages application configuration"""

    DEFAULTS: Dict[str, Any] = {
        'storage': {
            'shared_dir': None,
            'database_file': DATABASE_FILE,
            'preferences_file': PREFERENCES_FILE,
            'busy_timeout': 5.0
        },
        'cleanup': {
            'vacuum_after_purge': False
        },
        'logging': {
            'level': 'INFO',
            'file_logging': True,
            'max_log_files': 7
        }
    }

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager

        Args:
            config_path: Path to configuration file
        """
        if config_path is None:
            config_path = str(default_shared_dir() / 'settings.yaml')

        self.config_path = config_path
        self.config: Dict[str, Any] = {}
        self._load_defaults()
        self._load_config()

    def _load_defaults(self):
        """Load default configuration"""
        self.config = copy.deepcopy(self.DEFAULTS)

    def _load_config(self):
        """Load user configuration"""
        try:
            if os.path.exists(self.config_path):
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    user_config = yaml.safe_load(f) or {}

                # Merge with defaults
                self._merge_config(self.config, user_config)
                logger.info(f"Loaded user configuration from {self.config_path}")

        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load user config: {e}")

    def _merge_config(self, base: Dict, updates: Dict):
        """
        Recursively merge configuration dictionaries

        Args:
            base: Base configuration
            updates: Updates to apply
        """
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def save(self) -> bool:
        """Save current configuration to file"""
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.config_path)), exist_ok=True)

            with open(self.config_path, 'w', encoding='utf-8') as f:
                yaml.dump(self.config, f, default_flow_style=False)

            logger.info(f"Configuration saved to {self.config_path}")
            return True

        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to save configuration: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value

        Args:
            key: Configuration key (dot notation supported)
            default: Default value if not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """
        Set configuration value

        Args:
            key: Configuration key (dot notation supported)
            value: Value to set
        """
        keys = key.split('.')
        config = self.config

        # Navigate to the parent
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value
        logger.debug(f"Set config: {key} = {value}")

    def reset(self):
        """Reset to default configuration"""
        self._load_defaults()
        logger.info("Configuration reset to defaults")

    @property
    def shared_dir(self) -> Path:
        """Directory holding the image database, preferences and logs"""
        configured = self.get('storage.shared_dir')
        return Path(configured) if configured else default_shared_dir()

    @property
    def database_path(self) -> Path:
        return self.shared_dir / self.get('storage.database_file', DATABASE_FILE)

    @property
    def preferences_path(self) -> Path:
        return self.shared_dir / self.get('storage.preferences_file', PREFERENCES_FILE)

    def validate(self) -> bool:
        """
        Validate configuration

        Returns:
            True if valid
        """
        for key in ('storage.database_file', 'storage.preferences_file'):
            if not self.get(key):
                logger.error(f"Missing required config: {key}")
                return False

        if self.get('storage.database_file') == self.get('storage.preferences_file'):
            logger.error("Image database and preferences must use different files")
            return False

        timeout = self.get('storage.busy_timeout', 0)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            logger.error("Busy timeout must be a positive number of seconds")
            return False

        if str(self.get('logging.level', '')).upper() not in ('TRACE', 'DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR', 'CRITICAL'):
            logger.error(f"Unknown log level: {self.get('logging.level')}")
            return False

        return True
