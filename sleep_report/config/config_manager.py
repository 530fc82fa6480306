# sleep_report/config/config_manager.py
import copy
import logging
from pathlib import Path

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / 'default_config.yaml'

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ConfigManager:
    """Central configuration manager"""

    def __init__(self, config_path=None, overrides=None):
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self.config = self._load_config()
        if overrides:
            self.config = _deep_merge(self.config, overrides)

    def _load_config(self):
        """Load configuration from file, layered over the packaged defaults"""
        with open(DEFAULT_CONFIG_PATH, 'r') as file:
            defaults = yaml.safe_load(file) or {}

        if self.config_path == DEFAULT_CONFIG_PATH:
            return defaults

        with open(self.config_path, 'r') as file:
            user_config = yaml.safe_load(file) or {}

        if not isinstance(user_config, dict):
            raise ValueError(f"Configuration file {self.config_path} must contain a mapping")

        return _deep_merge(defaults, user_config)

    def get(self, key, default=None):
        """Get configuration value"""
        # Support nested keys with dot notation
        keys = key.split('.')
        value = self.config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value


def _deep_merge(base, override):
    """Return a copy of base with override merged in, recursing into mappings"""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def configure_logging(config=None):
    """
    Apply the logging section of the configuration to the root logger.

    Args:
        config: Optional ConfigManager; the packaged defaults are used when omitted
    """
    config = config or ConfigManager()
    level_name = str(config.get('logging.level', 'INFO')).upper()

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=config.get('logging.format', DEFAULT_LOG_FORMAT),
        handlers=[logging.StreamHandler()]
    )
