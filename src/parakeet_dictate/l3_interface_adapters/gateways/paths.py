"""Shared path constants for configuration and model storage."""

from __future__ import annotations

from platformdirs import user_config_path, user_data_path

APP_NAME = 'parakeet-dictate'

CONFIG_DIR = user_config_path(APP_NAME)
MODELS_DIR = user_data_path(APP_NAME) / 'models'

DEFAULT_CONFIG_PATHS = [
    CONFIG_DIR / 'config.yaml',
    CONFIG_DIR / 'config.yml',
]
