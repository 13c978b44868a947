"""Gateway: YAML configuration loader — implements ConfigLoader port."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from parakeet_dictate.l1_entities.config import AppConfig
from parakeet_dictate.l3_interface_adapters.gateways.paths import DEFAULT_CONFIG_PATHS

log = logging.getLogger('pkd.config')


class YamlConfigLoader:
    """Reads user settings from an explicit YAML file or the first default location found."""

    def load(
        self,
        config_path: str | None = None,
        overrides: dict | None = None,
    ) -> AppConfig:
        return AppConfig.model_validate(self.load_raw(config_path, overrides))

    def load_raw(
        self,
        config_path: str | None = None,
        overrides: dict | None = None,
    ) -> dict:
        """Return user data with *overrides* merged in, before defaults and validation.

        Raises:
            FileNotFoundError: an explicit *config_path* does not exist.
            ValueError: the file is not valid YAML or its top level is not a mapping.
        """
        source = self._locate(config_path)
        data = self._read(source) if source is not None else {}
        if overrides:
            deep_merge(data, overrides)
        return data

    @staticmethod
    def _locate(config_path: str | None) -> Path | None:
        if config_path is not None:
            path = Path(config_path)
            if not path.exists():
                raise FileNotFoundError(f'Config file not found: {path}')
            return path
        return next((p for p in DEFAULT_CONFIG_PATHS if p.exists()), None)

    @staticmethod
    def _read(path: Path) -> dict:
        try:
            data = yaml.safe_load(path.read_text(encoding='utf-8'))
        except yaml.YAMLError as exc:
            raise ValueError(f'Invalid YAML in {path}: {exc}') from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f'Config file {path} must contain a mapping, got {type(data).__name__}')
        log.info('Loaded config from %s', path)
        return data


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base
