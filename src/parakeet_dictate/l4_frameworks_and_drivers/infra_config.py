"""Default configuration values — live in L4, not domain."""

from __future__ import annotations

import copy

from parakeet_dictate.l1_entities.config import AppConfig
from parakeet_dictate.l3_interface_adapters.gateways.yaml_config_loader import deep_merge

APP_CONFIG_DEFAULTS: dict = {
    'model': {
        'name': 'parakeet-tdt-0.6b-v3',
        'repo_id': 'istupakov/parakeet-tdt-0.6b-v3-onnx',
        'preprocessor': 'nemo128.onnx',
        'encoder': 'encoder-model.onnx',
        'encoder_weights': 'encoder-model.onnx.data',  # ~2.4 GB
        'decoder_joint': 'decoder_joint-model.onnx',
        'vocabulary': 'vocab.txt',
        'metadata': 'config.json',
    },
    'decoder': {
        'max_symbols_per_step': 10,
        'state_layers': 2,
        'state_hidden': 640,
    },
    'runtime': {
        'intra_threads': 4,
        'graph_optimization': 'all',
    },
    'audio': {
        'sample_rate': 16000,
    },
    'storage': {
        'models_dir': None,
    },
}


def build_app_config(raw: dict) -> AppConfig:
    """Merge *raw* user overrides on top of defaults, then validate."""
    merged = copy.deepcopy(APP_CONFIG_DEFAULTS)
    deep_merge(merged, raw)
    return AppConfig.model_validate(merged)
