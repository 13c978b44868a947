"""Dependency container — composition root for wiring all layers together."""

from __future__ import annotations

from pathlib import Path

from parakeet_dictate.l1_entities.config import AppConfig
from parakeet_dictate.l2_use_cases.model_manager_use_case import ModelManager
from parakeet_dictate.l2_use_cases.ports.artifact_store import ArtifactStore
from parakeet_dictate.l2_use_cases.ports.config_loader import ConfigLoader
from parakeet_dictate.l2_use_cases.ports.engine_factory import EngineFactory
from parakeet_dictate.l2_use_cases.stt_session import SttSession
from parakeet_dictate.l3_interface_adapters.controllers.stt_controller import SttController
from parakeet_dictate.l3_interface_adapters.gateways.hf_artifact_store import HfArtifactStore
from parakeet_dictate.l3_interface_adapters.gateways.paths import MODELS_DIR
from parakeet_dictate.l3_interface_adapters.gateways.yaml_config_loader import YamlConfigLoader


class DependencyContainer:
    """Creates and wires all concrete instances. Easy to override for testing."""

    def __init__(
        self,
        config: AppConfig,
        store: ArtifactStore | None = None,
        engine_factory: EngineFactory | None = None,
    ) -> None:
        self.config = config
        base_dir = Path(config.storage.models_dir) if config.storage.models_dir else MODELS_DIR
        self.model_dir = base_dir / config.model.name

        self.session = SttSession()
        self.store: ArtifactStore = store or HfArtifactStore(config.model.repo_id, self.model_dir)
        self.engine_factory: EngineFactory = engine_factory or self._build_engine_factory(config)
        self.model_manager = ModelManager(
            session=self.session,
            store=self.store,
            engine_factory=self.engine_factory,
            model=config.model,
        )
        self.controller = SttController(
            session=self.session,
            model_manager=self.model_manager,
            decoder=config.decoder,
        )

    @staticmethod
    def _build_engine_factory(config: AppConfig) -> EngineFactory:
        from parakeet_dictate.l3_interface_adapters.gateways.onnx_inference_engine import (  # noqa: PLC0415 -- deferred: onnxruntime is heavy to import
            OnnxEngineFactory,
        )

        return OnnxEngineFactory(
            intra_threads=config.runtime.intra_threads,
            graph_optimization=config.runtime.graph_optimization,
        )

    @staticmethod
    def config_loader() -> ConfigLoader:
        return YamlConfigLoader()
