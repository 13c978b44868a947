"""Gateway: ONNX Runtime engines — implement InferenceEngine and EngineFactory ports."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

import numpy as np
import onnxruntime as ort

from parakeet_dictate.l1_entities.errors import InferenceError, LoadError

log = logging.getLogger('pkd.onnx')

OPTIMIZATION_LEVELS = {
    'disable': ort.GraphOptimizationLevel.ORT_DISABLE_ALL,
    'basic': ort.GraphOptimizationLevel.ORT_ENABLE_BASIC,
    'extended': ort.GraphOptimizationLevel.ORT_ENABLE_EXTENDED,
    'all': ort.GraphOptimizationLevel.ORT_ENABLE_ALL,
}


class OnnxInferenceEngine:
    """One InferenceSession behind a lock, returning outputs keyed by name."""

    def __init__(self, name: str, session: ort.InferenceSession) -> None:
        self.name = name
        self._session = session
        self._lock = threading.Lock()
        self._output_names = [o.name for o in session.get_outputs()]

    def run(self, inputs: dict[str, np.ndarray]) -> dict[str, np.ndarray]:
        with self._lock:
            try:
                values = self._session.run(self._output_names, inputs)
            except Exception as exc:
                raise InferenceError(f'Failed to run {self.name}: {exc}') from exc
        return dict(zip(self._output_names, values))


class OnnxEngineFactory:
    """Creates CPU InferenceSessions with the configured threading and optimisation."""

    def __init__(
        self,
        intra_threads: int = 4,
        graph_optimization: str = 'all',
        providers: list[str] | None = None,
    ) -> None:
        if graph_optimization not in OPTIMIZATION_LEVELS:
            raise ValueError(f'Unknown graph optimization level: {graph_optimization}')
        self._intra_threads = intra_threads
        self._level = OPTIMIZATION_LEVELS[graph_optimization]
        self._providers = providers or ['CPUExecutionProvider']

    def create(self, name: str, model_path: Path) -> OnnxInferenceEngine:
        options = ort.SessionOptions()
        options.graph_optimization_level = self._level
        options.intra_op_num_threads = self._intra_threads
        try:
            session = ort.InferenceSession(str(model_path), sess_options=options, providers=self._providers)
        except Exception as exc:
            raise LoadError(f'Failed to load {name} model: {exc}') from exc
        log.debug('Loaded %s from %s', name, model_path)
        return OnnxInferenceEngine(name, session)
