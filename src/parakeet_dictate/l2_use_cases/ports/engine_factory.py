"""Port: inference engine construction."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from parakeet_dictate.l2_use_cases.ports.inference_engine import InferenceEngine


class EngineFactory(Protocol):
    """Builds an InferenceEngine from a model file."""

    def create(self, name: str, model_path: Path) -> InferenceEngine:
        """Load *model_path*. Raises LoadError on failure."""
        ...
