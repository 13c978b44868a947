"""Port: named-tensor inference engine."""

from __future__ import annotations

from typing import Protocol

import numpy as np


class InferenceEngine(Protocol):
    """One model graph: given named inputs, return named outputs or raise InferenceError.

    Implementations hold a per-engine lock so a single engine never runs two
    calls at once.
    """

    name: str

    def run(self, inputs: dict[str, np.ndarray]) -> dict[str, np.ndarray]:
        """Run the graph once. Raises InferenceError on any runtime failure."""
        ...
