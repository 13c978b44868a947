"""Shared test fixtures and protocol-conforming fakes."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest

from parakeet_dictate.l1_entities.config import AppConfig
from parakeet_dictate.l1_entities.errors import DownloadError, InferenceError, LoadError
from parakeet_dictate.l1_entities.vocabulary import Vocabulary
from parakeet_dictate.l2_use_cases.model_manager_use_case import ModelManager
from parakeet_dictate.l2_use_cases.stt_session import SttSession
from parakeet_dictate.l2_use_cases.transcribe_use_case import InferencePipeline
from parakeet_dictate.l4_frameworks_and_drivers.infra_config import build_app_config

# Small model geometry used throughout: 5 tokens (blank=4), 3 duration classes.
VOCAB_PIECES = {0: ' hello', 1: ' world', 2: 'ing', 3: ' a', 4: '<blk>'}
BLANK_ID = 4
VOCAB_SIZE = len(VOCAB_PIECES)
DURATION_CLASSES = 3
STATE_SHAPE = (2, 1, 4)
EMBED_DIM = 3

VOCAB_TXT = '▁hello 0\n▁world 1\ning 2\n▁a 3\n<blk> 4\n'


def joint(token: int, duration: int = 0) -> np.ndarray:
    """Build one joint output whose arg-maxes are *token* and *duration*."""
    out = np.zeros(VOCAB_SIZE + DURATION_CLASSES, dtype=np.float32)
    out[token] = 5.0
    out[VOCAB_SIZE + duration] = 5.0
    return out


# --- Protocol-conforming Fakes ---


class FakeEngine:
    """Fake InferenceEngine returning fixed outputs (or computed by a function)."""

    def __init__(
        self,
        name: str,
        outputs: dict[str, np.ndarray] | Callable[[dict[str, np.ndarray]], dict[str, np.ndarray]] | None = None,
        error: str | None = None,
    ) -> None:
        self.name = name
        self._outputs = outputs or {}
        self._error = error
        self.calls: list[dict[str, np.ndarray]] = []

    def run(self, inputs: dict[str, np.ndarray]) -> dict[str, np.ndarray]:
        self.calls.append({k: np.array(v, copy=True) for k, v in inputs.items()})
        if self._error is not None:
            raise InferenceError(self._error)
        if callable(self._outputs):
            return self._outputs(inputs)
        return self._outputs


class ScriptedDecoderJoint:
    """Fake decoder-joint that replays a script of joint outputs.

    After the script runs out the last entry repeats. Returned states are
    filled with the call number so tests can see which call's state was kept.
    """

    name = 'decoder_joint'

    def __init__(self, script: list[np.ndarray], state_shape: tuple[int, ...] = STATE_SHAPE) -> None:
        self._script = list(script)
        self._state_shape = state_shape
        self.calls: list[dict[str, np.ndarray]] = []

    def run(self, inputs: dict[str, np.ndarray]) -> dict[str, np.ndarray]:
        self.calls.append({k: np.array(v, copy=True) for k, v in inputs.items()})
        n = len(self.calls)
        output = self._script[min(n - 1, len(self._script) - 1)]
        return {
            'outputs': output,
            'output_states_1': np.full(self._state_shape, float(n), dtype=np.float32),
            'output_states_2': np.full(self._state_shape, float(-n), dtype=np.float32),
        }


def make_preprocessor(frames: int = 8) -> FakeEngine:
    return FakeEngine(
        'preprocessor',
        {
            'features': np.zeros((1, 128, frames), dtype=np.float32),
            'features_lens': np.array([frames], dtype=np.int64),
        },
    )


def make_encoder(frames: int = 4, encoded_length: int | None = None) -> FakeEngine:
    embeddings = np.arange(EMBED_DIM * frames, dtype=np.float32).reshape(1, EMBED_DIM, frames)
    return FakeEngine(
        'encoder',
        {
            'outputs': embeddings,
            'encoded_lengths': np.array([frames if encoded_length is None else encoded_length], dtype=np.int64),
        },
    )


def make_vocabulary() -> Vocabulary:
    return Vocabulary(tokens=VOCAB_PIECES, blank_id=BLANK_ID)


def make_pipeline(decoder_joint, frames: int = 4, encoded_length: int | None = None) -> InferencePipeline:
    return InferencePipeline(
        preprocessor=make_preprocessor(),
        encoder=make_encoder(frames, encoded_length),
        decoder_joint=decoder_joint,
        vocabulary=make_vocabulary(),
    )


class FakeArtifactStore:
    """In-memory ArtifactStore. ``fail_on`` names a file whose fetch raises."""

    def __init__(
        self,
        model_dir: Path,
        present: list[str] | None = None,
        contents: dict[str, str] | None = None,
        fail_on: str | None = None,
    ) -> None:
        self._model_dir = model_dir
        self.present: set[str] = set(present or [])
        self.contents = dict(contents or {})
        self.fail_on = fail_on
        self.prepared = False
        self.fetch_calls: list[str] = []

    @property
    def model_dir(self) -> Path:
        return self._model_dir

    def prepare(self) -> None:
        self.prepared = True

    def exists(self, filename: str) -> bool:
        return filename in self.present

    def fetch(self, filename: str) -> Path:
        self.fetch_calls.append(filename)
        if filename == self.fail_on:
            raise DownloadError(f'Failed to download {filename}: HTTP 500')
        self.present.add(filename)
        return self._model_dir / filename

    def read_text(self, filename: str) -> str:
        if filename not in self.contents:
            raise LoadError(f'Failed to read {filename}')
        return self.contents[filename]


class FakeEngineFactory:
    """EngineFactory producing FakeEngines; ``fail_on`` names an engine that fails to build."""

    def __init__(self, engines: dict[str, object] | None = None, fail_on: str | None = None) -> None:
        self._engines = engines or {}
        self.fail_on = fail_on
        self.create_calls: list[tuple[str, Path]] = []

    def create(self, name: str, model_path: Path):
        self.create_calls.append((name, model_path))
        if name == self.fail_on:
            raise LoadError(f'Failed to load {name} model: bad graph')
        return self._engines.get(name) or FakeEngine(name)


# --- Standard Fixtures ---


@pytest.fixture
def default_config() -> AppConfig:
    return build_app_config({})


@pytest.fixture
def manifest(default_config: AppConfig) -> list[str]:
    return default_config.model.manifest


@pytest.fixture
def session() -> SttSession:
    return SttSession()


@pytest.fixture
def fake_store(tmp_path: Path, default_config: AppConfig) -> FakeArtifactStore:
    return FakeArtifactStore(tmp_path / 'models', contents={default_config.model.vocabulary: VOCAB_TXT})


@pytest.fixture
def fake_factory() -> FakeEngineFactory:
    return FakeEngineFactory()


@pytest.fixture
def model_manager(session, fake_store, fake_factory, default_config) -> ModelManager:
    return ModelManager(session=session, store=fake_store, engine_factory=fake_factory, model=default_config.model)


@pytest.fixture
def ready_session() -> SttSession:
    s = SttSession()
    s.apply_pipeline(make_pipeline(ScriptedDecoderJoint([joint(BLANK_ID)])))
    return s
