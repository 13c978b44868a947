"""Shared session handle: recording state, audio buffer, model status, engines."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

import numpy as np

from parakeet_dictate.l1_entities.errors import DownloadError, LockError, NotReadyError, NotRecordingError
from parakeet_dictate.l1_entities.model_status import (
    Downloading,
    Error,
    ModelStatus,
    NotDownloaded,
    Ready,
    SttStatus,
)
from parakeet_dictate.l2_use_cases.transcribe_use_case import InferencePipeline

log = logging.getLogger('pkd.session')

_LOCK_TIMEOUT = 30.0  # seconds


class SttSession:
    """Explicitly owned, lock-guarded state shared by the control surface.

    Every method holds the lock for one short section. Download, model build
    and decoding never run under it; callers take snapshots and commit results.
    """

    def __init__(self, lock_timeout: float = _LOCK_TIMEOUT) -> None:
        self._lock = threading.Lock()
        self._lock_timeout = lock_timeout
        self._chunks: list[np.ndarray] = []
        self._is_recording = False
        self._model_status: ModelStatus = NotDownloaded()
        self._pipeline: InferencePipeline | None = None

    @contextmanager
    def _locked(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self._lock_timeout):
            raise LockError(f'Timed out after {self._lock_timeout}s waiting for the session lock')
        try:
            yield
        finally:
            self._lock.release()

    # -- status --

    def status(self) -> SttStatus:
        with self._locked():
            return SttStatus(model_status=self._model_status, is_recording=self._is_recording)

    @property
    def model_status(self) -> ModelStatus:
        with self._locked():
            return self._model_status

    def set_progress(self, progress: float) -> None:
        with self._locked():
            self._model_status = Downloading(progress=progress)

    def mark_error(self, message: str) -> None:
        with self._locked():
            self._model_status = Error(message=message)

    def begin_download(self) -> bool:
        """Enter Downloading. Returns False when a loaded model is already Ready."""
        with self._locked():
            if isinstance(self._model_status, Ready) and self._pipeline is not None:
                return False
            if isinstance(self._model_status, Downloading):
                raise DownloadError('A model download is already in progress')
            self._model_status = Downloading(progress=0.0)
            return True

    def apply_pipeline(self, pipeline: InferencePipeline) -> None:
        """Swap in freshly built engines and mark the model Ready."""
        with self._locked():
            self._pipeline = pipeline
            self._model_status = Ready()

    # -- recording --

    def start_recording(self) -> None:
        with self._locked():
            if not isinstance(self._model_status, Ready):
                raise NotReadyError('Model not ready. Please download the model first.')
            self._chunks = []
            self._is_recording = True

    def push_audio(self, samples: Sequence[float] | np.ndarray) -> None:
        chunk = np.array(samples, dtype=np.float32).reshape(-1)
        with self._locked():
            if not self._is_recording:
                raise NotRecordingError('Not recording')
            self._chunks.append(chunk)

    def stop_recording(self) -> np.ndarray:
        """Go idle and hand back the buffered audio, leaving the buffer empty."""
        with self._locked():
            return self._drain()

    def drain_for_transcription(self) -> tuple[np.ndarray, InferencePipeline]:
        """Stop recording and snapshot the engines in one critical section.

        The buffer is drained even when the model turns out not to be loaded.
        """
        with self._locked():
            if not self._is_recording:
                raise NotRecordingError('Not recording')
            audio = self._drain()
            if self._pipeline is None:
                raise NotReadyError('Model not loaded')
            return audio, self._pipeline

    def snapshot_pipeline(self) -> InferencePipeline:
        with self._locked():
            if self._pipeline is None:
                raise NotReadyError('Model not loaded')
            return self._pipeline

    def _drain(self) -> np.ndarray:
        self._is_recording = False
        chunks, self._chunks = self._chunks, []
        if not chunks:
            return np.array([], dtype=np.float32)
        return np.concatenate(chunks)
