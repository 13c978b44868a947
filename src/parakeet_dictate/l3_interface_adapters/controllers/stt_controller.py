"""SttController — control surface over the shared session and model manager."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import Executor, ThreadPoolExecutor

import numpy as np

from parakeet_dictate.l1_entities.config import DecoderConfig
from parakeet_dictate.l1_entities.model_status import SttStatus
from parakeet_dictate.l2_use_cases.model_manager_use_case import ModelManager, ProgressSink
from parakeet_dictate.l2_use_cases.stt_session import SttSession
from parakeet_dictate.l2_use_cases.transcribe_use_case import InferencePipeline, TranscribeUseCase

log = logging.getLogger('pkd.controller')


class SttController:
    """Entry point for callers: status, download, recording, transcription.

    Transcription runs on a worker thread so the control path only ever
    waits on the session lock for a drain, never for a decode.
    """

    def __init__(
        self,
        session: SttSession,
        model_manager: ModelManager,
        decoder: DecoderConfig,
        executor: Executor | None = None,
    ) -> None:
        self._session = session
        self._models = model_manager
        self._decoder = decoder
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix='pkd-transcribe')

    def get_status(self) -> SttStatus:
        return self._session.status()

    def download_model(self, progress_sink: ProgressSink | None = None) -> None:
        self._models.download(progress_sink)

    def start_recording(self) -> None:
        self._session.start_recording()
        log.info('Recording started')

    def push_audio(self, samples: Sequence[float] | np.ndarray) -> None:
        self._session.push_audio(samples)

    def cancel_recording(self) -> None:
        """Go idle and drop whatever was buffered."""
        dropped = self._session.stop_recording()
        log.info('Recording cancelled: %d samples dropped', dropped.size)

    def stop_and_transcribe(self) -> str:
        """Drain the buffer and decode it on the worker. Blocks until text is ready."""
        audio, pipeline = self._session.drain_for_transcription()
        log.info('Recording stopped: %d samples buffered', audio.size)
        future = self._executor.submit(self._transcribe, pipeline, audio)
        return future.result()

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def _transcribe(self, pipeline: InferencePipeline, audio: np.ndarray) -> str:
        use_case = TranscribeUseCase(
            pipeline,
            max_symbols_per_step=self._decoder.max_symbols_per_step,
            state_shape=(self._decoder.state_layers, 1, self._decoder.state_hidden),
        )
        try:
            text = use_case.execute(audio)
        except Exception:
            log.error('Transcription failed', exc_info=True)
            raise
        log.info('Transcribed %d samples → %d chars', audio.size, len(text))
        return text
