"""Gateway: sounddevice microphone capture — implements AudioSource port."""

from __future__ import annotations

import logging
import queue

import numpy as np
import sounddevice as sd

from parakeet_dictate.l1_entities.audio_constants import SAMPLE_RATE

log = logging.getLogger('pkd.audio')


class SounddeviceAudioSource:
    """Captures the microphone through a PortAudio callback into a chunk queue.

    Chunks are handed out flattened to mono float32, ready for ``push_audio``.
    """

    def __init__(self, device: int | str | None = None) -> None:
        self._device = device
        self._stream: sd.InputStream | None = None
        self._chunks: queue.Queue[np.ndarray] = queue.Queue()

    def open(self, sample_rate: int = SAMPLE_RATE, channels: int = 1) -> None:
        if self._stream is not None:
            raise RuntimeError('Microphone stream already open')
        self._discard_pending()

        def _on_audio(indata, frames, time_info, status):
            if status:
                log.warning('PortAudio status: %s', status)
            self._chunks.put(indata.copy())

        self._stream = sd.InputStream(
            samplerate=sample_rate,
            channels=channels,
            dtype='float32',
            device=self._device,
            callback=_on_audio,
        )
        self._stream.start()
        log.info('Microphone open: %d Hz, %d channel(s), device=%s', sample_rate, channels, self._device)

    def read(self, timeout: float = 0.1) -> np.ndarray | None:
        try:
            chunk = self._chunks.get(timeout=timeout)
        except queue.Empty:
            return None
        return chunk.reshape(-1)

    def drain(self) -> np.ndarray | None:
        """Return everything still queued as one array, or None if nothing is left."""
        pending = self._discard_pending()
        return np.concatenate(pending) if pending else None

    def close(self) -> None:
        if self._stream is None:
            return
        self._stream.stop()
        self._stream.close()
        self._stream = None
        log.info('Microphone closed')

    def _discard_pending(self) -> list[np.ndarray]:
        pending: list[np.ndarray] = []
        while True:
            try:
                pending.append(self._chunks.get_nowait().reshape(-1))
            except queue.Empty:
                return pending
