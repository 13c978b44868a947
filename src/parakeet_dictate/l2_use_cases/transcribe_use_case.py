"""Use case: transcribe one utterance through preprocessor → encoder → TDT decoder."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from parakeet_dictate.l1_entities.decode import DecodeResult
from parakeet_dictate.l1_entities.errors import InferenceError
from parakeet_dictate.l1_entities.vocabulary import Vocabulary
from parakeet_dictate.l2_use_cases.ports.inference_engine import InferenceEngine
from parakeet_dictate.l2_use_cases.tdt_decode_use_case import (
    DEFAULT_STATE_SHAPE,
    MAX_SYMBOLS_PER_STEP,
    TdtGreedyDecoder,
)
from parakeet_dictate.l2_use_cases.utils.detokenizer import detokenize

log = logging.getLogger('pkd.transcribe')


@dataclass(frozen=True)
class InferencePipeline:
    """The three loaded engines plus the vocabulary they were built with."""

    preprocessor: InferenceEngine
    encoder: InferenceEngine
    decoder_joint: InferenceEngine
    vocabulary: Vocabulary


def _output(outputs: dict[str, np.ndarray], name: str, engine: InferenceEngine) -> np.ndarray:
    if name not in outputs:
        raise InferenceError(f'{engine.name} returned no {name!r} output')
    return outputs[name]


class TranscribeUseCase:
    """Runs a whole buffer through the pipeline. All-or-nothing: errors propagate."""

    def __init__(
        self,
        pipeline: InferencePipeline,
        max_symbols_per_step: int = MAX_SYMBOLS_PER_STEP,
        state_shape: tuple[int, int, int] = DEFAULT_STATE_SHAPE,
    ) -> None:
        self._pipeline = pipeline
        self._decoder = TdtGreedyDecoder(
            pipeline.decoder_joint,
            pipeline.vocabulary,
            max_symbols_per_step=max_symbols_per_step,
            state_shape=state_shape,
        )

    def execute(self, audio: np.ndarray) -> str:
        """Transcribe *audio* (mono float32) to text."""
        result = self.decode(audio)
        return detokenize(result.tokens, self._pipeline.vocabulary)

    def decode(self, audio: np.ndarray) -> DecodeResult:
        waveform = np.asarray(audio, dtype=np.float32).reshape(-1)
        if waveform.size == 0:
            return DecodeResult()

        pre = self._pipeline.preprocessor
        preprocessed = pre.run(
            {
                'waveforms': waveform.reshape(1, -1),
                'waveforms_lens': np.array([waveform.size], dtype=np.int64),
            }
        )
        features = _output(preprocessed, 'features', pre)
        features_lens = _output(preprocessed, 'features_lens', pre)

        enc = self._pipeline.encoder
        encoded = enc.run({'audio_signal': features, 'length': features_lens})
        embeddings = np.asarray(_output(encoded, 'outputs', enc))
        encoded_lengths = np.asarray(_output(encoded, 'encoded_lengths', enc)).reshape(-1)
        if encoded_lengths.size == 0:
            raise InferenceError(f'{enc.name} returned an empty encoded_lengths output')

        log.debug(
            'Encoded %d samples → embeddings %s, encoded_length=%d',
            waveform.size,
            embeddings.shape,
            int(encoded_lengths[0]),
        )
        return self._decoder.decode(embeddings, int(encoded_lengths[0]))
