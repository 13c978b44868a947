"""Use case: greedy token-and-duration (TDT) decoding over encoder frames."""

from __future__ import annotations

import logging

import numpy as np

from parakeet_dictate.l1_entities.decode import DecodeResult, DecodeState, StepDecision
from parakeet_dictate.l1_entities.errors import InferenceError, StateSizeError
from parakeet_dictate.l1_entities.vocabulary import Vocabulary
from parakeet_dictate.l2_use_cases.ports.inference_engine import InferenceEngine

log = logging.getLogger('pkd.decoder')

MAX_SYMBOLS_PER_STEP = 10
DEFAULT_STATE_SHAPE = (2, 1, 640)  # LSTM layers x batch x hidden


def argmax_first(values: np.ndarray) -> int:
    """Index of the largest value. Ties go to the lowest index."""
    return int(np.argmax(values))


def tdt_step(
    state: DecodeState,
    joint_output: np.ndarray,
    vocab_size: int,
    blank_id: int,
    max_symbols_per_step: int = MAX_SYMBOLS_PER_STEP,
) -> StepDecision:
    """Apply one decoder-joint output to *state*.

    ``joint_output[:vocab_size]`` are token logits, the remainder are duration
    logits. Advance rules, first match wins:

    1. predicted duration > 0: move that many frames.
    2. blank, or ``max_symbols_per_step`` emissions at this frame: move one frame.
    3. otherwise stay on the frame and emit again.

    The emission counter resets whenever the frame moves.
    """
    logits = np.asarray(joint_output).reshape(-1)
    if logits.size < vocab_size:
        raise InferenceError(f'Joint output has {logits.size} logits, expected at least {vocab_size}')

    token = argmax_first(logits[:vocab_size])
    duration_logits = logits[vocab_size:]
    duration = argmax_first(duration_logits) if duration_logits.size else 0

    emitted = token != blank_id
    last_token = token if emitted else state.last_token
    count = state.emitted_at_frame + 1 if emitted else state.emitted_at_frame

    if duration > 0:
        advance = duration
    elif not emitted or count >= max_symbols_per_step:
        advance = 1
    else:
        advance = 0

    new_state = DecodeState(
        frame=state.frame + advance,
        last_token=last_token,
        emitted_at_frame=0 if advance else count,
    )
    return StepDecision(state=new_state, token=token, duration=duration, emitted=emitted, advance=advance)


def _take(outputs: dict[str, np.ndarray], name: str, engine: str) -> np.ndarray:
    try:
        return outputs[name]
    except KeyError as exc:
        raise InferenceError(f'{engine} returned no {name!r} output') from exc


def _replace_state(current: np.ndarray, returned: np.ndarray, name: str) -> np.ndarray:
    new = np.asarray(returned, dtype=np.float32)
    if new.size != current.size:
        raise StateSizeError(f'{name} size mismatch: got {new.size}, expected {current.size}')
    return np.array(new, dtype=np.float32, copy=True).reshape(current.shape)


class TdtGreedyDecoder:
    """Frame-synchronous greedy decode loop driving the decoder-joint engine.

    Recurrent state starts at zero for every call and is only replaced when a
    non-blank token is emitted.
    """

    def __init__(
        self,
        decoder_joint: InferenceEngine,
        vocabulary: Vocabulary,
        max_symbols_per_step: int = MAX_SYMBOLS_PER_STEP,
        state_shape: tuple[int, int, int] = DEFAULT_STATE_SHAPE,
    ) -> None:
        self._engine = decoder_joint
        self._vocab = vocabulary
        self._max_symbols = max_symbols_per_step
        self._state_shape = state_shape

    def decode(self, embeddings: np.ndarray, encoded_length: int) -> DecodeResult:
        """Decode ``embeddings`` of shape ``[1, D, T]`` up to ``min(encoded_length, T)`` frames."""
        if embeddings.ndim != 3:
            raise InferenceError(f'Encoder output must be [batch, dim, frames], got shape {embeddings.shape}')

        limit = min(int(encoded_length), embeddings.shape[2])
        blank_id = self._vocab.blank_id
        vocab_size = self._vocab.vocab_size

        state_1 = np.zeros(self._state_shape, dtype=np.float32)
        state_2 = np.zeros(self._state_shape, dtype=np.float32)
        targets = np.zeros((1, 1), dtype=np.int32)
        target_length = np.array([1], dtype=np.int32)

        result = DecodeResult()
        state = DecodeState()
        while state.frame < limit:
            frame = np.ascontiguousarray(embeddings[:, :, state.frame : state.frame + 1], dtype=np.float32)
            targets[0, 0] = state.last_label(blank_id)

            outputs = self._engine.run(
                {
                    'encoder_outputs': frame,
                    'targets': targets,
                    'target_length': target_length,
                    'input_states_1': state_1,
                    'input_states_2': state_2,
                }
            )
            decision = tdt_step(
                state,
                _take(outputs, 'outputs', self._engine.name),
                vocab_size,
                blank_id,
                self._max_symbols,
            )
            if decision.emitted:
                state_1 = _replace_state(state_1, _take(outputs, 'output_states_1', self._engine.name), 'State1')
                state_2 = _replace_state(state_2, _take(outputs, 'output_states_2', self._engine.name), 'State2')
                result.tokens.append(decision.token)

            result.frames.append(state.frame)
            state = decision.state

        log.debug('Decoded %d frames in %d steps → %d tokens', limit, len(result.frames), len(result.tokens))
        return result
