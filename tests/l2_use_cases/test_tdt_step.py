"""Tests for the pure TDT advance function — no engines involved."""

import numpy as np
import pytest

from parakeet_dictate.l1_entities.decode import DecodeState
from parakeet_dictate.l1_entities.errors import InferenceError
from parakeet_dictate.l2_use_cases.tdt_decode_use_case import argmax_first, tdt_step
from tests.conftest import BLANK_ID, VOCAB_SIZE, joint


def step(state, output, max_symbols=10):
    return tdt_step(state, output, VOCAB_SIZE, BLANK_ID, max_symbols)


class TestArgmaxFirst:
    def test_picks_largest(self):
        assert argmax_first(np.array([0.1, 0.9, 0.3])) == 1

    def test_tie_goes_to_lowest_index(self):
        assert argmax_first(np.array([0.2, 0.7, 0.7, 0.7])) == 1

    def test_all_equal_is_zero(self):
        assert argmax_first(np.zeros(6)) == 0


class TestDurationDominance:
    def test_duration_advances_exactly_and_resets_counter_on_emission(self):
        state = DecodeState(frame=3, last_token=1, emitted_at_frame=4)
        d = step(state, joint(token=0, duration=2))
        assert d.emitted
        assert d.advance == 2
        assert d.state.frame == 5
        assert d.state.emitted_at_frame == 0
        assert d.state.last_token == 0

    def test_duration_advances_on_blank(self):
        d = step(DecodeState(frame=0), joint(token=BLANK_ID, duration=2))
        assert not d.emitted
        assert d.state.frame == 2

    def test_duration_wins_over_cap(self):
        state = DecodeState(frame=0, last_token=0, emitted_at_frame=9)
        d = step(state, joint(token=1, duration=2))
        assert d.advance == 2


class TestBlankAndCap:
    def test_blank_with_zero_duration_moves_one(self):
        d = step(DecodeState(frame=5, last_token=2, emitted_at_frame=3), joint(token=BLANK_ID, duration=0))
        assert d.advance == 1
        assert d.state.frame == 6
        assert d.state.emitted_at_frame == 0
        assert d.state.last_token == 2

    def test_emission_stays_on_frame(self):
        d = step(DecodeState(frame=2), joint(token=0, duration=0))
        assert d.advance == 0
        assert d.state.frame == 2
        assert d.state.emitted_at_frame == 1

    def test_tenth_emission_moves_one(self):
        state = DecodeState(frame=2, last_token=0, emitted_at_frame=9)
        d = step(state, joint(token=0, duration=0))
        assert d.advance == 1
        assert d.state.frame == 3
        assert d.state.emitted_at_frame == 0
        assert d.emitted

    def test_custom_cap(self):
        d = step(DecodeState(frame=0, last_token=0, emitted_at_frame=1), joint(token=0), max_symbols=2)
        assert d.advance == 1


class TestLogitSplit:
    def test_empty_duration_segment_means_zero(self):
        token_only = np.zeros(VOCAB_SIZE, dtype=np.float32)
        token_only[1] = 1.0
        d = step(DecodeState(), token_only)
        assert d.duration == 0
        assert d.advance == 0
        assert d.state.last_token == 1

    def test_duration_logits_ignore_token_segment(self):
        out = np.zeros(VOCAB_SIZE + 3, dtype=np.float32)
        out[0] = 100.0  # token logit larger than any duration logit
        out[VOCAB_SIZE + 1] = 1.0
        d = step(DecodeState(), out)
        assert d.token == 0
        assert d.duration == 1

    def test_token_tie_goes_to_lowest(self):
        out = np.zeros(VOCAB_SIZE + 1, dtype=np.float32)
        out[1] = out[3] = 2.0
        assert step(DecodeState(), out).token == 1

    def test_accepts_nested_shape(self):
        d = step(DecodeState(), joint(token=BLANK_ID).reshape(1, 1, -1))
        assert d.token == BLANK_ID

    def test_too_short_output_raises(self):
        with pytest.raises(InferenceError):
            step(DecodeState(), np.zeros(VOCAB_SIZE - 1))

    def test_does_not_mutate_input_state(self):
        state = DecodeState(frame=1, last_token=0, emitted_at_frame=1)
        step(state, joint(token=2))
        assert state == DecodeState(frame=1, last_token=0, emitted_at_frame=1)


class TestLastLabel:
    def test_fresh_state_feeds_blank(self):
        assert DecodeState().last_label(BLANK_ID) == BLANK_ID

    def test_blank_keeps_previous_label(self):
        d = step(DecodeState(frame=0, last_token=3), joint(token=BLANK_ID))
        assert d.state.last_label(BLANK_ID) == 3
