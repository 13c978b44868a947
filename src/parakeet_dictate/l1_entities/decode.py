"""TDT decode-loop value types."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DecodeState:
    """Position of the greedy decoder between two decoder-joint calls.

    Only the last emitted token is kept; the full sequence lives in the
    caller's list so each step stays constant-time.
    """

    frame: int = 0
    last_token: int | None = None
    emitted_at_frame: int = 0  # emissions since ``frame`` last moved

    def last_label(self, blank_id: int) -> int:
        return blank_id if self.last_token is None else self.last_token


@dataclass(frozen=True)
class StepDecision:
    """Outcome of one decode step: what was picked and where the frame moved."""

    state: DecodeState
    token: int
    duration: int
    emitted: bool
    advance: int


@dataclass
class DecodeResult:
    tokens: list[int] = field(default_factory=list)
    frames: list[int] = field(default_factory=list)  # frame index of each decoder call
