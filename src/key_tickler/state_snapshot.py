from dataclasses import dataclass
from typing import Literal

type SearchPhase = Literal["scanning", "found", "exhausted"]


@dataclass(frozen=True, slots=True)
class SearchSnapshot:
    """Minimal immutable snapshot of search progress."""

    state_version: int
    phase: SearchPhase
    key_length: int
    max_key_length: int
    candidate: bytes
    trials: int
    trials_total: int
    elapsed: float
    preview: bytes = b""

    @property
    def complete(self) -> bool:
        return self.phase != "scanning"

    @property
    def trials_per_second(self) -> float:
        if self.elapsed <= 0:
            return 0.0
        return self.trials / self.elapsed
