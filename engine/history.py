from __future__ import annotations
from typing import Dict, Iterator, List, Optional
from collections import deque
from dataclasses import dataclass, field
import logging

from .constants import DEFAULT_HISTORY_CAPACITY

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickSample:
    """Outputs recorded for one tick."""
    tick: int
    simulated_time: float
    outputs: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {"tick": self.tick, "time": self.simulated_time, "outputs": dict(self.outputs)}


class TickHistory:
    """
    Sliding window of the most recent TickSamples (FIFO eviction).
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = int(capacity)
        self._samples: deque[TickSample] = deque(maxlen=self.capacity)

    def append(self, sample: TickSample) -> None:
        self._samples.append(sample)

    def clear(self) -> None:
        self._samples.clear()

    @property
    def latest(self) -> Optional[TickSample]:
        return self._samples[-1] if self._samples else None

    @property
    def oldest(self) -> Optional[TickSample]:
        return self._samples[0] if self._samples else None

    def series(self, key: str) -> List[float]:
        """Values of one output across the window; ticks without the key are skipped."""
        return [s.outputs[key] for s in self._samples if key in s.outputs]

    def ticks(self) -> List[int]:
        return [s.tick for s in self._samples]

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[TickSample]:
        return iter(list(self._samples))

    def __getitem__(self, i: int) -> TickSample:
        return self._samples[i]
