"""
Bounded trace of post-burn-in samples.

TraceBuffer is a ring buffer: once trace_cap entries are held, each append
evicts the oldest entry. Entries must arrive with strictly increasing
iteration numbers, so the retained window is always ordered.
"""

from collections import deque
from itertools import islice
from typing import Tuple

import numpy as np

from .types import ParameterVector, TraceEntry


class TraceBuffer:
    """Ring buffer of TraceEntry values capped at ``cap`` entries."""

    def __init__(self, cap: int, dimension: int):
        if cap < 1:
            raise ValueError(f"TraceBuffer cap must be >= 1, got {cap}")
        self._entries = deque(maxlen=cap)
        self._dimension = dimension

    @property
    def cap(self) -> int:
        return self._entries.maxlen

    @property
    def dimension(self) -> int:
        return self._dimension

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def append(self, iteration: int, vector: ParameterVector) -> None:
        """Append a sample, evicting the oldest entry when full."""
        if self._entries and iteration <= self._entries[-1].iteration:
            raise ValueError(
                f"Trace iterations must be strictly increasing: "
                f"got {iteration} after {self._entries[-1].iteration}"
            )
        if len(vector) != self._dimension:
            raise ValueError(f"Expected a vector of length {self._dimension}, got {len(vector)}")
        self._entries.append(TraceEntry(iteration, vector))

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> Tuple[TraceEntry, ...]:
        """Immutable copy of every retained entry, oldest first."""
        return tuple(self._entries)

    def tail(self, n: int) -> Tuple[TraceEntry, ...]:
        """The most recent ``n`` entries (fewer if the buffer holds fewer), oldest first."""
        if n <= 0:
            return ()
        # Walk from the newest end so the cost is O(n), not O(len)
        newest_first = list(islice(reversed(self._entries), n))
        return tuple(reversed(newest_first))

    def iterations(self) -> np.ndarray:
        return np.fromiter((e.iteration for e in self._entries), dtype=np.int64,
                           count=len(self._entries))

    def as_array(self, last: int = None) -> np.ndarray:
        """
        Retained samples as a (n_samples, dimension) float array.

        Args:
            last: Only include the most recent ``last`` entries
        """
        entries = self._entries if last is None else self.tail(last)
        if len(entries) == 0:
            return np.empty((0, self._dimension), dtype=float)
        return np.array([e.vector for e in entries], dtype=float)
