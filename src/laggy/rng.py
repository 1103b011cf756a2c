"""Seedable random source shared by every chaos decision in a run."""

from __future__ import annotations

import math
import random
import threading

_MASK32 = 0xFFFFFFFF
_GOLDEN_STEP = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply."""
    return (a * b) & _MASK32


class DeterministicRandom:
    """Reproducible random source built on mulberry32.

    With a seed, the sequence of draws is a pure function of that seed.
    Without one, draws come from a system-seeded :class:`random.Random` and
    are not reproducible.

    Draws are serialized with a lock so concurrent callers each advance the
    state exactly once.  Which caller receives which draw still depends on
    arrival order, so tests that need per-request reproducibility must issue
    requests sequentially.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._lock = threading.Lock()
        self._state: int | None = None
        self._fallback = random.Random()
        self.set_seed(seed)

    @property
    def seed(self) -> int | None:
        return self._seed

    @property
    def is_seeded(self) -> bool:
        return self._state is not None

    def set_seed(self, seed: int | None) -> None:
        """Replace the internal state; ``None`` reverts to unseeded draws."""
        with self._lock:
            self._seed = seed
            self._state = None if seed is None else seed & _MASK32

    def next_float(self) -> float:
        """Return one draw in ``[0, 1)``."""
        with self._lock:
            if self._state is None:
                return self._fallback.random()  # noqa: S311
            self._state = (self._state + _GOLDEN_STEP) & _MASK32
            t = self._state
            t = _imul(t ^ (t >> 15), t | 1)
            t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
            return ((t ^ (t >> 14)) & _MASK32) / _TWO_POW_32

    def next_int(self, low: int, high: int) -> int:
        """Return an integer in ``[low, high]``, inclusive on both ends."""
        return math.floor(self.next_float() * (high - low + 1)) + low

    def trigger(self, rate: float) -> bool:
        """Return True with probability *rate*.

        Rates at or below 0 and at or above 1 are decided without a draw.
        """
        if rate <= 0:
            return False
        if rate >= 1:
            return True
        return self.next_float() < rate


__all__ = ["DeterministicRandom"]
