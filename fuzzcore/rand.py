"""Deterministic pseudo-random source based on the minimal standard LCG."""

from __future__ import annotations

import math

_MULTIPLIER = 48271
_MODULUS = 2147483647


class Random:
    """A ``minstd_rand`` generator with helpers for picking numbers in ranges."""

    def __init__(self, seed: int) -> None:
        state = (seed & 0xFFFFFFFF) % _MODULUS
        self._state = state if state else 1

    def raw(self) -> int:
        """Advance the generator and return its next raw value."""
        self._state = (self._state * _MULTIPLIER) % _MODULUS
        return self._state

    def below(self, n: int) -> int:
        """Return a value in ``[0, n)``, or 0 when ``n`` is 0."""
        return self.raw() % n if n else 0

    def between(self, start: int, stop: int) -> int:
        """Return a value in the closed range ``[start, stop]``."""
        if not start < stop:
            raise ValueError(f"empty range: {start} is not less than {stop}")
        return self.below(stop - start + 1) + start

    def rand_bool(self) -> int:
        """Return 0 or 1."""
        return self.raw() % 2

    def skew_towards_last(self, n: int) -> int:
        """Return a value in ``[0, n)`` biased towards the high end."""
        return int(math.sqrt(self.below(n * n)))