"""Seeded uniform random numbers from a 32-bit Mersenne Twister."""

from __future__ import annotations

import random

import numpy as np

_STATE_SIZE = 624
_MASK32 = 0xFFFFFFFF
_TWO_POW_32 = np.float32(2.0**32)
_BELOW_ONE = np.nextafter(np.float32(1.0), np.float32(0.0))


class RNG:
    """Mersenne Twister generator yielding single-precision values in [0, 1)."""

    def __init__(self, seed: int = 0) -> None:
        self._gen = random.Random()
        self.set_seed(seed)

    def set_seed(self, seed: int) -> None:
        """Reset the generator with the standard 32-bit seeding recurrence."""
        state = [seed & _MASK32]
        for i in range(1, _STATE_SIZE):
            prev = state[-1]
            state.append((1812433253 * (prev ^ (prev >> 30)) + i) & _MASK32)
        self._gen.setstate((3, (*state, _STATE_SIZE), None))

    def uniform(self) -> float:
        """Return the next value, uniformly distributed in [0, 1)."""
        value = np.float32(self._gen.getrandbits(32)) / _TWO_POW_32
        if value >= 1.0:
            value = _BELOW_ONE
        return float(value)