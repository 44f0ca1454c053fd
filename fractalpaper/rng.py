"""Small deterministic pseudo-random generator (xoshiro256**)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

_MASK = (1 << 64) - 1
_GOLDEN = 0x9E3779B97F4A7C15


def _rotl(x: int, k: int) -> int:
    return ((x << k) | (x >> (64 - k))) & _MASK


class Rng:
    """xoshiro256** generator seeded through splitmix64."""

    def __init__(self, seed: int) -> None:
        z = seed & _MASK
        state = []
        for _ in range(4):
            z = (z + _GOLDEN) & _MASK
            x = z
            x = ((x ^ (x >> 30)) * 0xBF58476D1CE4E5B9) & _MASK
            x = ((x ^ (x >> 27)) * 0x94D049BB133111EB) & _MASK
            state.append(x ^ (x >> 31))
        self._s = state

    def next_u64(self) -> int:
        """Return the next 64-bit unsigned integer."""
        s = self._s
        result = (_rotl((s[1] * 5) & _MASK, 7) * 9) & _MASK
        t = (s[1] << 17) & _MASK
        s[2] ^= s[0]
        s[3] ^= s[1]
        s[1] ^= s[2]
        s[0] ^= s[3]
        s[2] ^= t
        s[3] = _rotl(s[3], 45)
        return result

    def f64(self) -> float:
        """Return a float uniformly drawn from [0, 1)."""
        return (self.next_u64() >> 11) / float(1 << 53)

    def range(self, lo: float, hi: float) -> float:
        """Return a float uniformly drawn from [lo, hi)."""
        return lo + self.f64() * (hi - lo)

    def choose(self, items: Sequence[T]) -> T:
        """Return one element of a non-empty sequence."""
        if not items:
            raise IndexError("cannot choose from an empty sequence")
        return items[self.next_u64() % len(items)]