"""Seeded mulberry32 stream and the small helpers every generator draws through.

Output is bit-for-bit reproducible for a given seed and call sequence, so
generators must keep their draw order stable.
"""

import math
from typing import Sequence, TypeVar

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
TWO_POW_32 = 4294967296


class Mulberry32:
    """32-bit mulberry32 generator producing floats in [0, 1)."""

    def __init__(self, seed: int) -> None:
        self.state = seed & MASK32

    def next(self) -> float:
        self.state = (self.state + 0x6D2B79F5) & MASK32
        a = self.state
        t = ((a ^ (a >> 15)) * (a | 1)) & MASK32
        t = ((t + (((t ^ (t >> 7)) * (t | 61)) & MASK32)) & MASK32) ^ t
        return ((t ^ (t >> 14)) & MASK32) / TWO_POW_32

    __call__ = next


def random_int(rng: Mulberry32, lo: int, hi: int) -> int:
    """Inclusive integer draw in [lo, hi]."""
    return math.floor(rng.next() * (hi - lo + 1)) + lo


def random_choice(rng: Mulberry32, values: Sequence[T]) -> T:
    """Uniform pick; callers guarantee ``values`` is non-empty."""
    if not values:
        raise ValueError("random_choice() needs a non-empty sequence")
    return values[math.floor(rng.next() * len(values))]


def uuid_like(rng: Mulberry32) -> str:
    """32 PRNG hex digits laid out 8-4-4-4-12. A fixture id, not an RFC 4122 UUID."""
    digits = "".join(format(math.floor(rng.next() * 16), "x") for _ in range(32))
    return f"{digits[:8]}-{digits[8:12]}-{digits[12:16]}-{digits[16:20]}-{digits[20:]}"
