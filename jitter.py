from __future__ import annotations
import math


def jitter(seed: int) -> float:
    """frac(sin(seed) * 10000), in [0, 1). Same seed, same value."""
    x = math.sin(seed) * 10000
    return x - math.floor(x)


class JitterStream:
    """Running seed shared by every cell of one render (row-major scan).

    A start seed of 0 (or less) disables jitter; `active` stays fixed for the
    lifetime of the stream even though `seed` keeps advancing.
    """

    def __init__(self, seed: int):
        self.active = seed > 0
        self.seed = seed

    def next(self) -> float:
        v = jitter(self.seed)
        self.seed += 1
        return v
