"""Seedable randomizer shared by the snake and tetromino rules"""
import time
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


class GameRandom:
    """32-bit LCG. Same seed, same game."""

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = time.time_ns() & 0xFFFFFFFF
        self.seed = seed & 0xFFFFFFFF
        self.state = self.seed

    def _lcg_next(self) -> int:
        self.state = (self.state * 0x41C64E6D + 0x3039) & 0xFFFFFFFF
        return self.state

    def _rand(self) -> int:
        """15 high bits of the next state (0..32767)."""
        return (self._lcg_next() >> 16) & 0x7FFF

    def _rand30(self) -> int:
        return (self._rand() << 15) | self._rand()

    def randrange(self, n: int) -> int:
        if n <= 0:
            raise ValueError("randrange() needs a positive bound")
        return self._rand30() % n

    def random(self) -> float:
        """Float in [0, 1)."""
        return self._rand30() / float(1 << 30)

    def choice(self, seq: Sequence[T]) -> T:
        if not seq:
            raise IndexError("cannot choose from an empty sequence")
        return seq[self.randrange(len(seq))]
