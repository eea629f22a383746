"""Lagged-Fibonacci generator with a one-bit rotation per step.

Each step adds the word at `feed` to the word at `tap` (mod 2**64), rotates the
sum right by one bit and stores it back at `feed`. Addition couples bit
positions through the carry chain; the rotation moves carries around so bit 0
is not starved of them.
"""

from __future__ import annotations

from collections.abc import Iterable

from .trace import trace_event
from .lcg import MASK64, SEED_FUSE, MmixLcg

INT63_MASK = 0x7FFFFFFFFFFFFFFF
HIGH32_MASK = 0xFFFFFFFF00000000


class GeneratorShapeError(ValueError):
    pass


class StateLengthError(ValueError):
    pass


class StateValueError(ValueError):
    pass


def _check_shape(n: int, gap: int) -> None:
    if n < 2:
        raise GeneratorShapeError(f"state size must be at least 2, got {n}")
    if gap % n == 0:
        raise GeneratorShapeError(f"gap {gap} is a multiple of state size {n}; feed would equal tap")


def _check_words(words: Iterable[int]) -> list[int]:
    out = list(words)
    for idx, word in enumerate(out):
        # bool is an int subclass but never a state word.
        if isinstance(word, bool) or not isinstance(word, int):
            raise StateValueError(f"state word {idx} must be an int, got {word!r}")
        if word < 0 or word > MASK64:
            raise StateValueError(f"state word {idx} out of uint64 range: {word}")
    return out


class Source:
    """xer2 generator state: `n` 64-bit words plus the feed and tap cursors.

    Not safe for concurrent use; give each thread its own instance.
    """

    __slots__ = ("_feed", "_tap", "_state")

    def __init__(self, n: int, gap: int, seed: int = 0) -> None:
        n = int(n)
        gap = int(gap)
        _check_shape(n, gap)
        self._state = [0] * n
        self._feed = gap % n
        self._tap = 0
        self.seed(seed)

    @classmethod
    def from_state(cls, gap: int, iv: Iterable[int]) -> "Source":
        """Adopt `iv` as the state without seeding; its length sets `n`."""
        words = _check_words(iv)
        gap = int(gap)
        _check_shape(len(words), gap)
        source = cls.__new__(cls)
        source._state = words
        source._feed = gap % len(words)
        source._tap = 0
        return source

    def __repr__(self) -> str:
        return f"Source(n={self.n}, gap={self.gap}, feed={self._feed}, tap={self._tap})"

    @property
    def n(self) -> int:
        return len(self._state)

    @property
    def gap(self) -> int:
        return (self._feed - self._tap) % len(self._state)

    @property
    def feed(self) -> int:
        return self._feed

    @property
    def tap(self) -> int:
        return self._tap

    def uint64(self) -> int:
        state = self._state
        n = len(state)
        feed = self._feed + 1
        tap = self._tap + 1
        if feed >= n:
            feed = 0
        if tap >= n:
            tap = 0
        total = (state[feed] + state[tap]) & MASK64
        total = (total >> 1) | ((total & 1) << 63)
        state[feed] = total
        self._feed = feed
        self._tap = tap
        return total

    def int63(self) -> int:
        return self.uint64() & INT63_MASK

    def seed(self, seed: int) -> None:
        """Refill the state from a 64-bit seed through the MMIX LCG.

        Negative seeds are taken as their two's complement 64-bit pattern.
        """
        lcg = MmixLcg(seed)
        lcg.skip(2 * SEED_FUSE)
        state = self._state
        for idx in range(len(state)):
            low = lcg.upper32()
            high = lcg.next() & HIGH32_MASK
            state[idx] = high | low
        self._normalize_cursors()
        for _ in range(len(state)):
            self.uint64()
        trace_event("seed", source=self, seed=int(seed))

    def set_state(self, words: Iterable[int]) -> None:
        new_state = _check_words(words)
        if len(new_state) != len(self._state):
            raise StateLengthError(
                f"state length mismatch: have={len(self._state)} got={len(new_state)}"
            )
        self._state = new_state
        self._normalize_cursors()
        trace_event("set_state", source=self, first_word=new_state[0])

    def save_state(self) -> list[int]:
        """Copy of the words rotated so the current tap is element 0.

        `Source.from_state(x.gap, x.save_state())` continues exactly like `x`.
        """
        tap = self._tap
        return self._state[tap:] + self._state[:tap]

    def copy(self) -> "Source":
        return Source.from_state(self.gap, self.save_state())

    def _normalize_cursors(self) -> None:
        self._feed = (self._feed - self._tap) % len(self._state)
        self._tap = 0
