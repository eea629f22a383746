from __future__ import annotations

MASK64 = 0xFFFFFFFFFFFFFFFF
MMIX_MULTIPLIER = 6364136223846793005
MMIX_INCREMENT = 1442695040888963407

# Steps burned before any output is used, in pairs.
SEED_FUSE = 20


class MmixLcg:
    """Knuth's MMIX 64-bit linear congruential generator.

    Matches:
      state = state * 6364136223846793005 + 1442695040888963407  (mod 2**64)

    Only the upper 32 bits of each state are statistically useful; callers
    expanding seeds should read those.
    """

    __slots__ = ("_state",)

    def __init__(self, seed: int) -> None:
        self._state = int(seed) & MASK64

    @property
    def state(self) -> int:
        return self._state

    def next(self) -> int:
        self._state = (self._state * MMIX_MULTIPLIER + MMIX_INCREMENT) & MASK64
        return self._state

    def upper32(self) -> int:
        return self.next() >> 32

    def skip(self, count: int) -> None:
        state = self._state
        for _ in range(int(count)):
            state = (state * MMIX_MULTIPLIER + MMIX_INCREMENT) & MASK64
        self._state = state
