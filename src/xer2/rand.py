from __future__ import annotations

import hashlib
import random
import secrets

from .config import DEFAULT_GAP, DEFAULT_N
from .lcg import MASK64
from .source import Source

STATE_TAG = "xer2/1"
RECIP_BPF = 2.0**-53


def _seed_to_int(a: object) -> int:
    if a is None:
        return secrets.randbits(64)
    if isinstance(a, int):
        return a & MASK64
    if isinstance(a, float):
        # Same rule as random.Random: integral floats seed like the int.
        return hash(a) & MASK64
    if isinstance(a, str):
        a = a.encode("utf-8")
    if isinstance(a, (bytes, bytearray)):
        digest = hashlib.sha512(bytes(a)).digest()
        return int.from_bytes(digest[:8], "little")
    raise TypeError(
        "The only supported seed types are: None, int, float, str, bytes, and bytearray."
    )


class Xer2Random(random.Random):
    """`random.Random` backed by a xer2 `Source` instead of the Mersenne Twister.

    All the distribution helpers (`randrange`, `choice`, `shuffle`, `gauss`, ...)
    come from the base class and draw from `random()` / `getrandbits()`.
    """

    def __init__(self, x: object = None, *, n: int = DEFAULT_N, gap: int = DEFAULT_GAP) -> None:
        self._source = Source(n, gap)
        super().__init__(x)

    @property
    def source(self) -> Source:
        return self._source

    def seed(self, a: object = None, version: int = 2) -> None:
        self._source.seed(_seed_to_int(a))
        self.gauss_next = None

    def random(self) -> float:
        return (self._source.uint64() >> 11) * RECIP_BPF

    def getrandbits(self, k: int) -> int:
        if k < 0:
            raise ValueError("number of bits must be non-negative")
        if k == 0:
            return 0
        words = (k + 63) // 64
        value = 0
        for idx in range(words):
            value |= self._source.uint64() << (64 * idx)
        return value >> (64 * words - k)

    def getstate(self) -> tuple:
        source = self._source
        return (STATE_TAG, source.gap, tuple(source.save_state()), self.gauss_next)

    def setstate(self, state: tuple) -> None:
        try:
            tag, gap, words, gauss_next = state
        except (TypeError, ValueError) as exc:
            raise ValueError(f"state must be a 4-tuple, got {state!r}") from exc
        if tag != STATE_TAG:
            raise ValueError(f"state with tag {tag!r} passed to Xer2Random.setstate()")
        self._source = Source.from_state(gap, words)
        self.gauss_next = gauss_next
