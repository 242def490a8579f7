"""Random byte sources for CXNN."""

import random
from typing import Iterable, Optional, Protocol


class ByteSource(Protocol):
    def next_byte(self) -> int:
        ...


class RandomByteSource:
    """Uniformly distributed bytes from a (optionally seeded) PRNG"""

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def next_byte(self) -> int:
        return self._random.randint(0, 255)


class ScriptedByteSource:
    """Replays a fixed sequence of bytes, cycling when it runs out"""

    def __init__(self, values: Iterable[int]):
        self.values = [v & 0xFF for v in values]
        if not self.values:
            raise ValueError("ScriptedByteSource needs at least one value")
        self._pos = 0

    def next_byte(self) -> int:
        value = self.values[self._pos % len(self.values)]
        self._pos += 1
        return value
