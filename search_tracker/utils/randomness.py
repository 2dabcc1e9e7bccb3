"""Randomness capability used for session ids and color identifiers."""

from __future__ import annotations

import random
import uuid
from typing import Protocol


class RandomSource(Protocol):
    """Source of random identifiers and integers."""

    def uuid4(self) -> str:
        """Return a random RFC 4122 version 4 UUID string."""
        ...

    def randbelow(self, n: int) -> int:
        """Return a random integer in ``[0, n)``."""
        ...


class SystemRandomSource:
    """Random source backed by the operating system's CSPRNG."""

    def __init__(self) -> None:
        self._rng = random.SystemRandom()

    def uuid4(self) -> str:
        return str(uuid.uuid4())

    def randbelow(self, n: int) -> int:
        return self._rng.randrange(n)


class SeededRandomSource:
    """Deterministic random source for reproducible runs."""

    def __init__(self, seed: int | str | None = None) -> None:
        self._rng = random.Random(seed)

    def uuid4(self) -> str:
        return str(uuid.UUID(int=self._rng.getrandbits(128), version=4))

    def randbelow(self, n: int) -> int:
        return self._rng.randrange(n)
