"""Random sources for symbol generation."""
import random
import secrets
from abc import ABC, abstractmethod


class RNGBase(ABC):
    """Abstract RNG interface used by the symbol generator."""

    @abstractmethod
    def random(self) -> float:
        """Return random float in [0, 1)."""
        pass

    @abstractmethod
    def randbelow(self, n: int) -> int:
        """Return random int in [0, n)."""
        pass


class ProductionRNG(RNGBase):
    """
    Default RNG for live sessions.

    Draws from the OS entropy pool, no fixed seed. This is not a certified
    fair-gaming source; it only avoids predictable sequences.
    """

    def random(self) -> float:
        return secrets.randbelow(2**32) / (2**32)

    def randbelow(self, n: int) -> int:
        return secrets.randbelow(n)


class SeededRNG(RNGBase):
    """
    Test/Simulation RNG.

    Deterministic, fully controlled by seed.
    """

    def __init__(self, seed: int):
        self._rng = random.Random(seed)
        self.seed = seed

    def random(self) -> float:
        return self._rng.random()

    def randbelow(self, n: int) -> int:
        return self._rng.randrange(n)
