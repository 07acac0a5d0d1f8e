"""
Seeded Random
Deterministic random stream driving variant choice and all in-variant sampling
"""
import math
import random
import string as _string
from typing import MutableSequence, Optional, Sequence, TypeVar

T = TypeVar("T")

LOWERCASE_LETTERS = _string.ascii_lowercase

# Upper bound (exclusive) for seeds handed to the alternative provider
MODEL_SEED_BOUND = 2 ** 31


class EmptyInputError(ValueError):
    """Raised when choosing from an empty sequence"""
    pass


class SeededRandom:
    """
    A seeded random number generator with helper methods.

    Every derived operation is built on top of a single uniform draw so the
    full sequence of calls is a deterministic function of the seed. String
    seeds are hashed with SHA-512 by the standard library, which keeps them
    independent of PYTHONHASHSEED.
    """

    def __init__(self, seed: Optional[str] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def uniform(self, lo: float, hi: float) -> float:
        """Returns a random float in the range [lo, hi)."""
        return lo + (hi - lo) * self._rng.random()

    def range_int(self, lo: int, hi: int) -> int:
        """Returns a random integer in the range [lo, hi)."""
        return math.floor(self.uniform(lo, hi))

    def boolean(self) -> bool:
        return self._rng.random() < 0.5

    def choice(self, seq: Sequence[T]) -> T:
        """
        Returns a random element of the sequence

        Raises:
            EmptyInputError: If the sequence is empty
        """
        if len(seq) == 0:
            raise EmptyInputError("Cannot choose from an empty sequence")
        return seq[self.range_int(0, len(seq))]

    def shuffle(self, seq: MutableSequence[T]) -> MutableSequence[T]:
        """Shuffles the sequence in place (Fisher-Yates) and returns it."""
        for i in range(len(seq) - 1, -1, -1):
            j = self.range_int(0, i + 1)
            seq[i], seq[j] = seq[j], seq[i]
        return seq

    def string(self, length: int) -> str:
        """Returns a random lowercase string of the given length."""
        return "".join(self.choice(LOWERCASE_LETTERS) for _ in range(length))

    def model_seed(self) -> int:
        """Returns an integer seed for the alternative provider."""
        return self.range_int(0, MODEL_SEED_BOUND)
