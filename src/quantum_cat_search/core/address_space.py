"""Address space: a shuffled set of rooms with one hidden cat.

Rooms are numbered 1..2^b and shuffled uniformly. The cat's ID (the
target) is drawn from the shuffled rooms, and its position is what both
searches are racing to find.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from quantum_cat_search.errors import TargetNotFound
from quantum_cat_search.utils.types import validate_bit_length


def locate_target(permutation: NDArray[np.int64], target: int) -> int:
    """Index of ``target`` in ``permutation`` by linear scan."""
    for index, value in enumerate(permutation):
        if value == target:
            return index
    raise TargetNotFound(f"Target {target} is not in the permutation")


@dataclass(frozen=True, eq=False)
class AddressSpace:
    """A permutation of 1..size and the designated target."""

    bit_length: int
    permutation: NDArray[np.int64]
    target: int
    target_index: int

    @property
    def size(self) -> int:
        return 2 ** self.bit_length

    @property
    def quantum_iterations(self) -> int:
        """Amplification rounds, floor(sqrt(size))."""
        return math.isqrt(self.size)

    @classmethod
    def generate(
        cls,
        bit_length: int,
        rng: np.random.Generator | None = None,
    ) -> AddressSpace:
        """Shuffle 1..2^bit_length and pick a target from the shuffled rooms.

        ``Generator.permutation`` is a Fisher-Yates shuffle, so every room
        is equally likely at every position. Sampling the target from the
        shuffled array is uniform over values.
        """
        validate_bit_length(bit_length)
        if rng is None:
            rng = np.random.default_rng()

        size = 2 ** bit_length
        permutation = rng.permutation(np.arange(1, size + 1, dtype=np.int64))
        permutation.flags.writeable = False
        target = int(permutation[rng.integers(size)])
        return cls(
            bit_length=bit_length,
            permutation=permutation,
            target=target,
            target_index=locate_target(permutation, target),
        )

    def value_at(self, index: int) -> int:
        return int(self.permutation[index])

    def __repr__(self) -> str:
        return (
            f"AddressSpace(bit_length={self.bit_length}, target={self.target}, "
            f"target_index={self.target_index})"
        )
