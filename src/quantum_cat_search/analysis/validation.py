"""Statistical validation of generated address spaces."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray
from scipy.stats import chisquare

if TYPE_CHECKING:
    from quantum_cat_search.core.address_space import AddressSpace


class AddressSpaceValidator:
    """Check a single address space against its invariants."""

    def __init__(self, address_space: AddressSpace) -> None:
        self.space = address_space

    def is_bijection(self) -> bool:
        """Every value in 1..size appears exactly once."""
        perm = self.space.permutation
        if len(perm) != self.space.size:
            return False
        expected = np.arange(1, self.space.size + 1)
        return bool(np.array_equal(np.sort(perm), expected))

    def target_consistent(self) -> bool:
        idx = self.space.target_index
        return 0 <= idx < self.space.size and int(self.space.permutation[idx]) == self.space.target

    def summary(self) -> dict:
        return {
            "bijection": self.is_bijection(),
            "target_consistent": self.target_consistent(),
        }


class ShuffleUniformityTest:
    """Chi-square tests over many generated address spaces of one size.

    Tracks where each of ``values`` lands and which targets are drawn, so
    both the shuffle and the target sampling can be checked for
    uniformity. Counts are summed into ``bins`` equal-width groups so the
    expected count per cell stays large enough for the chi-square
    approximation.
    """

    def __init__(self, size: int, values: tuple[int, ...] = (1,), bins: int = 8) -> None:
        if size % bins:
            raise ValueError(f"bins must divide size ({size}), got {bins}")
        self.size = size
        self.values = values
        self.bins = bins
        self.position_counts: NDArray[np.int64] = np.zeros((len(values), size), dtype=np.int64)
        self.target_counts: NDArray[np.int64] = np.zeros(size, dtype=np.int64)
        self.samples = 0

    def add(self, permutation: NDArray[np.int64], target: int | None = None) -> None:
        if len(permutation) != self.size:
            raise ValueError(f"Expected a permutation of length {self.size}, got {len(permutation)}")
        perm = np.asarray(permutation)
        for row, value in enumerate(self.values):
            self.position_counts[row, np.flatnonzero(perm == value)] += 1
        if target is not None:
            self.target_counts[target - 1] += 1
        self.samples += 1

    def add_space(self, address_space: AddressSpace) -> None:
        self.add(address_space.permutation, address_space.target)

    def _binned(self, counts: NDArray[np.int64]) -> NDArray[np.int64]:
        return counts.reshape(self.bins, -1).sum(axis=1)

    def position_pvalue(self, value: int) -> float:
        """p-value that ``value`` is uniform over positions."""
        row = self.values.index(value)
        return float(chisquare(self._binned(self.position_counts[row])).pvalue)

    def min_position_pvalue(self) -> float:
        return min(self.position_pvalue(v) for v in self.values)

    def target_pvalue(self) -> float:
        """p-value that sampled targets are uniform over values."""
        if self.target_counts.sum() == 0:
            raise ValueError("No targets recorded")
        return float(chisquare(self._binned(self.target_counts)).pvalue)
