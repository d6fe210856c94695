"""Speedup report for a completed race.

The ratio is illustrative: it compares how many rooms the classical scan
opened against how many amplification rounds the scripted quantum search
ran. It is not a wall-clock benchmark.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quantum_cat_search.utils.types import SimulationSnapshot

INCOMPLETE_MESSAGE = "Quantum search did not complete successfully."


def compute_speedup(classical_checks: int, quantum_checks: int) -> int | None:
    """round(classical / quantum), or None when the quantum side never checked."""
    if quantum_checks <= 0:
        return None
    return round(classical_checks / quantum_checks)


@dataclass(frozen=True)
class SpeedupReport:
    """Outcome of one uninterrupted run."""

    bit_length: int
    classical_checks: int
    quantum_checks: int
    target: int
    target_index: int

    @property
    def size(self) -> int:
        return 2 ** self.bit_length

    @property
    def quantum_iterations(self) -> int:
        return math.isqrt(self.size)

    @property
    def speedup(self) -> int | None:
        return compute_speedup(self.classical_checks, self.quantum_checks)

    @property
    def theoretical_speedup(self) -> float:
        """Average-case classical checks (N/2) over sqrt(N) rounds."""
        return (self.size / 2) / self.quantum_iterations

    @property
    def message(self) -> str:
        speedup = self.speedup
        if speedup is None:
            return INCOMPLETE_MESSAGE
        return f"{speedup}x faster using quantum search!"

    @classmethod
    def from_snapshot(cls, snapshot: SimulationSnapshot) -> SpeedupReport:
        return cls(
            bit_length=snapshot.bit_length,
            classical_checks=snapshot.classical.checks,
            quantum_checks=snapshot.quantum.checks,
            target=snapshot.address_space.target,
            target_index=snapshot.address_space.target_index,
        )

    def summary(self) -> dict:
        return {
            "bit_length": self.bit_length,
            "rooms": self.size,
            "classical_checks": self.classical_checks,
            "quantum_checks": self.quantum_checks,
            "quantum_iterations": self.quantum_iterations,
            "speedup": self.speedup,
            "theoretical_speedup": self.theoretical_speedup,
            "message": self.message,
        }
