"""Cosmetic physical-qubit error model.

Sixteen physical qubits pick up random faults on one timer and are all
corrected on a slower one. Nothing here feeds back into the searches; it
only gives the quantum panel something to show about error correction.
"""

from __future__ import annotations

import asyncio
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from quantum_cat_search.utils.constants import (
    ERROR_CORRECTION_PERIOD,
    ERROR_INJECTION_PERIOD,
    NUM_PHYSICAL_QUBITS,
    QUBIT_ERROR_PROBABILITY,
)


class QubitErrorModel:
    """Periodic fault injection and correction over a fixed qubit register."""

    def __init__(
        self,
        num_qubits: int = NUM_PHYSICAL_QUBITS,
        error_probability: float = QUBIT_ERROR_PROBABILITY,
        injection_period: float = ERROR_INJECTION_PERIOD,
        correction_period: float = ERROR_CORRECTION_PERIOD,
        rng: np.random.Generator | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        if not 0.0 <= error_probability <= 1.0:
            raise ValueError(f"error_probability must be in [0, 1], got {error_probability}")
        if injection_period <= 0 or correction_period <= 0:
            raise ValueError("Timer periods must be positive")

        self.num_qubits = num_qubits
        self.error_probability = error_probability
        self.injection_period = injection_period
        self.correction_period = correction_period
        self.rng = rng or np.random.default_rng()
        self.on_change = on_change
        self.has_error: NDArray[np.bool_] = np.zeros(num_qubits, dtype=bool)

    @property
    def error_count(self) -> int:
        return int(np.sum(self.has_error))

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def inject(self) -> None:
        """Re-roll every qubit's fault flag independently."""
        self.has_error = self.rng.random(self.num_qubits) < self.error_probability
        self._changed()

    def correct(self) -> None:
        """Clear all faults (periodic error correction)."""
        self.has_error = np.zeros(self.num_qubits, dtype=bool)
        self._changed()

    def clear(self) -> None:
        """Clear faults without notifying, used when a run is reset."""
        self.has_error = np.zeros(self.num_qubits, dtype=bool)

    async def _every(self, period: float, action: Callable[[], None]) -> None:
        while True:
            await asyncio.sleep(period)
            action()

    async def run(self) -> None:
        """Drive both timers until the surrounding task is cancelled."""
        await asyncio.gather(
            self._every(self.injection_period, self.inject),
            self._every(self.correction_period, self.correct),
        )
