"""Dataclass definitions for the search simulation."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from quantum_cat_search.errors import InvalidConfiguration
from quantum_cat_search.utils.constants import (
    CLASSICAL_DELAY,
    DEFAULT_BIT_LENGTH,
    QUANTUM_ITERATION_DELAY,
    QUANTUM_SETTLE_DELAY,
    SUPPORTED_BIT_LENGTHS,
)

if TYPE_CHECKING:
    from quantum_cat_search.core.address_space import AddressSpace


class CellState(enum.IntEnum):
    """Display state of a single room."""

    UNCHECKED = 0
    CHECKING = 1
    AMPLIFIED = 2
    FOUND = 3


class SearchKind(enum.Enum):
    CLASSICAL = "classical"
    QUANTUM = "quantum"


class SearchOutcome(enum.Enum):
    """How a search process terminated."""

    FOUND = "found"
    EXHAUSTED = "exhausted"  # classical scan ran off the end without a match
    CANCELLED = "cancelled"


def validate_bit_length(bit_length: int) -> int:
    if bit_length not in SUPPORTED_BIT_LENGTHS:
        raise InvalidConfiguration(
            f"Bit length must be one of {SUPPORTED_BIT_LENGTHS}, got {bit_length}"
        )
    return bit_length


@dataclass(frozen=True)
class SimulationConfig:
    """Configuration for a simulation run.

    Delays are in seconds. ``time_scale`` multiplies every delay, so a
    scale of 0.0 runs the race as fast as the event loop allows.
    """

    bit_length: int = DEFAULT_BIT_LENGTH
    classical_delay: float | None = None  # None: default for bit_length
    quantum_delay: float | None = None
    settle_delay: float = QUANTUM_SETTLE_DELAY
    time_scale: float = 1.0

    def __post_init__(self) -> None:
        validate_bit_length(self.bit_length)
        # frozen, so defaults are filled in through object.__setattr__
        if self.classical_delay is None:
            object.__setattr__(self, "classical_delay", CLASSICAL_DELAY[self.bit_length])
        if self.quantum_delay is None:
            object.__setattr__(self, "quantum_delay", QUANTUM_ITERATION_DELAY[self.bit_length])
        if self.time_scale < 0:
            raise InvalidConfiguration(f"time_scale must be >= 0, got {self.time_scale}")
        for name in ("classical_delay", "quantum_delay", "settle_delay"):
            if getattr(self, name) < 0:
                raise InvalidConfiguration(f"{name} must be >= 0")

    @classmethod
    def for_bit_length(cls, bit_length: int, time_scale: float = 1.0) -> SimulationConfig:
        """Default delays for a supported bit length."""
        validate_bit_length(bit_length)
        return cls(
            bit_length=bit_length,
            classical_delay=CLASSICAL_DELAY[bit_length],
            quantum_delay=QUANTUM_ITERATION_DELAY[bit_length],
            settle_delay=QUANTUM_SETTLE_DELAY,
            time_scale=time_scale,
        )

    def with_bit_length(self, bit_length: int) -> SimulationConfig:
        return self.for_bit_length(bit_length, time_scale=self.time_scale)

    @property
    def size(self) -> int:
        return 2 ** self.bit_length

    @property
    def classical_step(self) -> float:
        return self.classical_delay * self.time_scale

    @property
    def quantum_step(self) -> float:
        return self.quantum_delay * self.time_scale

    @property
    def settle_step(self) -> float:
        return self.settle_delay * self.time_scale


@dataclass
class ProcessProgress:
    """Progress counters for one search process."""

    checks: int = 0
    current_index: int = -1  # -1 while idle
    current_value: int = 0

    def clear(self) -> None:
        self.checks = 0
        self.current_index = -1
        self.current_value = 0


@dataclass(frozen=True)
class SearchEvent:
    """A state transition emitted by a search process.

    ``None`` fields leave the corresponding value untouched. A cell update
    targets either one ``room`` or, with ``broadcast``, every room.
    """

    kind: SearchKind
    checks: int | None = None
    current_index: int | None = None
    current_value: int | None = None
    state: CellState | None = None
    room: int | None = None
    broadcast: bool = False


@dataclass(frozen=True, eq=False)
class SimulationSnapshot:
    """Read-only view of a run, handed to the renderer."""

    address_space: AddressSpace
    classical: ProcessProgress
    quantum: ProcessProgress
    classical_states: NDArray[np.int8]
    quantum_states: NDArray[np.int8]
    physical_qubits: NDArray[np.bool_]
    running: bool
    completed: bool
    cancelled: bool

    @property
    def bit_length(self) -> int:
        return self.address_space.bit_length

    @property
    def size(self) -> int:
        return self.address_space.size

    @property
    def quantum_iterations(self) -> int:
        return self.address_space.quantum_iterations
