"""Configuration constants for the Schrödinger's-cat search race."""

# -- Address space --
SUPPORTED_BIT_LENGTHS: tuple[int, ...] = (9, 16)
DEFAULT_BIT_LENGTH: int = 16

# -- Timing (seconds) --
CLASSICAL_DELAY: dict[int, float] = {9: 0.05, 16: 0.005}  # legible at 512 rooms, tolerable at 65536
QUANTUM_ITERATION_DELAY: dict[int, float] = {9: 0.05, 16: 0.2}
QUANTUM_SETTLE_DELAY: float = 1.0  # state preparation

# -- Physical qubit error model --
NUM_PHYSICAL_QUBITS: int = 16
QUBIT_ERROR_PROBABILITY: float = 0.2
ERROR_INJECTION_PERIOD: float = 3.0
ERROR_CORRECTION_PERIOD: float = 6.0

# -- Renderer --
FLIP_PERIOD: float = 2.0
CHUNK_SIZE: int = 64  # rooms per cell on the 16-bit grid
ADDRESS_ROWS: dict[int, int] = {9: 3, 16: 4}
