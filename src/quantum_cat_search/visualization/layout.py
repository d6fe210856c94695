"""Layout helpers for drawing snapshots.

These turn snapshot data into what the panels show: the binary room
address split into rows, and the 16-bit grid folded into 64-room chunks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from quantum_cat_search.utils.constants import ADDRESS_ROWS, CHUNK_SIZE
from quantum_cat_search.utils.types import CellState, SearchKind, validate_bit_length

if TYPE_CHECKING:
    from quantum_cat_search.utils.types import SimulationSnapshot


def room_address_rows(number: int, bit_length: int) -> list[str]:
    """Binary address of ``number`` split into equal rows (3 for 9-bit, 4 for 16-bit).

    Rooms are numbered 1..2^b, so room 2^b wraps to the all-zero address.
    """
    validate_bit_length(bit_length)
    size = 2 ** bit_length
    if not 0 <= number <= size:
        raise ValueError(f"{number} is not a room number for {bit_length} bits")
    binary = f"{number % size:0{bit_length}b}"
    rows = ADDRESS_ROWS[bit_length]
    per_row = bit_length // rows
    return [binary[i * per_row:(i + 1) * per_row] for i in range(rows)]


def address_value(rows: list[str]) -> int:
    """Sum of the place values of the set bits."""
    bits = "".join(rows)
    width = len(bits)
    return sum(2 ** (width - 1 - i) for i, bit in enumerate(bits) if bit == "1")


def grid_side(size: int) -> int:
    """Columns of the square room grid (23 for 512 rooms)."""
    return int(np.ceil(np.sqrt(size)))


@dataclass(frozen=True)
class Chunk:
    """One cell of the chunked 16-bit grid."""

    index: int
    state: CellState  # state of the chunk's first room
    current: bool = False  # classical: holds the room being checked
    passed: bool = False  # classical: holds an already-opened non-target room
    highlighted: bool = False  # quantum: holds an amplified/found target


def chunk_states(
    snapshot: SimulationSnapshot,
    kind: SearchKind,
    chunk_size: int = CHUNK_SIZE,
) -> list[Chunk]:
    """Fold one process's room states into chunks of ``chunk_size`` rooms."""
    if kind is SearchKind.CLASSICAL:
        states = snapshot.classical_states
        current_index = snapshot.classical.current_index
    else:
        states = snapshot.quantum_states
        current_index = -1
    space = snapshot.address_space

    chunks = []
    for n, start in enumerate(range(0, len(states), chunk_size)):
        stop = start + chunk_size
        chunk = states[start:stop]
        current = passed = highlighted = False
        if kind is SearchKind.CLASSICAL:
            current = start <= current_index < stop
            # rooms before the current index, not counting the target
            opened = max(0, min(stop, current_index) - start)
            if start <= space.target_index < start + opened:
                opened -= 1
            passed = opened > 0
        elif start <= space.target_index < stop:
            highlighted = bool(
                np.any((chunk == CellState.AMPLIFIED) | (chunk == CellState.FOUND))
            )
        chunks.append(Chunk(
            index=n,
            state=CellState(int(chunk[0])),
            current=current,
            passed=passed,
            highlighted=highlighted,
        ))
    return chunks
