"""Matplotlib-based 2D plots of the search race."""

from __future__ import annotations

import math
import os
from typing import TYPE_CHECKING

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend by default

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import ListedColormap
from numpy.typing import NDArray

from quantum_cat_search.utils.constants import CHUNK_SIZE, SUPPORTED_BIT_LENGTHS
from quantum_cat_search.utils.types import CellState, SearchKind
from quantum_cat_search.visualization.layout import chunk_states, grid_side

if TYPE_CHECKING:
    from quantum_cat_search.analysis.speedup import SpeedupReport
    from quantum_cat_search.utils.types import SimulationSnapshot

# indexed by CellState, then grid padding and opened-chunk colors
STATE_COLORS = ["#f3f4f6", "#fef08a", "#a855f7", "#22c55e", "#e5e7eb", "#dbeafe"]
PADDING = len(CellState)
PASSED = PADDING + 1


def state_grid(states: NDArray[np.int8]) -> NDArray[np.int8]:
    """Lay room states out row-major on a square grid, padding the tail."""
    side = grid_side(len(states))
    grid = np.full(side * side, PADDING, dtype=np.int8)
    grid[: len(states)] = states
    return grid.reshape(side, side)


def chunk_grid(snapshot: SimulationSnapshot, kind: SearchKind) -> NDArray[np.int8]:
    """32x32 chunk grid for 16-bit runs, using the chunk colors."""
    chunks = chunk_states(snapshot, kind, CHUNK_SIZE)
    values = np.array([
        CellState.CHECKING if c.current
        else CellState.AMPLIFIED if c.highlighted
        else PASSED if c.passed and c.state == CellState.UNCHECKED
        else c.state
        for c in chunks
    ], dtype=np.int8)
    return state_grid(values)


class PlotSuite:
    """Matplotlib-based 2D plots for the classical-vs-quantum race."""

    def __init__(self, save_dir: str = "~/Desktop") -> None:
        self.save_dir = os.path.expanduser(save_dir)

    def _save_or_show(
        self, fig: plt.Figure, name: str, show: bool, save: bool
    ) -> plt.Figure:
        if save:
            os.makedirs(self.save_dir, exist_ok=True)
            path = os.path.join(self.save_dir, f"qcs_{name}.png")
            fig.savefig(path, dpi=150, bbox_inches="tight")
        if show:
            plt.show()
        else:
            plt.close(fig)
        return fig

    def search_grids(
        self,
        snapshot: SimulationSnapshot,
        show: bool = False,
        save: bool = False,
    ) -> plt.Figure:
        """Side-by-side room grids for the classical and quantum searches.

        9-bit runs draw every room; 16-bit runs fold rooms into 64-room
        chunks so the grid stays readable.
        """
        cmap = ListedColormap(STATE_COLORS)
        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 6))

        panels = (
            (ax1, SearchKind.CLASSICAL, snapshot.classical_states, snapshot.classical.checks,
             f"Classical Search (O(n) = {snapshot.size})", "Rooms Checked"),
            (ax2, SearchKind.QUANTUM, snapshot.quantum_states, snapshot.quantum.checks,
             f"Quantum Search (O(√n) = {snapshot.quantum_iterations})", "Quantum Iterations"),
        )
        for ax, kind, states, checks, title, label in panels:
            if snapshot.bit_length == 9:
                grid = state_grid(states)
            else:
                grid = chunk_grid(snapshot, kind)
            ax.imshow(grid, cmap=cmap, vmin=0, vmax=len(STATE_COLORS) - 1, interpolation="nearest")
            ax.set_title(title)
            ax.set_xlabel(f"{label}: {checks}")
            ax.set_xticks([])
            ax.set_yticks([])

        fig.suptitle(
            f"Find Schrödinger's Cat ({snapshot.bit_length}-bit = {snapshot.size} Rooms) "
            f"-- Cat ID {snapshot.address_space.target}"
        )
        return self._save_or_show(fig, "search_grids", show, save)

    def scaling_comparison(
        self,
        report: SpeedupReport | None = None,
        show: bool = False,
        save: bool = False,
    ) -> plt.Figure:
        """Worst-case classical checks (n) against quantum rounds (floor sqrt n).

        If a report is given, its measured counts are overlaid.
        """
        bits = np.arange(1, max(SUPPORTED_BIT_LENGTHS) + 1)
        sizes = 2 ** bits
        quantum = np.array([math.isqrt(int(n)) for n in sizes])

        fig, ax = plt.subplots(figsize=(10, 6))
        ax.plot(bits, sizes, label="Classical O(n)", color="blue")
        ax.plot(bits, quantum, label="Quantum O(√n)", color="purple")
        if report is not None:
            ax.scatter([report.bit_length], [report.classical_checks], color="blue", zorder=3,
                       label=f"Measured classical ({report.classical_checks})")
            ax.scatter([report.bit_length], [report.quantum_checks], color="purple", zorder=3,
                       label=f"Measured quantum ({report.quantum_checks})")
        ax.set_yscale("log")
        ax.set_xlabel("Address bits")
        ax.set_ylabel("Checks")
        ax.set_title("Search Cost Scaling")
        ax.legend()
        ax.grid(True, alpha=0.3)

        return self._save_or_show(fig, "scaling", show, save)

    def qubit_register(
        self,
        snapshot: SimulationSnapshot,
        show: bool = False,
        save: bool = False,
    ) -> plt.Figure:
        """Physical qubits on a 4x4 grid: red for faults, green otherwise."""
        flags = np.asarray(snapshot.physical_qubits, dtype=bool)
        side = grid_side(len(flags))
        grid = np.zeros(side * side)
        grid[: len(flags)] = np.where(flags, 1.0, 0.0)

        fig, ax = plt.subplots(figsize=(4, 4))
        ax.imshow(grid.reshape(side, side), cmap=ListedColormap(["#4ade80", "#f87171"]),
                  vmin=0, vmax=1)
        ax.set_title(f"Physical Qubits ({int(flags.sum())} errors)")
        ax.set_xticks([])
        ax.set_yticks([])

        return self._save_or_show(fig, "qubits", show, save)
