"""Snapshot renderer for the search race.

The renderer only reads snapshots and sends commands back to the
controller. Its cosmetic cat-flip animation runs on its own timer and
has no bearing on the searches.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from quantum_cat_search.utils.constants import FLIP_PERIOD
from quantum_cat_search.utils.types import SearchKind
from quantum_cat_search.visualization.layout import address_value, room_address_rows

if TYPE_CHECKING:
    from quantum_cat_search.analysis.speedup import SpeedupReport
    from quantum_cat_search.core.controller import SimulationController
    from quantum_cat_search.utils.types import SimulationSnapshot


class SnapshotRenderer:
    """Keeps the latest snapshot and the presentation-only state.

    Controls:
        start / stop  -- one toggle button
        reset         -- disabled while running
        bit length    -- disabled while running
    """

    def __init__(
        self,
        controller: SimulationController,
        flip_period: float = FLIP_PERIOD,
    ) -> None:
        self.controller = controller
        self.flip_period = flip_period
        self.snapshot: SimulationSnapshot = controller.snapshot()
        self.frames: int = 0
        self.flipped: bool = False
        self.last_report: SpeedupReport | None = None
        self._unsubscribe = controller.subscribe(self.render)

    def render(self, snapshot: SimulationSnapshot) -> None:
        self.snapshot = snapshot
        self.frames += 1

    def close(self) -> None:
        self._unsubscribe()

    # -- derived display state --

    @property
    def controls_enabled(self) -> bool:
        """Reset and bit-length buttons are locked during a run."""
        return not self.snapshot.running

    @property
    def show_results(self) -> bool:
        """The result dialog never opens for a cancelled run."""
        return self.snapshot.completed and not self.snapshot.cancelled

    def address_rows(self, kind: SearchKind = SearchKind.CLASSICAL) -> list[str]:
        """Address bits shown in a panel; falls back to the target while idle."""
        if not isinstance(kind, SearchKind):
            raise TypeError(f"kind must be a SearchKind, got {type(kind).__name__}")
        progress = self.snapshot.classical if kind is SearchKind.CLASSICAL else self.snapshot.quantum
        number = progress.current_value or self.snapshot.address_space.target
        return room_address_rows(number, self.snapshot.bit_length)

    def address_total(self) -> int:
        return address_value(self.address_rows(SearchKind.CLASSICAL))

    # -- commands --

    async def toggle(self) -> SpeedupReport | None:
        """Start button when idle, stop button while running."""
        if self.snapshot.running:
            self.controller.stop()
            return None
        self.last_report = await self.controller.start()
        return self.last_report

    def reset(self) -> bool:
        if not self.controls_enabled:
            return False
        self.last_report = None
        self.controller.reset()
        return True

    def select_bit_length(self, bit_length: int) -> bool:
        if not self.controls_enabled:
            return False
        return self.controller.change_bit_length(bit_length)

    # -- cosmetic animation --

    def flip(self) -> None:
        self.flipped = not self.flipped

    async def run_flip_timer(self) -> None:
        """Toggle the cat every ``flip_period`` seconds until cancelled."""
        while True:
            await asyncio.sleep(self.flip_period)
            self.flip()
