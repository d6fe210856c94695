"""Scripted Grover-style search.

No amplitudes are simulated. The process replays the shape of amplitude
amplification: prepare a uniform superposition (every room ``CHECKING``),
then run floor(sqrt(N)) rounds that amplify the target room and
re-superpose the rest. Room updates are broadcast to the whole array,
apart from the target room itself.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

from quantum_cat_search.utils.types import (
    CellState,
    SearchEvent,
    SearchKind,
    SearchOutcome,
)

if TYPE_CHECKING:
    from quantum_cat_search.core.address_space import AddressSpace
    from quantum_cat_search.core.cancellation import CancellationToken

logger = logging.getLogger(__name__)


class QuantumSearchProcess:
    """Run floor(sqrt(size)) amplification rounds against the target.

    The state preparation counts as the first check, so a completed run
    reports ``iterations + 1`` checks.
    """

    kind = SearchKind.QUANTUM

    def __init__(
        self,
        address_space: AddressSpace,
        emit: Callable[[SearchEvent], None],
        delay: float = 0.0,
        settle_delay: float = 0.0,
    ) -> None:
        self.address_space = address_space
        self.emit = emit
        self.delay = delay
        self.settle_delay = settle_delay
        self.rounds_executed = 0

    @property
    def iterations(self) -> int:
        return self.address_space.quantum_iterations

    def _broadcast(self, state: CellState) -> None:
        self.emit(SearchEvent(kind=self.kind, state=state, broadcast=True))

    async def run(self, token: CancellationToken) -> SearchOutcome:
        target_index = self.address_space.target_index
        self.rounds_executed = 0

        # State preparation
        self._broadcast(CellState.CHECKING)
        self.emit(SearchEvent(kind=self.kind, current_value=self.address_space.target))
        await asyncio.sleep(self.settle_delay)
        checks = 1
        self.emit(SearchEvent(kind=self.kind, checks=checks))

        for i in range(self.iterations):
            if token.cancelled:
                logger.debug("quantum search cancelled after %d rounds", i)
                return SearchOutcome.CANCELLED

            self.emit(SearchEvent(kind=self.kind, room=target_index, state=CellState.AMPLIFIED))
            checks += 1
            self.rounds_executed += 1
            self.emit(SearchEvent(kind=self.kind, checks=checks))
            await asyncio.sleep(self.delay)

            if i < self.iterations - 1:
                # oracle + diffusion
                self._broadcast(CellState.CHECKING)
                await asyncio.sleep(self.delay)

        if token.cancelled:
            logger.debug("quantum search cancelled after the final round")
            return SearchOutcome.CANCELLED

        self._broadcast(CellState.UNCHECKED)
        self.emit(SearchEvent(kind=self.kind, room=target_index, state=CellState.FOUND))
        logger.debug("quantum search amplified index %d in %d rounds", target_index, self.rounds_executed)
        return SearchOutcome.FOUND
