"""Classical linear search: open one room at a time until the cat turns up."""

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


class ClassicalSearchProcess:
    """Scan the permutation in order, one delay per room.

    Every room costs one check, so the check count on success is
    ``target_index + 1`` and ``size`` in the worst case.
    """

    kind = SearchKind.CLASSICAL

    def __init__(
        self,
        address_space: AddressSpace,
        emit: Callable[[SearchEvent], None],
        delay: float = 0.0,
    ) -> None:
        self.address_space = address_space
        self.emit = emit
        self.delay = delay

    def _room(self, index: int, state: CellState) -> None:
        self.emit(SearchEvent(kind=self.kind, room=index, state=state))

    async def run(self, token: CancellationToken) -> SearchOutcome:
        target = self.address_space.target
        checks = 0

        for index in range(self.address_space.size):
            if token.cancelled:
                logger.debug("classical search cancelled after %d checks", checks)
                return SearchOutcome.CANCELLED

            checks += 1
            value = self.address_space.value_at(index)
            self.emit(SearchEvent(
                kind=self.kind,
                checks=checks,
                current_index=index,
                current_value=value,
                room=index,
                state=CellState.CHECKING,
            ))
            await asyncio.sleep(self.delay)

            if value == target:
                self._room(index, CellState.FOUND)
                logger.debug("classical search found %d at index %d", target, index)
                return SearchOutcome.FOUND
            self._room(index, CellState.UNCHECKED)

        return SearchOutcome.EXHAUSTED
