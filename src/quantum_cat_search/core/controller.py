"""Simulation controller: owns the run and races the two searches.

The controller is the only owner of mutable run state. Each search gets
a cancellation token and a callback bound to the run it was started for,
so a search still unwinding after ``stop`` or ``reset`` can never write
into a newer run.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field, replace
from functools import partial
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from quantum_cat_search.analysis.speedup import SpeedupReport
from quantum_cat_search.core.address_space import AddressSpace
from quantum_cat_search.core.cancellation import CancellationToken
from quantum_cat_search.core.classical_search import ClassicalSearchProcess
from quantum_cat_search.core.error_model import QubitErrorModel
from quantum_cat_search.core.quantum_search import QuantumSearchProcess
from quantum_cat_search.errors import CancelledRun, RunIncomplete
from quantum_cat_search.utils.types import (
    CellState,
    ProcessProgress,
    SearchEvent,
    SearchKind,
    SearchOutcome,
    SimulationConfig,
    SimulationSnapshot,
    validate_bit_length,
)

logger = logging.getLogger(__name__)

Listener = Callable[[SimulationSnapshot], None]


def _blank_states(size: int) -> NDArray[np.int8]:
    return np.full(size, CellState.UNCHECKED, dtype=np.int8)


def _frozen_copy(array: NDArray) -> NDArray:
    copy = array.copy()
    copy.flags.writeable = False
    return copy


@dataclass(eq=False)
class SimulationRun:
    """Everything one race mutates."""

    address_space: AddressSpace
    classical: ProcessProgress = field(default_factory=ProcessProgress)
    quantum: ProcessProgress = field(default_factory=ProcessProgress)
    classical_states: NDArray[np.int8] = field(default=None)  # type: ignore[assignment]
    quantum_states: NDArray[np.int8] = field(default=None)  # type: ignore[assignment]
    running: bool = False
    cancelled: bool = False
    completed: bool = False

    def __post_init__(self) -> None:
        if self.classical_states is None:
            self.classical_states = _blank_states(self.address_space.size)
        if self.quantum_states is None:
            self.quantum_states = _blank_states(self.address_space.size)

    def progress(self, kind: SearchKind) -> ProcessProgress:
        return self.classical if kind is SearchKind.CLASSICAL else self.quantum

    def states(self, kind: SearchKind) -> NDArray[np.int8]:
        return self.classical_states if kind is SearchKind.CLASSICAL else self.quantum_states


class SimulationController:
    """Start, stop and reset the classical-vs-quantum race.

    Renderers register with :meth:`subscribe` and receive a fresh
    :class:`SimulationSnapshot` after every change.
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        rng: np.random.Generator | None = None,
        error_model: QubitErrorModel | None = None,
    ) -> None:
        self.config = config or SimulationConfig()
        self.rng = rng or np.random.default_rng()
        self.error_model = error_model or QubitErrorModel(rng=self.rng)
        # a callback already set on an injected model keeps firing before ours
        self._error_callback = self.error_model.on_change
        self.error_model.on_change = self._error_model_changed

        self._listeners: list[Listener] = []
        self._token = CancellationToken()
        self._error_task: asyncio.Task | None = None
        self.address_space = AddressSpace.generate(self.config.bit_length, self.rng)
        self.current_run = SimulationRun(self.address_space)

    @property
    def bit_length(self) -> int:
        return self.config.bit_length

    @property
    def running(self) -> bool:
        return self.current_run.running

    @property
    def completed(self) -> bool:
        return self.current_run.completed

    # -- renderer plumbing --

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a snapshot listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _error_model_changed(self) -> None:
        if self._error_callback is not None:
            self._error_callback()
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def snapshot(self) -> SimulationSnapshot:
        run = self.current_run
        return SimulationSnapshot(
            address_space=run.address_space,
            classical=replace(run.classical),
            quantum=replace(run.quantum),
            classical_states=_frozen_copy(run.classical_states),
            quantum_states=_frozen_copy(run.quantum_states),
            physical_qubits=_frozen_copy(self.error_model.has_error),
            running=run.running,
            completed=run.completed,
            cancelled=run.cancelled,
        )

    def _apply(self, run: SimulationRun, event: SearchEvent) -> None:
        """Fold a search event into ``run``."""
        if run.cancelled:
            return

        progress = run.progress(event.kind)
        if event.checks is not None:
            progress.checks = event.checks
        if event.current_index is not None:
            progress.current_index = event.current_index
        if event.current_value is not None:
            progress.current_value = event.current_value

        if event.state is not None:
            states = run.states(event.kind)
            if event.broadcast:
                states[:] = event.state
            elif event.room is not None:
                states[event.room] = event.state

        if run is self.current_run:
            self._notify()

    # -- commands --

    async def start(self) -> SpeedupReport | None:
        """Race both searches to completion.

        Returns the speedup report, or ``None`` if a run was already in
        progress or this one was cancelled.
        """
        if self.current_run.running:
            return None

        run = SimulationRun(self.address_space, running=True)
        token = CancellationToken()
        self.current_run = run
        self._token = token
        self._notify()

        emit = partial(self._apply, run)
        classical = ClassicalSearchProcess(
            run.address_space, emit, delay=self.config.classical_step
        )
        quantum = QuantumSearchProcess(
            run.address_space,
            emit,
            delay=self.config.quantum_step,
            settle_delay=self.config.settle_step,
        )
        logger.info(
            "starting %d-bit race, target %d at index %d",
            run.address_space.bit_length,
            run.address_space.target,
            run.address_space.target_index,
        )

        error_task = asyncio.create_task(self.error_model.run())
        self._error_task = error_task
        try:
            outcomes = await asyncio.gather(classical.run(token), quantum.run(token))
        except BaseException:
            token.cancel()
            run.running = False
            raise
        finally:
            error_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await error_task

        if token.cancelled or SearchOutcome.CANCELLED in outcomes:
            logger.info("race cancelled")
            return None

        run.running = False
        run.completed = True
        report = SpeedupReport.from_snapshot(self.snapshot())
        logger.info(
            "race complete: classical %d checks, quantum %d checks (%s)",
            report.classical_checks,
            report.quantum_checks,
            report.message,
        )
        self._notify()
        return report

    def stop(self) -> None:
        """Cancel the current run without waiting for the searches to unwind."""
        run = self.current_run
        if not run.running:
            return
        self._token.cancel()
        run.cancelled = True
        if self._error_task is not None:
            self._error_task.cancel()
        run.running = False
        logger.info(
            "race stopped: classical %d checks, quantum %d checks",
            run.classical.checks,
            run.quantum.checks,
        )
        self._notify()

    def reset(self) -> None:
        """Generate a new address space and clear all progress."""
        if self.current_run.running:
            self.stop()
        self.address_space = AddressSpace.generate(self.config.bit_length, self.rng)
        self.current_run = SimulationRun(self.address_space)
        self.error_model.clear()
        logger.info("reset %d-bit address space", self.config.bit_length)
        self._notify()

    def change_bit_length(self, bit_length: int) -> bool:
        """Switch between supported sizes. Returns True if anything changed."""
        validate_bit_length(bit_length)
        if bit_length == self.config.bit_length or self.current_run.running:
            return False
        self.config = self.config.with_bit_length(bit_length)
        logger.info("bit length changed to %d", bit_length)
        self.reset()
        return True

    def report(self) -> SpeedupReport:
        """Report for the current run, which must have completed."""
        run = self.current_run
        if run.cancelled:
            raise CancelledRun("The last run was cancelled; there is no result")
        if not run.completed:
            raise RunIncomplete("No run has completed yet")
        return SpeedupReport.from_snapshot(self.snapshot())
