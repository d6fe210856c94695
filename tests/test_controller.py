"""Tests for the simulation controller: the full race lifecycle."""

import asyncio
import math

import numpy as np
import pytest

from quantum_cat_search.core.controller import SimulationController
from quantum_cat_search.core.error_model import QubitErrorModel
from quantum_cat_search.errors import CancelledRun, InvalidConfiguration, RunIncomplete
from quantum_cat_search.utils.types import CellState, SimulationConfig


@pytest.fixture
def controller(fast_config, rng):
    return SimulationController(config=fast_config, rng=rng)


def stop_after(controller, classical_checks):
    """Listener that stops the race once the classical scan reaches a count."""

    def listener(snapshot):
        if snapshot.running and snapshot.classical.checks >= classical_checks:
            controller.stop()

    return listener


class TestInitialState:
    def test_idle(self, controller):
        snap = controller.snapshot()
        assert not snap.running
        assert not snap.completed
        assert snap.classical.checks == 0
        assert snap.quantum.current_index == -1
        assert np.all(snap.classical_states == CellState.UNCHECKED)
        assert np.all(snap.quantum_states == CellState.UNCHECKED)

    def test_bit_length_from_config(self, controller):
        assert controller.bit_length == 9
        assert controller.snapshot().size == 512

    def test_default_config_is_16_bit(self):
        assert SimulationController().bit_length == 16

    def test_snapshot_arrays_are_read_only_copies(self, controller):
        snap = controller.snapshot()
        with pytest.raises(ValueError):
            snap.classical_states[0] = CellState.FOUND
        assert snap.classical_states is not controller.current_run.classical_states


class TestFullRun:
    def test_scenario_9_bit(self, controller):
        report = asyncio.run(controller.start())
        space = controller.address_space
        assert report is not None
        assert report.classical_checks == space.target_index + 1
        assert report.quantum_checks == math.isqrt(512) + 1 == 23
        assert report.speedup == round((space.target_index + 1) / 23)

    def test_final_state(self, controller):
        asyncio.run(controller.start())
        snap = controller.snapshot()
        idx = snap.address_space.target_index
        assert not snap.running
        assert snap.completed
        assert not snap.cancelled
        assert snap.classical.current_index == idx
        assert snap.classical.current_value == snap.address_space.target
        assert snap.quantum.current_value == snap.address_space.target
        assert snap.classical_states[idx] == CellState.FOUND
        assert snap.quantum_states[idx] == CellState.FOUND
        assert np.count_nonzero(snap.classical_states) == 1
        assert np.count_nonzero(snap.quantum_states) == 1

    def test_report_after_completion(self, controller):
        started = asyncio.run(controller.start())
        assert controller.report() == started

    def test_report_before_any_run(self, controller):
        with pytest.raises(RunIncomplete):
            controller.report()

    def test_searches_run_concurrently(self, make_space, controller):
        controller.address_space = make_space(9, 400)
        order = []

        def listener(snapshot):
            order.append((snapshot.classical.checks, snapshot.quantum.checks))

        controller.subscribe(listener)
        asyncio.run(controller.start())
        # quantum finishes while the classical scan is still early on
        quantum_done = next(i for i, (_, q) in enumerate(order) if q == 23)
        assert order[quantum_done][0] < 400

    def test_second_run_restarts_counts(self, controller):
        first = asyncio.run(controller.start())
        second = asyncio.run(controller.start())
        assert first.classical_checks == second.classical_checks
        assert second.quantum_checks == 23


class TestStop:
    def test_cancel_before_completion(self, make_space, controller):
        controller.address_space = make_space(9, 500)
        controller.subscribe(stop_after(controller, 10))
        report = asyncio.run(controller.start())
        snap = controller.snapshot()
        assert report is None
        assert not snap.running
        assert not snap.completed
        assert snap.cancelled

    def test_no_report_for_cancelled_run(self, make_space, controller):
        controller.address_space = make_space(9, 500)
        controller.subscribe(stop_after(controller, 10))
        asyncio.run(controller.start())
        with pytest.raises(CancelledRun):
            controller.report()

    def test_state_frozen_at_stop(self, make_space, controller):
        controller.address_space = make_space(9, 500)
        controller.subscribe(stop_after(controller, 10))
        asyncio.run(controller.start())
        assert controller.snapshot().classical.checks == 10

    def test_stop_while_idle_is_noop(self, controller):
        controller.stop()
        snap = controller.snapshot()
        assert not snap.cancelled

    def test_stop_from_another_task(self):
        config = SimulationConfig(
            bit_length=9, classical_delay=0.01, quantum_delay=0.01, settle_delay=0.01
        )
        controller = SimulationController(config=config)

        async def scenario():
            task = asyncio.create_task(controller.start())
            await asyncio.sleep(0.05)
            assert controller.running
            controller.stop()
            assert not controller.running
            return await task

        assert asyncio.run(scenario()) is None
        assert not controller.completed


class TestStartWhileRunning:
    def test_second_start_is_noop(self, controller):
        results = []

        async def scenario():
            first = asyncio.create_task(controller.start())
            await asyncio.sleep(0)
            results.append(await controller.start())
            return await first

        report = asyncio.run(scenario())
        assert results == [None]
        assert report is not None


class TestChangeBitLength:
    def test_switches_and_resets(self, controller):
        assert controller.change_bit_length(16)
        snap = controller.snapshot()
        assert snap.bit_length == 16
        assert snap.size == 65536
        assert len(snap.classical_states) == 65536
        assert controller.config.time_scale == 0.0

    def test_same_length_is_noop(self, controller):
        space = controller.address_space
        assert not controller.change_bit_length(9)
        assert controller.address_space is space

    def test_unsupported_length(self, controller):
        with pytest.raises(InvalidConfiguration):
            controller.change_bit_length(12)

    def test_noop_while_running(self, make_space, controller):
        attempts = []

        def listener(snapshot):
            if snapshot.running and snapshot.classical.checks == 3 and not attempts:
                space = controller.address_space
                attempts.append(controller.change_bit_length(16))
                attempts.append(controller.address_space is space)
                attempts.append(controller.bit_length)
                controller.stop()

        controller.address_space = make_space(9, 500)
        controller.subscribe(listener)
        asyncio.run(controller.start())
        assert attempts == [False, True, 9]


class TestReset:
    def test_reset_clears_progress(self, controller):
        asyncio.run(controller.start())
        old_space = controller.address_space
        controller.reset()
        snap = controller.snapshot()
        assert controller.address_space is not old_space
        assert snap.classical.checks == 0
        assert snap.quantum.checks == 0
        assert snap.classical.current_index == -1
        assert not snap.completed
        assert np.all(snap.classical_states == CellState.UNCHECKED)
        assert np.all(snap.quantum_states == CellState.UNCHECKED)

    def test_reset_generates_valid_space(self, controller):
        controller.reset()
        space = controller.address_space
        assert space.permutation[space.target_index] == space.target

    def test_reset_clears_qubit_errors(self, controller):
        controller.error_model.has_error[:] = True
        controller.reset()
        assert not controller.snapshot().physical_qubits.any()

    def test_reset_mid_run_isolates_old_run(self, make_space, controller):
        seen = []

        def listener(snapshot):
            if snapshot.running and snapshot.classical.checks == 5:
                controller.reset()
                seen.append(controller.current_run)

        controller.address_space = make_space(9, 500)
        controller.subscribe(listener)
        report = asyncio.run(controller.start())
        assert report is None
        fresh = seen[0]
        assert fresh is controller.current_run
        assert fresh.classical.checks == 0
        assert np.all(fresh.classical_states == CellState.UNCHECKED)


class TestSubscribe:
    def test_listener_receives_snapshots(self, controller):
        snapshots = []
        controller.subscribe(snapshots.append)
        asyncio.run(controller.start())
        assert snapshots[0].running
        assert snapshots[-1].completed
        checks = [s.classical.checks for s in snapshots]
        assert checks == sorted(checks)

    def test_unsubscribe(self, controller):
        snapshots = []
        unsubscribe = controller.subscribe(snapshots.append)
        unsubscribe()
        unsubscribe()
        controller.reset()
        assert snapshots == []


class TestErrorModelLifecycle:
    def test_error_timers_stop_after_run(self, rng):
        model = QubitErrorModel(injection_period=0.001, correction_period=0.002, rng=rng)
        config = SimulationConfig(
            bit_length=9, classical_delay=0.0, quantum_delay=0.002, settle_delay=0.01
        )
        controller = SimulationController(config=config, rng=rng, error_model=model)
        changes = []

        async def scenario():
            await controller.start()
            controller.subscribe(changes.append)
            await asyncio.sleep(0.02)

        asyncio.run(scenario())
        assert changes == []

    def test_errors_injected_while_running(self, rng):
        model = QubitErrorModel(
            error_probability=1.0, injection_period=0.001, correction_period=10.0, rng=rng
        )
        config = SimulationConfig(
            bit_length=9, classical_delay=0.0, quantum_delay=0.002, settle_delay=0.01
        )
        controller = SimulationController(config=config, rng=rng, error_model=model)
        asyncio.run(controller.start())
        assert controller.snapshot().physical_qubits.all()

    def test_error_timers_stop_with_the_race(self, rng, make_space):
        model = QubitErrorModel(
            error_probability=1.0, injection_period=0.01, correction_period=10.0, rng=rng
        )
        config = SimulationConfig(
            bit_length=9, classical_delay=0.01, quantum_delay=0.01, settle_delay=0.3
        )
        controller = SimulationController(config=config, rng=rng, error_model=model)
        controller.address_space = make_space(9, 500)
        changes = []

        async def scenario():
            task = asyncio.create_task(controller.start())
            await asyncio.sleep(0.05)
            controller.stop()
            controller.subscribe(changes.append)
            result = await task
            await asyncio.sleep(0.05)
            return result

        assert asyncio.run(scenario()) is None
        assert changes == []


class TestInjectedErrorModel:
    def test_existing_callback_still_fires(self, rng):
        calls = []
        model = QubitErrorModel(rng=rng, on_change=lambda: calls.append("model"))
        controller = SimulationController(config=SimulationConfig(bit_length=9), rng=rng,
                                          error_model=model)
        controller.subscribe(lambda snapshot: calls.append("controller"))

        model.inject()
        model.correct()
        assert calls == ["model", "controller", "model", "controller"]

    def test_snapshot_sees_injected_faults(self, rng):
        seen = []
        model = QubitErrorModel(error_probability=1.0, rng=rng, on_change=lambda: seen.append(1))
        controller = SimulationController(config=SimulationConfig(bit_length=9), rng=rng,
                                          error_model=model)
        snapshots = []
        controller.subscribe(snapshots.append)

        model.inject()
        assert seen == [1]
        assert snapshots[-1].physical_qubits.all()
