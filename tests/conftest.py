"""Shared fixtures for the search simulation tests."""

import numpy as np
import pytest

from quantum_cat_search.core.address_space import AddressSpace
from quantum_cat_search.utils.types import SimulationConfig


def _make_space(bit_length: int = 9, target_index: int = 0) -> AddressSpace:
    """Unshuffled address space with the target at a chosen index."""
    size = 2 ** bit_length
    permutation = np.arange(1, size + 1, dtype=np.int64)
    return AddressSpace(
        bit_length=bit_length,
        permutation=permutation,
        target=target_index + 1,
        target_index=target_index,
    )


class EventRecorder:
    """Collects search events in emission order."""

    def __init__(self) -> None:
        self.events = []

    def __call__(self, event) -> None:
        self.events.append(event)

    def checks(self) -> list[int]:
        return [e.checks for e in self.events if e.checks is not None]


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def fast_config():
    return SimulationConfig.for_bit_length(9, time_scale=0.0)


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def make_space():
    return _make_space
