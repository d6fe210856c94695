"""Cooperative cancellation shared by the controller and both searches."""

from __future__ import annotations


class CancellationToken:
    """A one-way cancel signal polled at loop boundaries.

    Cancelling does not interrupt an in-flight delay; a process notices on
    its next iteration, up to one delay later.
    """

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"
