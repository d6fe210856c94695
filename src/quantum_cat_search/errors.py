"""Exception taxonomy for the search simulation."""


class SimulationError(Exception):
    """Base class for simulation errors."""


class InvalidConfiguration(SimulationError, ValueError):
    """An unsupported bit length or timing was requested."""


class TargetNotFound(SimulationError, LookupError):
    """The target is missing from the permutation (a generator bug)."""


class CancelledRun(SimulationError):
    """The run was stopped before both searches finished.

    Cancellation is an expected way for a run to end, not a failure; it
    only means there is no result to report.
    """


class RunIncomplete(SimulationError):
    """A result was requested before any run completed."""
