"""Classical linear search racing Grover-style amplitude amplification."""

__version__ = "0.1.0"
