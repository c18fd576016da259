# qregsim/errors.py
"""Exceptions raised by the simulator core.

Every error is raised before the state vector or the circuit log is touched,
so a caller that catches one can keep using the session as it was.
"""


class SimulatorError(Exception):
    """Base class for all qregsim errors."""


class InvalidDimension(SimulatorError, ValueError):
    """Qubit count < 1, not an integer, or too large for the memory budget."""


class IndexOutOfRange(SimulatorError, IndexError):
    """Basis index outside [0, 2**n)."""


class InvalidQubitRange(SimulatorError, ValueError):
    """Gate target/control outside [0, n), or wrong number of qubit arguments."""


class InvalidQubitPair(SimulatorError, ValueError):
    """Control and target of a two-qubit gate are not a valid distinct pair."""


class UnknownGate(SimulatorError, ValueError):
    """Gate tag not present in the catalog."""


class InvalidGateMatrix(SimulatorError, ValueError):
    """Custom gate matrix has the wrong shape or is not unitary (debug mode)."""


class CircuitFull(SimulatorError, RuntimeError):
    """The session reached its configured maximum number of columns."""


class NormalizationError(SimulatorError, ArithmeticError):
    """State vector norm drifted away from 1."""


class ConfigError(SimulatorError, ValueError):
    """Invalid simulator configuration value or QREGSIM_* environment variable."""
