"""Debug mode and invariant checks.

None of these run on the normal hot path. When debug mode is on (via
:func:`set_debug_enabled`, :func:`debug_context`, the ``QREGSIM_DEBUG``
environment variable, or ``SimulatorConfig(debug=True)``) the session uses them
to validate custom matrices and permutation rules before a gate is applied and
to check the norm afterwards.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator

import numpy as np

from .errors import InvalidGateMatrix, NormalizationError

_DEBUG_ENV_VAR = "QREGSIM_DEBUG"
_debug_enabled: bool = os.getenv(_DEBUG_ENV_VAR, "0").lower() in (
    "1",
    "true",
    "yes",
    "on",
)

NORM_TOL = 1e-9
UNITARY_TOL = 1e-9


def is_debug_enabled() -> bool:
    """Return whether debug mode is currently enabled."""
    return _debug_enabled


def set_debug_enabled(enabled: bool) -> None:
    global _debug_enabled
    _debug_enabled = bool(enabled)


@contextmanager
def debug_context(enabled: bool = True) -> Iterator[None]:
    """Temporarily enable or disable debug mode.

    Example
    -------
    >>> with debug_context(True):
    ...     session.apply_matrix(U, 0)   # U is checked for unitarity
    """
    global _debug_enabled
    prev = _debug_enabled
    _debug_enabled = bool(enabled)
    try:
        yield
    finally:
        _debug_enabled = prev


def is_unitary(U: np.ndarray, atol: float = UNITARY_TOL) -> bool:
    U = np.asarray(U)
    if U.ndim != 2 or U.shape[0] != U.shape[1]:
        return False
    return bool(np.allclose(U @ U.conj().T, np.eye(U.shape[0]), atol=atol, rtol=0.0))


def assert_unitary_2x2(U: np.ndarray, atol: float = UNITARY_TOL) -> None:
    """Raise InvalidGateMatrix unless U is a 2x2 unitary."""
    U = np.asarray(U)
    if U.shape != (2, 2):
        raise InvalidGateMatrix(f"single-qubit gate must be 2x2, got shape {U.shape}")
    if not np.all(np.isfinite(U)):
        raise InvalidGateMatrix("gate matrix contains non-finite entries")
    if not is_unitary(U, atol=atol):
        raise InvalidGateMatrix("gate matrix is not unitary (U @ U^dagger != I)")


def assert_permutation(destinations: np.ndarray) -> None:
    """Raise InvalidGateMatrix unless ``destinations`` is a bijection of its index range."""
    N = destinations.shape[0]
    if destinations.min(initial=0) < 0 or destinations.max(initial=0) >= N:
        raise InvalidGateMatrix("permutation rule maps outside the basis index range")
    if np.unique(destinations).shape[0] != N:
        raise InvalidGateMatrix("permutation rule is not a bijection")


def assert_normalized(psi: np.ndarray, atol: float = NORM_TOL) -> None:
    """Raise NormalizationError unless sum |psi_i|^2 is within ``atol`` of 1."""
    n2 = float(np.vdot(psi, psi).real)
    if not np.isfinite(n2):
        raise NormalizationError("state norm is not finite")
    if abs(1.0 - n2) > atol:
        raise NormalizationError(
            f"state is not normalized within tolerance {atol}: ||psi||^2={n2}"
        )


def norm_tolerance(dtype) -> float:
    """Norm tolerance that single precision can actually meet."""
    return NORM_TOL if np.dtype(dtype).itemsize >= 16 else 1e-5
