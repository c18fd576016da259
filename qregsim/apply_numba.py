# qregsim/apply_numba.py
import numpy as np
from numba import config as numba_config
from numba import get_num_threads, njit, prange, set_num_threads

from .apply_serial import check_pair, check_target, permutation_destinations, qubit_shift
from .gates import HADAMARD, PAULI_X, cnot_rule
from .state import State

# ---------- low-level kernels (Numba JIT) ----------
# Both kernels loop over OUTPUT indices, so each slot is written by exactly
# one prange iteration and no atomics are needed.

@njit(parallel=True, fastmath=True)
def _single_qubit_kernel(psi, U2, shift, out):
    N = psi.shape[0]
    mask = 1 << shift
    for o in prange(N):
        j = (o >> shift) & 1
        i0 = o & ~mask
        i1 = i0 | mask
        out[o] = U2[j, 0]*psi[i0] + U2[j, 1]*psi[i1]

@njit(parallel=True)
def _permute_kernel(psi, dest, out):
    N = psi.shape[0]
    for i in prange(N):
        out[dest[i]] = psi[i]

# ---------- user-facing apply helpers ----------

def set_threads(n: int) -> int:
    """Set the worker count, clamped to the pool size; returns the value used."""
    n = max(1, min(int(n), numba_config.NUMBA_NUM_THREADS))
    set_num_threads(n)
    return n

def get_threads() -> int:
    return get_num_threads()

def max_threads() -> int:
    return numba_config.NUMBA_NUM_THREADS

def apply_single_qubit(state: State, U2: np.ndarray, target: int) -> State:
    check_target(state.n, target)
    U2 = np.ascontiguousarray(U2, dtype=state.dtype)
    if U2.shape != (2, 2):
        raise ValueError(f"single-qubit gate must be 2x2, got shape {U2.shape}")
    out = np.empty_like(state.psi)
    _single_qubit_kernel(state.psi, U2, qubit_shift(state.n, target), out)
    return State(state.n, out)

def apply_controlled(state: State, rule, control: int, target: int) -> State:
    check_pair(state.n, control, target)
    dest = permutation_destinations(state.n, rule, control, target)
    out = np.zeros_like(state.psi)
    _permute_kernel(state.psi, dest, out)
    return State(state.n, out)

def apply_H(state: State, k: int) -> State:
    return apply_single_qubit(state, HADAMARD, k)

def apply_X(state: State, k: int) -> State:
    return apply_single_qubit(state, PAULI_X, k)

def apply_CNOT(state: State, control: int, target: int) -> State:
    return apply_controlled(state, cnot_rule, control, target)
