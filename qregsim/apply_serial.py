# qregsim/apply_serial.py
"""Reference gate application: plain Python loops over every basis index.

Each function reads ``state`` and returns a new State built in a fresh
output array; the input is never written, so a failed validation or an
exception mid-loop leaves the caller's state as it was.
"""
import numpy as np

from .amplitude import add, multiply
from .errors import InvalidQubitPair, InvalidQubitRange
from .gates import PAULI_X, HADAMARD, cnot_rule
from .state import State


def check_target(n: int, target: int):
    if isinstance(target, bool) or not isinstance(target, (int, np.integer)):
        raise InvalidQubitRange(f"qubit index must be an integer, got {target!r}")
    if not 0 <= target < n:
        raise InvalidQubitRange(f"qubit {target} outside [0, {n})")


def check_pair(n: int, control: int, target: int):
    for q in (control, target):
        if isinstance(q, bool) or not isinstance(q, (int, np.integer)) or not 0 <= q < n:
            raise InvalidQubitPair(f"qubit pair ({control}, {target}) outside [0, {n})")
    if control == target:
        raise InvalidQubitPair("control and target must differ")


def qubit_shift(n: int, q: int) -> int:
    """Bit position of qubit q inside a basis index (qubit 0 is the MSB)."""
    return n - 1 - q


def apply_single_qubit(state: State, U2: np.ndarray, target: int) -> State:
    """Apply 2x2 gate U2 to qubit ``target``.

    Every input index i feeds two output slots: the index with the target bit
    forced to 0 and to 1. Two inputs land in each output slot, so the
    contributions are summed, never assigned.
    """
    n = state.n
    check_target(n, target)
    U2 = np.asarray(U2)
    if U2.shape != (2, 2):
        raise ValueError(f"single-qubit gate must be 2x2, got shape {U2.shape}")
    psi = state.psi
    N = psi.shape[0]
    shift = qubit_shift(n, target)
    mask = 1 << shift
    u = [[complex(U2[0, 0]), complex(U2[0, 1])],
         [complex(U2[1, 0]), complex(U2[1, 1])]]
    out = np.zeros(N, dtype=psi.dtype)
    for i in range(N):
        a = complex(psi[i])
        bit = (i >> shift) & 1
        cleared = i & ~mask
        for j in (0, 1):
            flipped = cleared | (j << shift)
            out[flipped] = add(out[flipped], multiply(u[j][bit], a))
    return State(n, out)


def permutation_destinations(n: int, rule, control: int, target: int) -> np.ndarray:
    """Destination index of every basis index under ``rule``, as an int64 array."""
    cm = 1 << qubit_shift(n, control)
    tm = 1 << qubit_shift(n, target)
    idx = np.arange(1 << n, dtype=np.int64)
    return np.asarray(rule(idx, cm, tm), dtype=np.int64)


def apply_controlled(state: State, rule, control: int, target: int) -> State:
    """Apply a controlled permutation gate: ``out[rule(i)] = psi[i]`` for every i.

    ``rule`` must be a bijection over basis indices, so each output slot is
    written exactly once and plain assignment is enough.
    """
    n = state.n
    check_pair(n, control, target)
    psi = state.psi
    N = psi.shape[0]
    cm = 1 << qubit_shift(n, control)
    tm = 1 << qubit_shift(n, target)
    out = np.zeros(N, dtype=psi.dtype)
    for i in range(N):
        out[int(rule(i, cm, tm))] = psi[i]
    return State(n, out)


def apply_X(state: State, k: int) -> State:
    return apply_single_qubit(state, PAULI_X, k)


def apply_H(state: State, k: int) -> State:
    return apply_single_qubit(state, HADAMARD, k)


def apply_CNOT(state: State, control: int, target: int) -> State:
    return apply_controlled(state, cnot_rule, control, target)
