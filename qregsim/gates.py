# qregsim/gates.py
"""Gate catalog.

Single-qubit gates are read-only 2x2 complex128 matrices. Controlled gates
carry a permutation rule ``rule(index, control_mask, target_mask) -> dest``
over basis indices. Rules use only bitwise ops and comparisons so the same
function works on a Python int (serial backend) and on an index array
(numba backend precomputes destinations).
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from .errors import UnknownGate

PermutationRule = Callable[..., "np.ndarray | int"]


class GateKind(Enum):
    SINGLE_QUBIT = "single_qubit"
    CONTROLLED = "controlled"


def _const(rows) -> np.ndarray:
    m = np.array(rows, dtype=np.complex128)
    m.flags.writeable = False
    return m


_S2 = 1.0 / np.sqrt(2.0)

IDENTITY = _const([[1, 0],
                   [0, 1]])
HADAMARD = _const([[_S2, _S2],
                   [_S2, -_S2]])
PAULI_X = _const([[0, 1],
                  [1, 0]])
PAULI_Y = _const([[0, -1j],
                  [1j, 0]])
PAULI_Z = _const([[1, 0],
                  [0, -1]])
PHASE_S = _const([[1, 0],
                  [0, 1j]])
PHASE_T = _const([[1, 0],
                  [0, np.exp(0.25j * np.pi)]])


def RZ(theta: float) -> np.ndarray:
    return _const([[np.exp(-0.5j*theta), 0],
                   [0, np.exp(+0.5j*theta)]])


def RX(theta: float) -> np.ndarray:
    c = np.cos(theta/2.0)
    s = -1j*np.sin(theta/2.0)
    return _const([[c, s],
                   [s, c]])


# ---------- permutation rules ----------

def cnot_rule(index, control_mask: int, target_mask: int):
    """Flip the target bit wherever the control bit is set."""
    return index ^ (target_mask * ((index & control_mask) != 0))


def swap_rule(index, control_mask: int, target_mask: int):
    """Exchange the two bits; a no-op where they already agree."""
    differ = ((index & control_mask) != 0) != ((index & target_mask) != 0)
    return index ^ ((control_mask | target_mask) * differ)


# ---------- catalog ----------

@dataclass(frozen=True, eq=False)
class Gate:
    tag: str
    kind: GateKind
    matrix: Optional[np.ndarray] = None
    rule: Optional[PermutationRule] = None
    description: str = ""

    @property
    def arity(self) -> int:
        return 1 if self.kind is GateKind.SINGLE_QUBIT else 2

    def on(self, *qubits: int) -> "GateSpec":
        return GateSpec(self, tuple(qubits))


@dataclass(frozen=True, eq=False)
class GateSpec:
    """A catalog gate bound to the qubit(s) it acts on: (target,) or (control, target)."""
    gate: Gate
    qubits: Tuple[int, ...]

    @property
    def tag(self) -> str:
        return self.gate.tag

    @property
    def kind(self) -> GateKind:
        return self.gate.kind


def single(tag: str, matrix: np.ndarray, description: str = "") -> Gate:
    return Gate(tag, GateKind.SINGLE_QUBIT, matrix=matrix, description=description)


def controlled(tag: str, rule: PermutationRule, description: str = "") -> Gate:
    return Gate(tag, GateKind.CONTROLLED, rule=rule, description=description)


CATALOG: Dict[str, Gate] = {
    g.tag: g for g in (
        single("I", IDENTITY, "Identity: leaves the qubit unchanged."),
        single("H", HADAMARD, "Hadamard: creates superposition. H|0> = (|0> + |1>)/sqrt(2)"),
        single("X", PAULI_X, "Pauli-X: flips the qubit. X|0> = |1>, X|1> = |0>"),
        single("Y", PAULI_Y, "Pauli-Y: bit and phase flip."),
        single("Z", PAULI_Z, "Pauli-Z: phase flip on |1>."),
        single("S", PHASE_S, "S: quarter-turn phase on |1>."),
        single("T", PHASE_T, "T: eighth-turn phase on |1>."),
        controlled("CNOT", cnot_rule, "CNOT: if control is 1, flips the target qubit (like classical XOR)."),
        controlled("SWAP", swap_rule, "SWAP: exchanges the two qubits."),
    )
}


def lookup(tag: str) -> Gate:
    """Catalog entry for ``tag`` (case-insensitive)."""
    if not isinstance(tag, str):
        raise UnknownGate(f"gate tag must be a string, got {tag!r}")
    try:
        return CATALOG[tag.strip().upper()]
    except KeyError:
        raise UnknownGate(f"Unknown gate {tag!r} (known: {', '.join(CATALOG)})") from None
