# qregsim/circuit.py
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .gates import GateKind, lookup
from .state import State


def load_backend(backend: str = "serial", num_threads: Optional[int] = None):
    """Return the applicator module for ``backend`` ("serial" or "numba")."""
    if backend == "serial":
        from . import apply_serial
        return apply_serial
    elif backend == "numba":
        try:
            from . import apply_numba
        except ImportError as e:
            raise RuntimeError("Numba backend not available. Did you `pip install numba`?") from e
        if num_threads is not None:
            apply_numba.set_threads(num_threads)
        return apply_numba
    raise NotImplementedError(f"Unknown backend: {backend}")


@dataclass(frozen=True, eq=False)
class CircuitLogEntry:
    """One applied gate: tag, (target,) or (control, target), and its column.

    ``matrix`` is only set for custom single-qubit gates that are not in the
    catalog, so the log alone is enough to replay the circuit.
    """
    tag: str
    qubits: Tuple[int, ...]
    column: int
    matrix: Optional[np.ndarray] = field(default=None, repr=False)

    @property
    def target(self) -> int:
        return self.qubits[-1]

    @property
    def control(self) -> Optional[int]:
        return self.qubits[0] if len(self.qubits) == 2 else None

    def __eq__(self, other):
        if not isinstance(other, CircuitLogEntry):
            return NotImplemented
        if (self.tag, self.qubits, self.column) != (other.tag, other.qubits, other.column):
            return False
        if self.matrix is None or other.matrix is None:
            return self.matrix is None and other.matrix is None
        return bool(np.array_equal(self.matrix, other.matrix))

    __hash__ = None


class CircuitLog:
    """Append-only record of applied gates, in column order.

    Purely observational: nothing in the simulator reads it back except an
    explicit :meth:`replay`.
    """

    def __init__(self):
        self._entries: List[CircuitLogEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CircuitLogEntry]:
        return iter(self._entries)

    def __getitem__(self, i) -> CircuitLogEntry:
        return self._entries[i]

    @property
    def next_column(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> Tuple[CircuitLogEntry, ...]:
        return tuple(self._entries)

    def append(self, tag: str, qubits, matrix=None) -> CircuitLogEntry:
        if matrix is not None:
            matrix = np.array(matrix, dtype=np.complex128)
            matrix.flags.writeable = False
        entry = CircuitLogEntry(tag, tuple(int(q) for q in qubits), self.next_column, matrix)
        self._entries.append(entry)
        return entry

    def replay(self, n: int, backend: str = "serial", dtype=np.complex128,
               num_threads=None, check_norm=False, check_norm_tol=1e-9,
               config=None) -> State:
        """Rebuild a state from |0...0> by re-applying every logged gate."""
        ap = load_backend(backend, num_threads)
        st = State.zero(n, dtype=dtype, config=config)
        for entry in self._entries:
            if entry.matrix is not None:
                st = ap.apply_single_qubit(st, entry.matrix, entry.target)
                continue
            gate = lookup(entry.tag)
            if gate.kind is GateKind.SINGLE_QUBIT:
                st = ap.apply_single_qubit(st, gate.matrix, entry.target)
            else:
                c, t = entry.qubits
                st = ap.apply_controlled(st, gate.rule, c, t)
        if check_norm:
            st.check_normalized(tol=check_norm_tol)
        return st
