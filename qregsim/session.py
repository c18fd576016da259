# qregsim/session.py
"""Simulation session: one state vector plus the log of gates applied to it.

This is the surface an interactive front end drives::

    s = create_session(2)
    apply_gate(s, "H", 0)
    apply_gate(s, "CNOT", (0, 1))
    current_state(s)      # [("00", ~0.7071), ("01", 0j), ("10", 0j), ("11", ~0.7071)]
    circuit_history(s)    # (CircuitLogEntry('H', (0,), 0), CircuitLogEntry('CNOT', (0, 1), 1))

Every request is validated in full before the applicator runs, and the new
amplitudes are swapped in only after the pass completes, so a rejected
request leaves both the state and the log exactly as they were.
"""
import numbers
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .amplitude import format_amplitude
from .circuit import CircuitLog, CircuitLogEntry, load_backend
from .config import SimulatorConfig
from .diagnostics import (
    assert_normalized,
    assert_permutation,
    assert_unitary_2x2,
    is_debug_enabled,
    norm_tolerance,
)
from .errors import CircuitFull, InvalidGateMatrix, InvalidQubitPair, InvalidQubitRange, SimulatorError
from .gates import Gate, GateKind, GateSpec, lookup
from .logging import get_logger
from .state import State

logger = get_logger(__name__)

QubitArgs = Union[int, Sequence[int]]


class SimulationSession:
    def __init__(self, n_qubits: int, config: Optional[SimulatorConfig] = None):
        self.config = config if config is not None else SimulatorConfig.from_env()
        self._state = State.zero(n_qubits, config=self.config)
        self._log = CircuitLog()
        self._backend = load_backend(self.config.backend, self.config.num_threads)
        logger.info("session created: %d qubits, backend=%s, dtype=%s",
                    self._state.n, self.config.backend, np.dtype(self.config.dtype).name)

    # ---------- inspection ----------

    @property
    def n_qubits(self) -> int:
        return self._state.n

    @property
    def column(self) -> int:
        """Column the next applied gate will occupy."""
        return self._log.next_column

    @property
    def state(self) -> State:
        """A copy of the current state; mutating it does not affect the session."""
        return self._state.copy()

    @property
    def log(self) -> CircuitLog:
        return self._log

    def snapshot(self) -> np.ndarray:
        return self._state.snapshot()

    def amplitude_at(self, index: int) -> complex:
        return self._state.amplitude_at(index)

    def probability_at(self, index: int) -> float:
        return self._state.probability_at(index)

    def current_state(self) -> List[Tuple[str, complex]]:
        """(basis bits, amplitude) for every basis index, qubit 0 first in the bits."""
        snap = self._state.snapshot()
        width = self._state.n
        return [(format(i, f"0{width}b"), complex(a)) for i, a in enumerate(snap)]

    def circuit_history(self) -> Tuple[CircuitLogEntry, ...]:
        return self._log.entries

    def describe(self, digits: int = 4) -> str:
        return "\n".join(f"|{bits}>: {format_amplitude(a, digits)}"
                         for bits, a in self.current_state())

    # ---------- validation ----------

    def _debug(self) -> bool:
        return self.config.debug if self.config.debug is not None else is_debug_enabled()

    def _qubit_tuple(self, tag: str, qubits: QubitArgs, arity: int) -> Tuple[int, ...]:
        if isinstance(qubits, numbers.Integral) and not isinstance(qubits, bool):
            qubits = (qubits,)
        try:
            qubits = tuple(qubits)
        except TypeError:
            raise InvalidQubitRange(f"{tag}: qubit arguments must be an int or a sequence of ints") from None
        if len(qubits) != arity:
            raise InvalidQubitRange(f"{tag} expects {arity} qubit argument(s), got {len(qubits)}")
        n = self._state.n
        for q in qubits:
            if isinstance(q, bool) or not isinstance(q, numbers.Integral):
                raise InvalidQubitRange(f"{tag}: qubit index must be an integer, got {q!r}")
            if not 0 <= q < n:
                raise InvalidQubitRange(f"{tag}: qubit {q} outside [0, {n})")
        return tuple(int(q) for q in qubits)

    def _check_capacity(self):
        cap = self.config.max_columns
        if cap is not None and self._log.next_column >= cap:
            raise CircuitFull(f"circuit already holds the maximum of {cap} gates")

    def _resolve(self, tag: str, qubits: QubitArgs) -> GateSpec:
        gate = lookup(tag)
        qs = self._qubit_tuple(gate.tag, qubits, gate.arity)
        if gate.kind is GateKind.CONTROLLED and qs[0] == qs[1]:
            raise InvalidQubitPair(f"{gate.tag}: control and target must differ, both are {qs[0]}")
        return gate.on(*qs)

    # ---------- mutation ----------

    def _commit(self, new_state: State, tag: str, qubits, matrix=None) -> CircuitLogEntry:
        if self._debug():
            assert_normalized(new_state.psi, atol=norm_tolerance(new_state.dtype))
        self._state = new_state
        entry = self._log.append(tag, qubits, matrix)
        logger.debug("applied %s on %s at column %d", tag, entry.qubits, entry.column)
        return entry

    def apply(self, spec: GateSpec) -> CircuitLogEntry:
        """Apply an already-bound gate. Qubits are re-validated against this session.

        In debug mode the gate itself is checked too: a single-qubit matrix
        must be unitary and a controlled rule must be a bijection.
        """
        gate: Gate = spec.gate
        try:
            qs = self._qubit_tuple(gate.tag, spec.qubits, gate.arity)
            if gate.kind is GateKind.CONTROLLED and qs[0] == qs[1]:
                raise InvalidQubitPair(f"{gate.tag}: control and target must differ, both are {qs[0]}")
            self._check_capacity()
            if self._debug():
                if gate.kind is GateKind.SINGLE_QUBIT:
                    assert_unitary_2x2(gate.matrix)
                else:
                    assert_permutation(self._backend.permutation_destinations(
                        self._state.n, gate.rule, qs[0], qs[1]))
        except SimulatorError as e:
            logger.debug("rejected %s %s: %s", gate.tag, spec.qubits, e)
            raise
        if gate.kind is GateKind.SINGLE_QUBIT:
            new_state = self._backend.apply_single_qubit(self._state, gate.matrix, qs[0])
        else:
            new_state = self._backend.apply_controlled(self._state, gate.rule, qs[0], qs[1])
        return self._commit(new_state, gate.tag, qs)

    def apply_gate(self, tag: str, qubits: QubitArgs) -> CircuitLogEntry:
        """Apply catalog gate ``tag`` to ``qubits`` (an int, or (control, target))."""
        try:
            spec = self._resolve(tag, qubits)
        except SimulatorError as e:
            logger.debug("rejected %r %r: %s", tag, qubits, e)
            raise
        return self.apply(spec)

    def apply_matrix(self, matrix: np.ndarray, target: int, tag: str = "U") -> CircuitLogEntry:
        """Apply a caller-supplied 2x2 matrix to ``target``.

        Unitarity is the caller's responsibility; it is only verified in
        debug mode.
        """
        try:
            U = np.asarray(matrix, dtype=np.complex128)
            if U.shape != (2, 2):
                raise InvalidGateMatrix(f"single-qubit gate must be 2x2, got shape {U.shape}")
            (target,) = self._qubit_tuple(tag, target, 1)
            self._check_capacity()
            if self._debug():
                assert_unitary_2x2(U)
        except SimulatorError as e:
            logger.debug("rejected %r %r: %s", tag, target, e)
            raise
        new_state = self._backend.apply_single_qubit(self._state, U, target)
        return self._commit(new_state, tag, (target,), matrix=U)

    # chainable shorthands for the three console gates
    def h(self, k: int) -> "SimulationSession":
        self.apply_gate("H", k); return self

    def x(self, k: int) -> "SimulationSession":
        self.apply_gate("X", k); return self

    def cnot(self, c: int, t: int) -> "SimulationSession":
        self.apply_gate("CNOT", (c, t)); return self

    def replay(self, backend: Optional[str] = None) -> State:
        """Rebuild the current state from the log alone."""
        return self._log.replay(self._state.n,
                                backend=backend or self.config.backend,
                                dtype=self._state.dtype,
                                num_threads=self.config.num_threads,
                                config=self.config)


# ---------- functional surface ----------

def create_session(qubit_count: int, config: Optional[SimulatorConfig] = None) -> SimulationSession:
    return SimulationSession(qubit_count, config)


def apply_gate(session: SimulationSession, tag: str, qubits: QubitArgs) -> CircuitLogEntry:
    return session.apply_gate(tag, qubits)


def current_state(session: SimulationSession) -> List[Tuple[str, complex]]:
    return session.current_state()


def circuit_history(session: SimulationSession) -> Tuple[CircuitLogEntry, ...]:
    return session.circuit_history()
