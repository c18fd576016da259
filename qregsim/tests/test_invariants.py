# qregsim/tests/test_invariants.py
"""Algebraic properties that must hold for every qubit count and backend."""
import numpy as np
import pytest

from qregsim import apply_numba, apply_serial
from qregsim.config import SimulatorConfig
from qregsim.gates import CATALOG, HADAMARD, PAULI_X, cnot_rule, swap_rule
from qregsim.session import create_session
from qregsim.state import State

BACKENDS = [apply_serial, apply_numba]


def random_state(n, seed):
    rng = np.random.default_rng(seed)
    psi = rng.normal(size=1 << n) + 1j * rng.normal(size=1 << n)
    return State(n, psi / np.linalg.norm(psi))


def random_session(n, depth, seed, backend="serial"):
    rng = np.random.default_rng(seed)
    s = create_session(n, SimulatorConfig(backend=backend))
    singles = [t for t, g in CATALOG.items() if g.arity == 1]
    for _ in range(depth):
        if n > 1 and rng.integers(0, 3) == 0:
            c, t = rng.choice(n, size=2, replace=False)
            s.apply_gate("CNOT" if rng.integers(0, 2) else "SWAP", (int(c), int(t)))
        else:
            s.apply_gate(singles[int(rng.integers(0, len(singles)))], int(rng.integers(0, n)))
    return s


@pytest.mark.parametrize("n", range(1, 7))
@pytest.mark.parametrize("backend", ["serial", "numba"])
def test_normalization_random_sequences(n, backend):
    for seed in range(3):
        s = random_session(n, depth=12, seed=seed, backend=backend)
        total = sum(s.probability_at(i) for i in range(1 << n))
        assert abs(total - 1.0) < 1e-9


@pytest.mark.parametrize("ap", BACKENDS)
@pytest.mark.parametrize("n", [1, 2, 3, 5])
def test_hadamard_twice_is_identity(ap, n):
    for k in range(n):
        for basis in range(1 << n):
            st = State.zero(n)
            st.psi[:] = 0
            st.psi[basis] = 1
            out = ap.apply_single_qubit(ap.apply_single_qubit(st, HADAMARD, k), HADAMARD, k)
            assert np.allclose(out.psi, st.psi, atol=1e-12, rtol=0)


@pytest.mark.parametrize("ap", BACKENDS)
@pytest.mark.parametrize("n", [1, 3, 4])
def test_pauli_x_twice_is_exact(ap, n):
    st = random_state(n, seed=n)
    for k in range(n):
        out = ap.apply_single_qubit(ap.apply_single_qubit(st, PAULI_X, k), PAULI_X, k)
        assert np.array_equal(out.psi, st.psi)


@pytest.mark.parametrize("ap", BACKENDS)
@pytest.mark.parametrize("n", [2, 3, 4])
def test_cnot_is_self_inverse(ap, n):
    st = random_state(n, seed=10 + n)
    for c in range(n):
        for t in range(n):
            if c == t:
                continue
            once = ap.apply_controlled(st, cnot_rule, c, t)
            twice = ap.apply_controlled(once, cnot_rule, c, t)
            assert np.array_equal(twice.psi, st.psi)


@pytest.mark.parametrize("n", [2, 3, 4])
def test_cnot_maps_each_basis_state(n):
    for i in range(1 << n):
        for c in range(n):
            for t in range(n):
                if c == t:
                    continue
                st = State(n, np.zeros(1 << n, dtype=np.complex128))
                st.psi[i] = 1
                out = apply_serial.apply_CNOT(st, c, t)
                cbit = (i >> (n - 1 - c)) & 1
                expect = i ^ (1 << (n - 1 - t)) if cbit else i
                assert out.psi[expect] == 1
                assert np.count_nonzero(out.psi) == 1


@pytest.mark.parametrize("rule", [cnot_rule, swap_rule])
def test_rules_are_bijections(rule):
    for n in range(2, 6):
        for c in range(n):
            for t in range(n):
                if c == t:
                    continue
                dest = apply_serial.permutation_destinations(n, rule, c, t)
                assert sorted(dest.tolist()) == list(range(1 << n))
                # scalar and vectorised forms agree
                cm, tm = 1 << (n - 1 - c), 1 << (n - 1 - t)
                assert [int(rule(i, cm, tm)) for i in range(1 << n)] == dest.tolist()


@pytest.mark.parametrize("ap", BACKENDS)
def test_single_qubit_on_one_qubit_is_matrix_vector_product(ap):
    st = random_state(1, seed=3)
    U = np.array([[0.6, 0.8j], [0.8j, 0.6]])
    out = ap.apply_single_qubit(st, U, 0)
    assert np.allclose(out.psi, U @ st.psi, atol=1e-12)


@pytest.mark.parametrize("ap", BACKENDS)
def test_single_qubit_matches_kronecker_product(ap):
    n = 4
    st = random_state(n, seed=4)
    U = CATALOG["T"].matrix @ HADAMARD
    for k in range(n):
        full = np.array([[1]], dtype=complex)
        for q in range(n):
            full = np.kron(full, U if q == k else np.eye(2))
        out = ap.apply_single_qubit(st, U, k)
        assert np.allclose(out.psi, full @ st.psi, atol=1e-12)


@pytest.mark.parametrize("ap", BACKENDS)
def test_applicator_does_not_touch_input(ap):
    st = random_state(3, seed=5)
    before = st.psi.copy()
    ap.apply_single_qubit(st, HADAMARD, 1)
    ap.apply_controlled(st, cnot_rule, 0, 2)
    assert np.array_equal(st.psi, before)


@pytest.mark.parametrize("ap", BACKENDS)
def test_applicator_validates_qubits(ap):
    from qregsim.errors import InvalidQubitPair, InvalidQubitRange
    st = State.zero(2)
    with pytest.raises(InvalidQubitRange):
        ap.apply_single_qubit(st, HADAMARD, 2)
    with pytest.raises(InvalidQubitPair):
        ap.apply_controlled(st, cnot_rule, 1, 1)
    with pytest.raises(InvalidQubitPair):
        ap.apply_controlled(st, cnot_rule, 0, 2)
