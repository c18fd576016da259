# qregsim/tests/test_correctness_small.py
import numpy as np
from qregsim.session import create_session

def almost(p, q, tol=1e-9):
    return np.allclose(p, q, atol=tol, rtol=0)

def probs(psi):
    return np.abs(psi)**2

def test_h_on_zero():
    s = create_session(1).h(0)
    p = probs(s.snapshot())
    assert almost(p, np.array([0.5, 0.5]))

def test_h_on_zero_amplitudes():
    s = create_session(1).h(0)
    a = s.snapshot()
    assert almost(a, np.array([1/np.sqrt(2), 1/np.sqrt(2)], dtype=complex))
    assert abs(a[0].real - 0.7071) < 1e-4 and a[0].imag == 0.0

def test_x_flips():
    # |0> -> X -> |1>
    s = create_session(1).x(0)
    p = probs(s.snapshot())
    assert almost(p, np.array([0.0, 1.0]))

def test_x_on_qubit0_is_most_significant_bit():
    # qubit 0 is the leftmost bit: |100> is index 4
    s = create_session(3).x(0)
    expect = np.zeros(8); expect[4] = 1.0
    assert almost(probs(s.snapshot()), expect)
    assert s.current_state()[4][0] == "100"

def test_cnot_control_off_noop():
    # |00> --(CNOT c=1,t=0)--> stays |00>
    s = create_session(2).cnot(1, 0)
    expect = np.zeros(4); expect[0] = 1.0
    assert almost(probs(s.snapshot()), expect)

def test_cnot_control_on_flips():
    # Prepare |01> by X on qubit 1 (control), then CNOT(1->0): |01> -> |11>
    s = create_session(2).x(1).cnot(1, 0)
    expect = np.zeros(4); expect[3] = 1.0
    assert almost(probs(s.snapshot()), expect)

def test_bell_state():
    s = create_session(2).h(0).cnot(0, 1)
    a = s.snapshot()
    r = 1/np.sqrt(2)
    assert almost(a, np.array([r, 0, 0, r], dtype=complex))

def test_ghz_three_qubits():
    s = create_session(3).h(0).cnot(0, 1).cnot(1, 2)
    p = probs(s.snapshot())
    expect = np.zeros(8); expect[0] = expect[7] = 0.5
    assert almost(p, expect)

def test_normalization():
    s = create_session(2).h(0).h(1).cnot(1, 0)
    psi = s.snapshot()
    n2 = float((psi.conj()*psi).sum().real)
    assert abs(1.0 - n2) < 1e-9

def test_swap_exchanges_qubits():
    s = create_session(3)
    s.apply_gate("X", 0)
    s.apply_gate("SWAP", (0, 2))
    expect = np.zeros(8); expect[1] = 1.0   # |100> -> |001>
    assert almost(probs(s.snapshot()), expect)

def test_phase_gates_leave_probabilities():
    s = create_session(1).h(0)
    s.apply_gate("T", 0)
    s.apply_gate("S", 0)
    a = s.snapshot()
    assert almost(probs(a), np.array([0.5, 0.5]))
    assert np.isclose(a[1], np.exp(0.75j*np.pi)/np.sqrt(2), atol=1e-12)
