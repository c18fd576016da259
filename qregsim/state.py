# qregsim/state.py
import numbers
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .amplitude import squared_modulus
from .config import DEFAULT_CONFIG, SimulatorConfig
from .errors import IndexOutOfRange, InvalidDimension, NormalizationError


def check_dimension(n, config: SimulatorConfig = DEFAULT_CONFIG, dtype=None) -> int:
    """Validate a qubit count against the memory budget and return it as int."""
    if isinstance(n, bool) or not isinstance(n, numbers.Integral):
        raise InvalidDimension(f"qubit count must be an integer, got {n!r}")
    n = int(n)
    if n < 1:
        raise InvalidDimension(f"qubit count must be >= 1, got {n}")
    itemsize = np.dtype(dtype if dtype is not None else config.dtype).itemsize
    budget = config.memory_budget_bytes
    if n >= budget.bit_length() or (1 << n) * itemsize > budget:
        raise InvalidDimension(
            f"{n} qubits at {itemsize} bytes per amplitude exceed "
            f"the memory budget of {budget} bytes"
        )
    return n


@dataclass
class State:
    """Dense state vector. Index bit (n-1-q) holds qubit q (qubit 0 is the MSB)."""
    n: int
    psi: np.ndarray  # shape (2**n,), complex dtype

    @staticmethod
    def zero(n: int, dtype=None, config: Optional[SimulatorConfig] = None) -> "State":
        """|0...0>: all amplitudes zero except index 0 = 1+0j."""
        config = config or DEFAULT_CONFIG
        dtype = dtype if dtype is not None else config.dtype
        n = check_dimension(n, config, dtype)
        N = 1 << n
        psi = np.zeros(N, dtype=dtype)
        psi[0] = 1.0 + 0.0j
        return State(n=n, psi=psi)

    @property
    def dtype(self):
        return self.psi.dtype

    @property
    def size(self) -> int:
        return self.psi.shape[0]

    def _check_index(self, index) -> int:
        if isinstance(index, bool) or not isinstance(index, numbers.Integral):
            raise IndexOutOfRange(f"basis index must be an integer, got {index!r}")
        if not 0 <= index < self.size:
            raise IndexOutOfRange(f"basis index {index} outside [0, {self.size})")
        return int(index)

    def amplitude_at(self, index: int) -> complex:
        return complex(self.psi[self._check_index(index)])

    def probability_at(self, index: int) -> float:
        return squared_modulus(self.amplitude_at(index))

    def probabilities(self) -> np.ndarray:
        return np.abs(self.psi) ** 2

    def basis_label(self, index: int) -> str:
        """Bit string of ``index`` with qubit 0 first, e.g. ``"011"``."""
        return format(self._check_index(index), f"0{self.n}b")

    def snapshot(self) -> np.ndarray:
        """Read-only copy of the amplitudes; later gates do not change it."""
        snap = self.psi.copy()
        snap.flags.writeable = False
        return snap

    def norm2(self) -> float:
        return float(np.vdot(self.psi, self.psi).real)

    def check_normalized(self, tol=1e-9):
        n2 = self.norm2()
        if not (abs(1.0 - n2) <= tol):
            raise NormalizationError(f"Normalization failed: ||psi||^2={n2}")

    def copy(self) -> "State":
        return State(self.n, self.psi.copy())

    def as_numpy(self) -> np.ndarray:
        return self.psi
