# qregsim/config.py
import os
from dataclasses import dataclass, field, replace
from typing import Optional

import numpy as np

from .errors import ConfigError

BACKENDS = ("serial", "numba")

DEFAULT_MEMORY_BUDGET = 1 << 30  # bytes for one amplitude array
DEFAULT_DTYPE = np.complex128


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


@dataclass(frozen=True)
class SimulatorConfig:
    """Knobs shared by a session, its state vector and its applicator backend.

    memory_budget_bytes caps a single amplitude array; together with the dtype
    it fixes the largest qubit count a session may allocate. ``debug=None``
    defers to the global debug flag in :mod:`qregsim.diagnostics`.
    """
    memory_budget_bytes: int = DEFAULT_MEMORY_BUDGET
    dtype: type = field(default=DEFAULT_DTYPE)
    backend: str = "serial"
    num_threads: Optional[int] = None
    max_columns: Optional[int] = None
    debug: Optional[bool] = None

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ConfigError(f"Unknown backend: {self.backend} (expected one of {BACKENDS})")
        if np.dtype(self.dtype).kind != "c":
            raise ConfigError(f"dtype must be complex, got {np.dtype(self.dtype)}")
        if self.memory_budget_bytes <= 0:
            raise ConfigError("memory_budget_bytes must be positive")
        if self.max_columns is not None and self.max_columns < 1:
            raise ConfigError("max_columns must be >= 1 or None")
        if self.num_threads is not None and self.num_threads < 1:
            raise ConfigError("num_threads must be >= 1 or None")

    @property
    def itemsize(self) -> int:
        return np.dtype(self.dtype).itemsize

    @property
    def max_qubits(self) -> int:
        """Largest n with 2**n amplitudes inside the memory budget."""
        return max((self.memory_budget_bytes // self.itemsize).bit_length() - 1, 0)

    def with_overrides(self, **kw) -> "SimulatorConfig":
        return replace(self, **kw)

    @staticmethod
    def from_env(**defaults) -> "SimulatorConfig":
        """Build a config from ``QREGSIM_*`` environment variables.

        Explicit keyword arguments win over the environment.
        """
        kw = {}
        budget = _env_int("QREGSIM_MEMORY_BUDGET")
        if budget is not None:
            kw["memory_budget_bytes"] = budget
        backend = os.getenv("QREGSIM_BACKEND")
        if backend:
            kw["backend"] = backend.strip().lower()
        threads = _env_int("QREGSIM_NUM_THREADS")
        if threads is not None:
            kw["num_threads"] = threads
        cols = _env_int("QREGSIM_MAX_COLUMNS")
        if cols is not None:
            kw["max_columns"] = cols
        kw.update(defaults)
        return SimulatorConfig(**kw)


DEFAULT_CONFIG = SimulatorConfig()
