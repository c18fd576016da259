# qregsim/amplitude.py
"""Complex amplitude helpers.

Amplitudes are plain Python/numpy complex scalars. These functions spell out
the three operations the serial kernel needs so the inner loop reads like the
math, and they work the same on ``complex`` and ``np.complex128``.
"""
import numpy as np


def amplitude(re: float, im: float = 0.0) -> complex:
    return complex(re, im)


def add(a, b):
    return complex(a.real + b.real, a.imag + b.imag)


def multiply(a, b):
    return complex(a.real * b.real - a.imag * b.imag,
                   a.real * b.imag + a.imag * b.real)


def squared_modulus(a) -> float:
    return float(a.real * a.real + a.imag * a.imag)


def format_amplitude(a, digits: int = 4) -> str:
    """Render as ``"0.7071 + 0.0000i"``; negative imaginary parts use ``-``."""
    re = float(np.real(a))
    im = float(np.imag(a))
    sign = "-" if im < 0 else "+"
    return f"{re:.{digits}f} {sign} {abs(im):.{digits}f}i"
