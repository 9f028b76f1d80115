# chain_homology/integers.py
"""
Integer primitives used by the matrix reductions.

Elimination runs on exact Python integers held in numpy object arrays;
`narrow` brings a finished result back to the int64 storage type and fails
loudly instead of wrapping.
"""

import math

import numpy as np

from .constants import ENTRY_DTYPE, INT64_MAX, INT64_MIN
from .exceptions import MatrixOverflowError


def gcd(a: int, b: int) -> int:
    """Non-negative greatest common divisor; gcd(0, 0) == 0."""
    return math.gcd(int(a), int(b))


def lcm(a: int, b: int) -> int:
    """Non-negative least common multiple; zero if either argument is zero."""
    a, b = int(a), int(b)
    if a == 0 or b == 0:
        return 0
    return abs(a * b) // gcd(a, b)


def fits_int64(value: int) -> bool:
    return INT64_MIN <= value <= INT64_MAX


def narrow_scalar(value: int, what: str = "value") -> int:
    """Return `value` as a Python int, raising if it leaves the int64 range."""
    value = int(value)
    if not fits_int64(value):
        raise MatrixOverflowError(f"{what} {value} does not fit in a 64-bit signed integer")
    return value


def widen(array: np.ndarray) -> np.ndarray:
    """Exact working copy: an object array of Python ints."""
    return array.astype(object)


def narrow(exact: np.ndarray) -> np.ndarray:
    """
    Convert an exact working array back to int64 storage.
    
    Raises:
        MatrixOverflowError: if any entry is outside the int64 range
    """
    if exact.size:
        high = max(exact.flat)
        low = min(exact.flat)
        if high > INT64_MAX or low < INT64_MIN:
            bad = high if high > INT64_MAX else low
            raise MatrixOverflowError(
                f"matrix entry {bad} does not fit in a 64-bit signed integer"
            )
    return exact.astype(ENTRY_DTYPE)
