"""
Integer Matrix Module

Dense matrices over the integers with exact determinant and Smith normal
form reduction. These are the boundary maps of the differential complexes.

Entries are stored as read-only int64 arrays. Arithmetic runs on an exact
working copy (a numpy object array of Python ints) and the result is narrowed
back to int64, so intermediate growth during elimination is never lost and
an out-of-range result raises MatrixOverflowError instead of wrapping.
"""

from __future__ import annotations

import logging
from typing import Any, List, Sequence, Tuple, Union

import numpy as np

from .constants import ENTRY_DTYPE, INT64_MAX
from .exceptions import (
    DimensionMismatchError,
    MalformedMatrixError,
    NotSquareError,
)
from .integers import gcd, narrow, narrow_scalar, widen

logger = logging.getLogger(__name__)

MatrixLike = Union["IntegerMatrix", np.ndarray, Sequence[Sequence[int]]]


# =============================================================================
# SECTION 1: Elementary Operations (in place, on exact working arrays)
# =============================================================================

def _exchange_rows(mat: np.ndarray, row1: int, row2: int) -> None:
    mat[[row1, row2], :] = mat[[row2, row1], :]


def _exchange_columns(mat: np.ndarray, column1: int, column2: int) -> None:
    mat[:, [column1, column2]] = mat[:, [column2, column1]]


def _add_row(mat: np.ndarray, target: int, source: int, k: int) -> None:
    """row[target] += k * row[source]"""
    mat[target, :] = mat[target, :] + k * mat[source, :]


def _add_column(mat: np.ndarray, target: int, source: int, k: int) -> None:
    """column[target] += k * column[source]"""
    mat[:, target] = mat[:, target] + k * mat[:, source]


def _smallest_nonzero(vector: np.ndarray) -> Tuple[int, int]:
    """
    Locate the entry of smallest non-zero magnitude.

    Ties keep the earliest position, so a pivot at index 0 is never
    exchanged for an equal entry.

    Returns:
        (position, magnitude), magnitude 0 if the vector is all zeros
    """
    position, smallest = 0, 0
    for k, value in enumerate(vector):
        magnitude = abs(value)
        if magnitude and (smallest == 0 or magnitude < smallest):
            position, smallest = k, magnitude
            if smallest == 1:
                break
    return position, smallest


# =============================================================================
# SECTION 2: Smith Normal Form
# =============================================================================

def _clear_row(snf: np.ndarray, i: int) -> None:
    """Column operations until row i is zero right of the pivot (i, i)."""
    columns = snf.shape[1]
    while True:
        position, smallest = _smallest_nonzero(snf[i, i:])
        if smallest == 0:
            return
        if position:
            _exchange_columns(snf, i, i + position)

        pivot = snf[i, i]
        modified = False
        for j in range(i + 1, columns):
            if snf[i, j] != 0:
                _add_column(snf, j, i, -(snf[i, j] // pivot))
                modified = True

        if not modified or smallest == 1:
            return


def _clear_column(snf: np.ndarray, i: int) -> bool:
    """
    Row operations until column i is zero below the pivot (i, i).

    Returns:
        True if row i was exchanged, which may refill row i
    """
    rows = snf.shape[0]
    exchanged = False
    while True:
        position, smallest = _smallest_nonzero(snf[i:, i])
        if smallest == 0:
            return exchanged
        if position:
            _exchange_rows(snf, i, i + position)
            exchanged = True

        pivot = snf[i, i]
        modified = False
        for r in range(i + 1, rows):
            if snf[r, i] != 0:
                _add_row(snf, r, i, -(snf[r, i] // pivot))
                modified = True

        if not modified or smallest == 1:
            return exchanged


def _enforce_divisibility(snf: np.ndarray, length: int) -> None:
    """Rewrite the diagonal into a chain d1 | d2 | ... with zeros last."""
    modified = True
    while modified:
        modified = False
        for i in range(length - 1):
            v1 = snf[i, i]
            v2 = snf[i + 1, i + 1]
            if v1 == 0:
                if v2 != 0:
                    snf[i, i], snf[i + 1, i + 1] = v2, 0
                    modified = True
            elif v2 % v1 != 0:
                divisor = gcd(v1, v2)
                snf[i, i] = divisor
                snf[i + 1, i + 1] = v1 * v2 // divisor
                modified = True


def smith_normal_form(exact: np.ndarray) -> np.ndarray:
    """
    Reduce an exact working array to Smith normal form in place.

    Each pivot alternates row clearing (column operations) and column
    clearing (row operations) until a column pass leaves row i untouched.
    Every pass either finishes or strictly lowers the smallest non-zero
    magnitude in the pivot row/column, so the reduction terminates.

    Args:
        exact: object array of Python ints, modified in place

    Returns:
        The same array, now diagonal with d1 | d2 | ... and every di >= 0
    """
    rows, columns = exact.shape
    length = min(rows, columns)

    for i in range(length):
        row_exchanged = True
        while row_exchanged:
            _clear_row(exact, i)
            row_exchanged = _clear_column(exact, i)

    _enforce_divisibility(exact, length)

    for i in range(length):
        exact[i, i] = abs(exact[i, i])

    return exact


# =============================================================================
# SECTION 3: Determinant
# =============================================================================

def _eliminate_determinant(exact: np.ndarray) -> int:
    """
    Fraction-free elimination over the integers.

    The pivot of each column is the remaining entry of smallest magnitude;
    rows below are reduced by integer multiples of it, leaving remainders
    smaller than the pivot, until the column is clear.
    """
    size = exact.shape[0]
    det = 1

    for col in range(size):
        while True:
            position, smallest = _smallest_nonzero(exact[col:, col])
            if smallest == 0:
                return 0
            if position:
                _exchange_rows(exact, col, col + position)
                det = -det

            pivot = exact[col, col]
            cleared = True
            for r in range(col + 1, size):
                if exact[r, col] != 0:
                    _add_row(exact, r, col, -(exact[r, col] // pivot))
                    if exact[r, col] != 0:
                        cleared = False
            if cleared:
                break

        det *= exact[col, col]

    return det


# =============================================================================
# SECTION 4: Construction
# =============================================================================

def _is_integral(value: Any) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


def _entries_from_array(data: np.ndarray) -> np.ndarray:
    if data.ndim == 1 and data.size == 0:
        return np.zeros((0, 0), dtype=ENTRY_DTYPE)
    if data.ndim != 2:
        raise MalformedMatrixError(f"Expected a 2-D array, got {data.ndim} dimension(s)")

    kind = data.dtype.kind
    if kind == "i":
        return data.astype(ENTRY_DTYPE)
    if kind == "u":
        if data.size and int(data.max()) > INT64_MAX:
            return narrow(widen(data))
        return data.astype(ENTRY_DTYPE)
    if kind == "O":
        if not all(_is_integral(v) for v in data.flat):
            raise MalformedMatrixError("Matrix entries must be integers")
        return narrow(data)
    raise MalformedMatrixError(f"Matrix entries must be integers, got dtype {data.dtype}")


def _entries_from_rows(data: Any) -> np.ndarray:
    try:
        rows = [list(row) for row in data]
    except TypeError as e:
        raise MalformedMatrixError("Expected a sequence of rows") from e

    if not rows:
        return np.zeros((0, 0), dtype=ENTRY_DTYPE)

    width = len(rows[0])
    for index, row in enumerate(rows):
        if len(row) != width:
            raise MalformedMatrixError(
                f"Row {index} has {len(row)} entries, expected {width}"
            )
        if not all(_is_integral(v) for v in row):
            raise MalformedMatrixError(f"Row {index} contains a non-integer entry")

    exact = np.empty((len(rows), width), dtype=object)
    for index, row in enumerate(rows):
        exact[index, :] = [int(v) for v in row]
    return narrow(exact)


# =============================================================================
# SECTION 5: IntegerMatrix
# =============================================================================

class IntegerMatrix:
    """
    Immutable dense matrix of signed 64-bit integers.

    Equality and hashing are by value. The 0x0 matrix `EMPTY` stands for
    "no differential".

    Example:
        >>> m = IntegerMatrix([[2, 4], [6, 8]])
        >>> m.to_snf().diagonal()
        (2, 4)
    """

    __slots__ = ("_data",)

    def __init__(self, data: MatrixLike = ()):
        if isinstance(data, IntegerMatrix):
            entries = data._data
        elif isinstance(data, np.ndarray):
            entries = _entries_from_array(data)
        else:
            entries = _entries_from_rows(data)
        entries.flags.writeable = False
        self._data = entries

    @classmethod
    def _from_exact(cls, exact: np.ndarray) -> IntegerMatrix:
        matrix = cls.__new__(cls)
        entries = narrow(exact)
        entries.flags.writeable = False
        matrix._data = entries
        return matrix

    @classmethod
    def zeros(cls, rows: int, columns: int) -> IntegerMatrix:
        """Matrix of the given shape filled with zeros."""
        if rows < 0 or columns < 0:
            raise MalformedMatrixError(f"Negative shape ({rows}, {columns})")
        return cls(np.zeros((rows, columns), dtype=ENTRY_DTYPE))

    # -------------------------------------------------------------------------
    # Shape and access
    # -------------------------------------------------------------------------

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def columns(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self._data.shape

    def entry(self, i: int, j: int) -> int:
        """Value at row i, column j."""
        return int(self._data[i, j])

    def __getitem__(self, key: Tuple[int, int]) -> int:
        i, j = key
        return self.entry(i, j)

    def is_square(self) -> bool:
        return self.rows == self.columns

    def is_empty(self) -> bool:
        """True if the matrix has no rows."""
        return self.rows == 0

    def diagonal(self) -> Tuple[int, ...]:
        """Leading diagonal, length min(rows, columns)."""
        return tuple(int(v) for v in np.diagonal(self._data))

    def to_list(self) -> List[List[int]]:
        return self._data.tolist()

    def to_array(self) -> np.ndarray:
        """Writable int64 copy of the entries."""
        return self._data.copy()

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def add(self, other: IntegerMatrix) -> IntegerMatrix:
        """
        Element-wise sum.

        Raises:
            DimensionMismatchError: if the shapes differ
        """
        if self.shape != other.shape:
            raise DimensionMismatchError(
                f"Only matrices of same size can be added: {self.shape} vs {other.shape}"
            )
        return IntegerMatrix._from_exact(widen(self._data) + widen(other._data))

    def multiply(self, other: IntegerMatrix) -> IntegerMatrix:
        """
        Matrix product self · other.

        Raises:
            DimensionMismatchError: if self.columns != other.rows
        """
        if self.columns != other.rows:
            raise DimensionMismatchError(
                f"Incompatible size for matrix multiplication: {self.shape} x {other.shape}"
            )
        if self.columns == 0:
            return IntegerMatrix.zeros(self.rows, other.columns)
        return IntegerMatrix._from_exact(widen(self._data).dot(widen(other._data)))

    def __add__(self, other: IntegerMatrix) -> IntegerMatrix:
        if not isinstance(other, IntegerMatrix):
            return NotImplemented
        return self.add(other)

    def __matmul__(self, other: IntegerMatrix) -> IntegerMatrix:
        if not isinstance(other, IntegerMatrix):
            return NotImplemented
        return self.multiply(other)

    def transpose(self) -> IntegerMatrix:
        return IntegerMatrix(self._data.T.copy())

    def trace(self) -> int:
        """
        Sum of the diagonal.

        Raises:
            NotSquareError: if the matrix is not square
        """
        if not self.is_square():
            raise NotSquareError(f"The matrix is not square: {self.shape}")
        return narrow_scalar(sum(self.diagonal()), "trace")

    def determinant(self) -> int:
        """
        Exact determinant.

        Sizes up to 3 use the closed-form expansion, larger matrices use
        fraction-free integer elimination. The 0x0 determinant is 1.

        Raises:
            NotSquareError: if the matrix is not square
            MatrixOverflowError: if the determinant leaves the int64 range
        """
        if not self.is_square():
            raise NotSquareError(f"The matrix is not square: {self.shape}")

        m = self.to_list()
        size = self.rows
        if size == 0:
            det = 1
        elif size == 1:
            det = m[0][0]
        elif size == 2:
            det = m[0][0] * m[1][1] - m[1][0] * m[0][1]
        elif size == 3:
            det = (m[0][0] * (m[1][1] * m[2][2] - m[1][2] * m[2][1])
                   - m[0][1] * (m[1][0] * m[2][2] - m[1][2] * m[2][0])
                   + m[0][2] * (m[1][0] * m[2][1] - m[1][1] * m[2][0]))
        else:
            det = _eliminate_determinant(widen(self._data))

        return narrow_scalar(det, "determinant")

    def to_snf(self) -> IntegerMatrix:
        """
        Smith normal form.

        The result has the same shape; its only non-zero entries sit on the
        leading diagonal, are positive, divide each other in order and come
        before any zero. Matrices with a zero dimension come back unchanged.
        """
        if self.rows == 0 or self.columns == 0:
            return self
        snf = IntegerMatrix._from_exact(smith_normal_form(widen(self._data)))
        logger.debug("SNF of %dx%d matrix: diagonal %s", self.rows, self.columns, snf.diagonal())
        return snf

    # -------------------------------------------------------------------------
    # Value semantics
    # -------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IntegerMatrix):
            return NotImplemented
        return self.shape == other.shape and np.array_equal(self._data, other._data)

    def __hash__(self) -> int:
        return hash((self.shape, self._data.tobytes()))

    def __reduce__(self):
        # rebuild through __init__ so unpickled entries are read-only again
        return (IntegerMatrix, (self._data,))

    def __repr__(self) -> str:
        return f"IntegerMatrix({self.to_list()!r})" if self.rows else f"IntegerMatrix.zeros(0, {self.columns})"

    def __str__(self) -> str:
        if self.rows == 1:
            return "[" + "\t".join(str(v) for v in self._data[0]) + "]\n"
        return "".join("|" + "\t".join(str(v) for v in row) + "|\n" for row in self._data)


EMPTY = IntegerMatrix()
IntegerMatrix.EMPTY = EMPTY
