# chain_homology/exceptions.py
"""
Errors raised by the homology engine.

Matrix shape violations are local preconditions: they are raised at the call
site and never retried. SNF reduction raises nothing on well-formed input.
Homology computation rejects differentials whose shapes or composites
break the complex.
"""


class HomologyError(Exception):
    """Base class for every error raised by chain_homology."""


class MatrixError(HomologyError):
    """Base class for IntegerMatrix errors."""


class DimensionMismatchError(MatrixError, ValueError):
    """Matrices have incompatible shapes for the requested operation."""


class NotSquareError(MatrixError, ValueError):
    """Operation is only defined on square matrices."""


class MalformedMatrixError(MatrixError, ValueError):
    """Input cannot be read as a rectangular integer matrix."""


class MatrixOverflowError(MatrixError, OverflowError):
    """A result entry does not fit in a signed 64-bit integer."""


class EmptyStructureError(HomologyError, ValueError):
    """A min/max reduction was requested over an empty bigraded structure."""


class BoundaryError(HomologyError, ValueError):
    """Consecutive differentials compose to a nonzero map."""
