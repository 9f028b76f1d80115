"""
Chain Homology - Integral Homology of Graded and Bigraded Complexes

Computes the homology groups of chain complexes of finitely generated free
abelian groups, as a free rank plus torsion, through exact Smith normal
form reduction of the integer boundary matrices.
"""

import logging

__version__ = "0.1.0"

from .matrix import IntegerMatrix, EMPTY
from .homology import Homology, NULL_HOMOLOGY
from .graded import GradedHomology, BiGradedHomology
from .calculator import HomologyCalculator, SNFCalculator
from .complex import DifferentialComplex, DifferentialBiComplex
from .config import ParallelConfig, DEFAULT_PARALLEL_CONFIG, SEQUENTIAL_CONFIG
from .exceptions import (
    HomologyError,
    MatrixError,
    DimensionMismatchError,
    NotSquareError,
    MalformedMatrixError,
    MatrixOverflowError,
    EmptyStructureError,
    BoundaryError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "IntegerMatrix",
    "EMPTY",
    "Homology",
    "NULL_HOMOLOGY",
    "GradedHomology",
    "BiGradedHomology",
    "HomologyCalculator",
    "SNFCalculator",
    "DifferentialComplex",
    "DifferentialBiComplex",
    "ParallelConfig",
    "DEFAULT_PARALLEL_CONFIG",
    "SEQUENTIAL_CONFIG",
    "HomologyError",
    "MatrixError",
    "DimensionMismatchError",
    "NotSquareError",
    "MalformedMatrixError",
    "MatrixOverflowError",
    "EmptyStructureError",
    "BoundaryError",
]
