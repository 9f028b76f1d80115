"""
Differential Complex Module

Chain complexes of finitely generated free abelian groups, stored as
sparse maps from grade to boundary matrix.

Convention: the matrix at grade i is the differential leaving grade i. Its
columns index the generators at grade i and its rows the generators at
grade i + 1, so d_i · d_(i-1) = 0 in a complex.

A bicomplex is a map from a secondary grade j to a whole complex over the
primary grade i. Slices never reference each other, so their homology is
computed in parallel and merged afterwards.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .calculator import HomologyCalculator, SNFCalculator
from .config import DEFAULT_PARALLEL_CONFIG, ParallelConfig
from .constants import FIRST_GRADE_UNSET, LAST_GRADE_UNSET
from .exceptions import EmptyStructureError
from .graded import BiGradedHomology, GradedHomology
from .matrix import EMPTY, IntegerMatrix, MatrixLike

logger = logging.getLogger(__name__)

Bound = Union[int, float]


def _as_matrix(matrix: MatrixLike) -> IntegerMatrix:
    return matrix if isinstance(matrix, IntegerMatrix) else IntegerMatrix(matrix)


# =============================================================================
# SECTION 1: DifferentialComplex
# =============================================================================

class DifferentialComplex:
    """
    Sparse chain complex: grade -> differential matrix.

    Only non-empty matrices are stored; inserting an empty one is a no-op and
    leaves the grade bounds alone. Matrices are never removed.

    Example:
        >>> circle = DifferentialComplex(0, [[0]])
        >>> circle.get_homology().homology_at(1).rank
        1
    """

    def __init__(self, grade: Optional[int] = None, matrix: Optional[MatrixLike] = None):
        self._differentials: Dict[int, IntegerMatrix] = {}
        self._first_grade: Bound = FIRST_GRADE_UNSET
        self._last_grade: Bound = LAST_GRADE_UNSET
        if grade is not None and matrix is not None:
            self.set_differential_at(grade, matrix)

    def set_differential_at(self, grade: int, matrix: MatrixLike) -> None:
        """
        Store the differential leaving a grade.

        Args:
            grade: Source grade of the differential
            matrix: IntegerMatrix or anything IntegerMatrix accepts
        """
        matrix = _as_matrix(matrix)
        if matrix.is_empty():
            return

        self._differentials[grade] = matrix
        if grade < self._first_grade:
            self._first_grade = grade
        if grade > self._last_grade:
            self._last_grade = grade

    def differential_at(self, grade: int) -> IntegerMatrix:
        """Differential leaving a grade, EMPTY where none is stored."""
        return self._differentials.get(grade, EMPTY)

    @property
    def first_grade(self) -> Bound:
        """First grade with a differential (inf if none)."""
        return self._first_grade

    @property
    def last_grade(self) -> Bound:
        """Last grade with a differential (-inf if none)."""
        return self._last_grade

    def is_empty(self) -> bool:
        return not self._differentials

    def grades(self) -> List[int]:
        return sorted(self._differentials)

    def items(self) -> Iterator[Tuple[int, IntegerMatrix]]:
        for grade in self.grades():
            yield grade, self._differentials[grade]

    def copy(self) -> DifferentialComplex:
        # matrices are immutable, sharing them is safe
        clone = DifferentialComplex()
        for grade, matrix in self._differentials.items():
            clone.set_differential_at(grade, matrix)
        return clone

    def __len__(self) -> int:
        return len(self._differentials)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DifferentialComplex):
            return NotImplemented
        return self._differentials == other._differentials

    def __repr__(self) -> str:
        return f"DifferentialComplex(grades={self.grades()})"

    def chain_dimension(self, grade: int) -> int:
        """
        Rank of the free group at a grade.

        Read from the columns of the outgoing differential, else from the
        rows of the incoming one; zero if neither is stored.
        """
        outgoing = self.differential_at(grade)
        if not outgoing.is_empty():
            return outgoing.columns
        return self.differential_at(grade - 1).rows

    def check_boundaries(self) -> bool:
        """
        Check that consecutive differentials fit and compose to zero.

        Returns:
            True if every stored pair d_(i-1), d_i satisfies d_i · d_(i-1) = 0
        """
        consistent = True
        for grade, outgoing in self.items():
            incoming = self._differentials.get(grade - 1)
            if incoming is None:
                continue
            if incoming.rows != outgoing.columns:
                logger.warning(
                    "Grades %d -> %d: %d rows do not match %d columns",
                    grade - 1, grade, incoming.rows, outgoing.columns,
                )
                consistent = False
                continue
            composite = outgoing.multiply(incoming)
            if composite != IntegerMatrix.zeros(*composite.shape):
                logger.warning("d_%d . d_%d is not zero", grade, grade - 1)
                consistent = False
        return consistent

    def get_homology(self, calculator: Optional[HomologyCalculator] = None) -> GradedHomology:
        """
        Compute the graded homology of this complex.

        Args:
            calculator: Reduction strategy (default SNFCalculator)
        """
        calculator = calculator or SNFCalculator()
        return calculator.calculate(self)


# =============================================================================
# SECTION 2: Parallel slice reduction
# =============================================================================

def _slice_homology(j_grade: int,
                    chain_complex: DifferentialComplex,
                    calculator: HomologyCalculator) -> Tuple[int, GradedHomology]:
    """Worker: homology of one slice, returned rather than written anywhere shared."""
    return j_grade, chain_complex.get_homology(calculator)


def _reduce_slices(slices: List[Tuple[int, DifferentialComplex]],
                   calculator: HomologyCalculator,
                   config: ParallelConfig) -> List[Tuple[int, GradedHomology]]:
    if not config.parallel or len(slices) < 2:
        return [_slice_homology(j, c, calculator) for j, c in slices]

    # Threads by default, processes for large CPU-bound slices
    executor_class = ProcessPoolExecutor if config.use_processes else ThreadPoolExecutor
    workers = min(config.workers, len(slices))

    with executor_class(max_workers=workers) as executor:
        futures = []
        for j_grade, chain_complex in slices:
            logger.debug("Dispatching slice j=%d (%d differentials)", j_grade, len(chain_complex))
            futures.append(executor.submit(_slice_homology, j_grade, chain_complex, calculator))
        return [future.result() for future in futures]


# =============================================================================
# SECTION 3: DifferentialBiComplex
# =============================================================================

class DifferentialBiComplex:
    """
    Bigraded complex: secondary grade j -> DifferentialComplex over i.

    The bicomplex owns its slices: complexes handed in are copied and
    complexes handed out are copies. Insertions are serialized by a lock so
    that several builder threads may fill one bicomplex.
    """

    def __init__(self, j_grade: Optional[int] = None,
                 chain_complex: Optional[DifferentialComplex] = None):
        self._slices: Dict[int, DifferentialComplex] = {}
        self._first_j_grade: Bound = FIRST_GRADE_UNSET
        self._last_j_grade: Bound = LAST_GRADE_UNSET
        self._lock = threading.Lock()
        if j_grade is not None and chain_complex is not None:
            self.set_complex_at(j_grade, chain_complex)

    def _track_j(self, j_grade: int) -> None:
        if j_grade < self._first_j_grade:
            self._first_j_grade = j_grade
        if j_grade > self._last_j_grade:
            self._last_j_grade = j_grade

    def set_complex_at(self, j_grade: int, chain_complex: DifferentialComplex) -> None:
        """Store a copy of a complex as the slice at j; empty complexes are ignored."""
        if chain_complex.is_empty():
            return

        with self._lock:
            self._slices[j_grade] = chain_complex.copy()
            self._track_j(j_grade)

    def set_differential_at(self, i_grade: int, j_grade: int, matrix: MatrixLike) -> None:
        """Store a differential at (i, j), creating the slice at j if needed."""
        matrix = _as_matrix(matrix)
        if matrix.is_empty():
            return

        with self._lock:
            if j_grade in self._slices:
                self._slices[j_grade].set_differential_at(i_grade, matrix)
            else:
                self._slices[j_grade] = DifferentialComplex(i_grade, matrix)
            self._track_j(j_grade)

    def complex_at(self, j_grade: int) -> DifferentialComplex:
        """Copy of the slice at j, or an empty complex."""
        with self._lock:
            if j_grade in self._slices:
                return self._slices[j_grade].copy()
        return DifferentialComplex()

    def differential_at(self, i_grade: int, j_grade: int) -> IntegerMatrix:
        with self._lock:
            if j_grade in self._slices:
                return self._slices[j_grade].differential_at(i_grade)
        return EMPTY

    def is_empty(self) -> bool:
        with self._lock:
            return not self._slices

    def j_grades(self) -> List[int]:
        with self._lock:
            return sorted(self._slices)

    @property
    def first_j_grade(self) -> Bound:
        return self._first_j_grade

    @property
    def last_j_grade(self) -> Bound:
        return self._last_j_grade

    @property
    def first_i_grade(self) -> int:
        """
        First i with a differential, over all slices.

        Raises:
            EmptyStructureError: if the bicomplex is empty
        """
        with self._lock:
            if not self._slices:
                raise EmptyStructureError("first_i_grade is undefined on an empty bicomplex")
            return min(c.first_grade for c in self._slices.values())

    @property
    def last_i_grade(self) -> int:
        """
        Last i with a differential, over all slices.

        Raises:
            EmptyStructureError: if the bicomplex is empty
        """
        with self._lock:
            if not self._slices:
                raise EmptyStructureError("last_i_grade is undefined on an empty bicomplex")
            return max(c.last_grade for c in self._slices.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._slices)

    def __repr__(self) -> str:
        return f"DifferentialBiComplex(j_grades={self.j_grades()})"

    def get_homology(self,
                     calculator: Optional[HomologyCalculator] = None,
                     config: Optional[ParallelConfig] = None) -> BiGradedHomology:
        """
        Compute the bigraded homology, one slice per task.

        Every task returns its own GradedHomology; the slices are merged into
        the result only after all tasks have finished, so no container is
        written concurrently. Worker errors propagate to the caller.

        Args:
            calculator: Reduction strategy (default SNFCalculator)
            config: Fan-out settings (default DEFAULT_PARALLEL_CONFIG)

        Returns:
            Freshly built BiGradedHomology
        """
        calculator = calculator or SNFCalculator()
        config = config or DEFAULT_PARALLEL_CONFIG

        with self._lock:
            slices = [(j, c.copy()) for j, c in sorted(self._slices.items())]

        mode = "sequential" if not config.parallel else (
            "processes" if config.use_processes else "threads")
        logger.info("Computing bigraded homology: %d slice(s), %s", len(slices), mode)

        homology = BiGradedHomology()
        for j_grade, graded in _reduce_slices(slices, calculator, config):
            homology.set_graded_homology_at(j_grade, graded)

        logger.info("Bigraded homology done: %d non-zero slice(s)", len(homology.non_null_j_grades()))
        return homology
