"""
Homology Calculator Module

Turns a DifferentialComplex into its GradedHomology. A calculator is a
one-method capability so other reduction strategies can be dropped in
without touching the complex classes.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Tuple

from .exceptions import BoundaryError, DimensionMismatchError
from .graded import GradedHomology
from .homology import Homology
from .matrix import EMPTY, IntegerMatrix

if TYPE_CHECKING:
    from .complex import DifferentialComplex

logger = logging.getLogger(__name__)


class HomologyCalculator(ABC):
    """Strategy computing the homology of a single differential complex."""

    @abstractmethod
    def calculate(self, chain_complex: DifferentialComplex) -> GradedHomology:
        """
        Compute the homology at every grade of a complex.

        Args:
            chain_complex: Complex to read; never modified

        Returns:
            Freshly built GradedHomology
        """


def _elementary_divisors(snf: IntegerMatrix) -> Tuple[int, List[int]]:
    """
    Rank and non-unit divisors of a matrix already in Smith normal form.

    The non-unit divisors are the trailing part of the non-zero diagonal.
    """
    divisors = []
    for value in snf.diagonal():
        if value == 0:
            break
        divisors.append(value)
    return len(divisors), [d for d in divisors if d > 1]


class SNFCalculator(HomologyCalculator):
    """
    Homology from Smith normal forms of consecutive differentials.

    With d_i leaving grade i, the group at grade i is

        Z^(dim C_i - rank d_(i-1) - rank d_i) + sum Z/e

    over the elementary divisors e > 1 of d_(i-1). Grades run from the first
    differential to one past the last, which closes off the top group. Each
    SNF is computed once and carried to the next grade.

    Raises DimensionMismatchError when consecutive shapes disagree and
    BoundaryError when the ranks show d_i · d_(i-1) is nonzero.
    """

    def calculate(self, chain_complex: DifferentialComplex) -> GradedHomology:
        graded = GradedHomology()
        if chain_complex.is_empty():
            return graded

        first_grade = chain_complex.first_grade
        last_grade = chain_complex.last_grade
        logger.debug("Computing homology over grades %d..%d", first_grade, last_grade + 1)

        incoming = EMPTY
        for grade in range(first_grade, last_grade + 2):
            outgoing = chain_complex.differential_at(grade)
            if not incoming.is_empty() and not outgoing.is_empty() \
                    and incoming.rows != outgoing.columns:
                raise DimensionMismatchError(
                    f"Differential at grade {grade - 1} has {incoming.rows} rows but "
                    f"differential at grade {grade} has {outgoing.columns} columns"
                )
            outgoing = outgoing.to_snf()

            incoming_rank, torsion = _elementary_divisors(incoming)
            outgoing_rank, _ = _elementary_divisors(outgoing)
            dimension = chain_complex.chain_dimension(grade)

            rank = dimension - incoming_rank - outgoing_rank
            if rank < 0:
                raise BoundaryError(
                    f"Differentials at grades {grade - 1} and {grade} compose to a "
                    f"nonzero map (rank {incoming_rank} + {outgoing_rank} exceeds dimension {dimension})"
                )

            homology = Homology(rank, torsion)
            logger.debug(
                "grade %d: dim=%d rank_in=%d rank_out=%d -> %s",
                grade, dimension, incoming_rank, outgoing_rank, homology,
            )
            graded.set_homology_at(grade, homology)

            incoming = outgoing

        return graded

    def __repr__(self) -> str:
        return "SNFCalculator()"
