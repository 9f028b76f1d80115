"""
Demonstration of the Chain Homology engine

This script computes the integral homology of a few classical spaces from
their cellular chain complexes:
1. The circle and the torus (free homology only)
2. The real projective plane and the Klein bottle (torsion)
3. All of them at once as slices of one bicomplex, in parallel

Boundary maps lower the cell dimension, so a k-cell boundary is placed at
grade -k: the differential at grade -k maps C_k to C_(k-1).
"""

import logging

import numpy as np

from chain_homology import (
    DifferentialBiComplex,
    DifferentialComplex,
    IntegerMatrix,
    ParallelConfig,
    SNFCalculator,
)


def print_section(title):
    """Print a formatted section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def cellular_complex(boundaries):
    """Build a complex from {k: boundary of the k-cells} (C_k -> C_(k-1))."""
    complex_ = DifferentialComplex()
    for k, matrix in boundaries.items():
        complex_.set_differential_at(-k, matrix)
    return complex_


SPACES = {
    "circle": {1: [[0]]},
    "torus": {1: [[0, 0]], 2: [[0], [0]]},
    "projective_plane": {1: [[0]], 2: [[2]]},
    "klein_bottle": {1: [[0, 0]], 2: [[0], [2]]},
}


def demonstrate_matrices():
    """Smith normal form and determinant of a small matrix."""
    print_section("Integer matrices")

    matrix = IntegerMatrix(np.array([[2, 4, 4], [-6, 6, 12], [10, -4, -16]]))
    print("M =")
    print(matrix)
    print(f"det(M) = {matrix.determinant()}")
    print("SNF(M) =")
    print(matrix.to_snf())


def demonstrate_complexes():
    """Homology of each space, one complex at a time."""
    print_section("Homology of cellular complexes (H_k at grade -k)")

    calculator = SNFCalculator()
    for name, boundaries in SPACES.items():
        complex_ = cellular_complex(boundaries)
        assert complex_.check_boundaries()
        print(f"\n{name}:")
        print(complex_.get_homology(calculator))


def demonstrate_bicomplex():
    """All spaces as slices j = 0, 1, ... of one bicomplex."""
    print_section("Bigraded homology (one space per j)")

    bicomplex = DifferentialBiComplex()
    for j, boundaries in enumerate(SPACES.values()):
        for k, matrix in boundaries.items():
            bicomplex.set_differential_at(-k, j, matrix)

    homology = bicomplex.get_homology(SNFCalculator(), ParallelConfig(max_workers=4))
    print(homology)

    sequential = bicomplex.get_homology(SNFCalculator(), ParallelConfig(parallel=False))
    print(f"\n✓ Parallel and sequential results agree: {homology == sequential}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    demonstrate_matrices()
    demonstrate_complexes()
    demonstrate_bicomplex()
