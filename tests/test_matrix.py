"""
Tests for IntegerMatrix
"""

import math
import pickle
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from chain_homology.exceptions import (
    DimensionMismatchError,
    MalformedMatrixError,
    MatrixOverflowError,
    NotSquareError,
)
from chain_homology.matrix import EMPTY, IntegerMatrix


def random_matrix(rng, rows, columns, bound=9):
    return IntegerMatrix(rng.integers(-bound, bound + 1, size=(rows, columns)))


def assert_smith_form(snf: IntegerMatrix):
    """Diagonal, non-negative, d1 | d2 | ... with zeros last."""
    array = snf.to_array()
    off_diagonal = array.copy()
    np.fill_diagonal(off_diagonal, 0)
    assert not off_diagonal.any()

    diagonal = snf.diagonal()
    assert all(d >= 0 for d in diagonal)
    for d1, d2 in zip(diagonal, diagonal[1:]):
        if d1 == 0:
            assert d2 == 0
        else:
            assert d2 % d1 == 0


class TestConstruction:
    def test_from_rows(self):
        m = IntegerMatrix([[1, 2, 3], [4, 5, 6]])
        assert m.shape == (2, 3)
        assert m.rows == 2
        assert m.columns == 3
        assert m.entry(1, 2) == 6
        assert m[0, 1] == 2

    def test_from_numpy(self):
        m = IntegerMatrix(np.array([[1, -2], [3, 4]], dtype=np.int32))
        assert m == IntegerMatrix([[1, -2], [3, 4]])

    def test_empty(self):
        assert IntegerMatrix() == EMPTY
        assert IntegerMatrix.EMPTY is EMPTY
        assert EMPTY.shape == (0, 0)
        assert EMPTY.is_empty()
        assert IntegerMatrix([]) == EMPTY

    def test_zero_row_matrix_is_empty(self):
        m = IntegerMatrix.zeros(0, 3)
        assert m.is_empty()
        assert m.columns == 3
        assert m != EMPTY

    def test_zero_column_matrix_is_not_empty(self):
        m = IntegerMatrix([[], []])
        assert m.shape == (2, 0)
        assert not m.is_empty()

    def test_zeros(self):
        m = IntegerMatrix.zeros(2, 3)
        assert m.to_list() == [[0, 0, 0], [0, 0, 0]]

    def test_ragged_rows_rejected(self):
        with pytest.raises(MalformedMatrixError):
            IntegerMatrix([[1, 2], [3]])

    def test_non_integer_rejected(self):
        with pytest.raises(MalformedMatrixError):
            IntegerMatrix([[1.5, 2]])
        with pytest.raises(MalformedMatrixError):
            IntegerMatrix(np.array([[1.0, 2.0]]))
        with pytest.raises(MalformedMatrixError):
            IntegerMatrix([[True, False]])

    def test_wrong_dimension_rejected(self):
        with pytest.raises(MalformedMatrixError):
            IntegerMatrix(np.zeros((2, 2, 2), dtype=np.int64))
        with pytest.raises(MalformedMatrixError):
            IntegerMatrix([1, 2, 3])

    def test_malformed_is_value_error(self):
        with pytest.raises(ValueError):
            IntegerMatrix([[1], [2, 3]])

    def test_out_of_range_entry_rejected(self):
        with pytest.raises(MatrixOverflowError):
            IntegerMatrix([[2 ** 63]])
        with pytest.raises(MatrixOverflowError):
            IntegerMatrix(np.array([[2 ** 64 - 1]], dtype=np.uint64))

    def test_input_is_copied(self):
        rows = [[1, 2], [3, 4]]
        source = np.array(rows)
        m = IntegerMatrix(source)
        source[0, 0] = 99
        rows[0][0] = 99
        assert m.entry(0, 0) == 1

    def test_to_array_is_a_copy(self):
        m = IntegerMatrix([[1, 2]])
        array = m.to_array()
        array[0, 0] = 7
        assert m.entry(0, 0) == 1


class TestValueSemantics:
    def test_equality_and_hash(self):
        a = IntegerMatrix([[1, 2], [3, 4]])
        b = IntegerMatrix(np.array([[1, 2], [3, 4]]))
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_shape_matters(self):
        assert IntegerMatrix([[1, 2]]) != IntegerMatrix([[1], [2]])

    def test_pickle(self):
        m = IntegerMatrix([[1, -2], [3, 4]])
        restored = pickle.loads(pickle.dumps(m))
        assert restored == m
        assert restored.to_snf() == m.to_snf()

    def test_str_single_row(self):
        assert str(IntegerMatrix([[1, 2, 3]])) == "[1\t2\t3]\n"

    def test_str_several_rows(self):
        assert str(IntegerMatrix([[1, 2], [3, 4]])) == "|1\t2|\n|3\t4|\n"


class TestArithmetic:
    def test_add(self):
        a = IntegerMatrix([[1, 2], [3, 4]])
        b = IntegerMatrix([[10, 20], [30, 40]])
        assert a.add(b) == IntegerMatrix([[11, 22], [33, 44]])
        assert a + b == a.add(b)

    def test_add_shape_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            IntegerMatrix([[1, 2]]).add(IntegerMatrix([[1], [2]]))

    def test_multiply(self):
        a = IntegerMatrix([[1, 2], [3, 4]])
        b = IntegerMatrix([[0, 1], [1, 0]])
        assert a.multiply(b) == IntegerMatrix([[2, 1], [4, 3]])
        assert a @ b == a.multiply(b)

    def test_multiply_rectangular(self):
        a = IntegerMatrix([[1, 2, 3]])
        b = IntegerMatrix([[1], [1], [1]])
        assert a.multiply(b) == IntegerMatrix([[6]])
        assert b.multiply(a).shape == (3, 3)

    def test_multiply_empty_inner_dimension(self):
        a = IntegerMatrix([[], []])
        b = IntegerMatrix.zeros(0, 3)
        assert a.multiply(b) == IntegerMatrix.zeros(2, 3)

    def test_multiply_shape_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            IntegerMatrix([[1, 2]]).multiply(IntegerMatrix([[1, 2]]))

    def test_transpose(self):
        m = IntegerMatrix([[1, 2, 3], [4, 5, 6]])
        assert m.transpose() == IntegerMatrix([[1, 4], [2, 5], [3, 6]])
        assert m.transpose().transpose() == m

    def test_trace(self):
        assert IntegerMatrix([[1, 2], [3, 4]]).trace() == 5
        assert EMPTY.trace() == 0

    def test_trace_not_square(self):
        with pytest.raises(NotSquareError):
            IntegerMatrix([[1, 2]]).trace()

    def test_add_overflow(self):
        m = IntegerMatrix([[2 ** 62, -(2 ** 62)]])
        with pytest.raises(MatrixOverflowError):
            m.add(m)

    def test_multiply_overflow(self):
        m = IntegerMatrix([[2 ** 32]])
        with pytest.raises(MatrixOverflowError):
            m.multiply(m)

    def test_extreme_values_round_trip(self):
        top = 2 ** 63 - 1
        m = IntegerMatrix([[top, -top - 1]])
        assert m.entry(0, 0) == top
        assert m.entry(0, 1) == -top - 1


class TestDeterminant:
    def test_closed_forms(self):
        assert EMPTY.determinant() == 1
        assert IntegerMatrix([[-7]]).determinant() == -7
        assert IntegerMatrix([[1, 2], [3, 4]]).determinant() == -2
        assert IntegerMatrix([[2, 4, 4], [-6, 6, 12], [10, -4, -16]]).determinant() == -144

    def test_not_square(self):
        with pytest.raises(NotSquareError):
            IntegerMatrix([[1, 2, 3], [4, 5, 6]]).determinant()

    def test_diagonal_4x4(self):
        m = IntegerMatrix(np.diag([2, 3, 4, 5]))
        assert m.determinant() == 120

    def test_permutation_sign(self):
        m = IntegerMatrix([[0, 1, 0, 0], [1, 0, 0, 0], [0, 0, 1, 0], [0, 0, 0, 1]])
        assert m.determinant() == -1

    def test_singular(self):
        m = IntegerMatrix([[1, 2, 3, 4], [2, 4, 6, 8], [0, 1, 0, 1], [5, 0, 3, 1]])
        assert m.determinant() == 0
        assert IntegerMatrix.zeros(5, 5).determinant() == 0

    def test_pivot_without_divisibility(self):
        # no entry of the first column divides another
        m = IntegerMatrix([[6, 1, 0, 0], [4, 0, 1, 0], [9, 0, 0, 1], [10, 1, 1, 1]])
        assert m.determinant() == int(round(np.linalg.det(m.to_array())))

    @pytest.mark.parametrize("size", [4, 5, 6])
    def test_matches_floating_point(self, size):
        rng = np.random.default_rng(size)
        for _ in range(20):
            m = random_matrix(rng, size, size, bound=5)
            assert m.determinant() == int(round(np.linalg.det(m.to_array())))

    def test_overflow(self):
        m = IntegerMatrix([[2 ** 40, 0], [0, 2 ** 40]])
        with pytest.raises(MatrixOverflowError):
            m.determinant()


class TestSmithNormalForm:
    def test_known_example(self):
        m = IntegerMatrix([[2, 4, 4], [-6, 6, 12], [10, -4, -16]])
        assert m.to_snf() == IntegerMatrix([[2, 0, 0], [0, 6, 0], [0, 0, 12]])

    def test_coprime_diagonal(self):
        snf = IntegerMatrix([[2, 0], [0, 3]]).to_snf()
        assert snf.diagonal() == (1, 6)

    def test_gcd_lcm_normalization(self):
        snf = IntegerMatrix([[4, 0], [0, 6]]).to_snf()
        assert snf.diagonal() == (2, 12)

    def test_zeros_sorted_last(self):
        snf = IntegerMatrix([[0, 0], [0, 5]]).to_snf()
        assert snf.diagonal() == (5, 0)

    def test_negative_entries(self):
        snf = IntegerMatrix([[-3]]).to_snf()
        assert snf == IntegerMatrix([[3]])

    def test_rectangular(self):
        assert IntegerMatrix([[0, 5]]).to_snf() == IntegerMatrix([[5, 0]])
        assert IntegerMatrix([[6], [4]]).to_snf() == IntegerMatrix([[2], [0]])

    def test_zero_matrix(self):
        m = IntegerMatrix.zeros(3, 2)
        assert m.to_snf() == m

    def test_degenerate_shapes_unchanged(self):
        assert EMPTY.to_snf() == EMPTY
        flat = IntegerMatrix([[], []])
        assert flat.to_snf() == flat

    def test_does_not_modify_input(self):
        m = IntegerMatrix([[2, 4], [6, 8]])
        m.to_snf()
        assert m == IntegerMatrix([[2, 4], [6, 8]])

    def test_shape_preserved(self):
        m = IntegerMatrix([[1, 2, 3], [4, 5, 6]])
        assert m.to_snf().shape == (2, 3)
        assert m.to_snf().diagonal() == (1, 3)

    def test_random_properties(self):
        rng = np.random.default_rng(42)
        for _ in range(100):
            rows, columns = rng.integers(1, 7, size=2)
            m = random_matrix(rng, rows, columns)
            snf = m.to_snf()

            assert snf.shape == m.shape
            assert_smith_form(snf)
            assert snf.to_snf() == snf

            nonzero = sum(1 for d in snf.diagonal() if d)
            assert nonzero == np.linalg.matrix_rank(m.to_array().astype(float))

    def test_diagonal_product_equals_determinant(self):
        rng = np.random.default_rng(7)
        for size in range(1, 7):
            for _ in range(10):
                m = random_matrix(rng, size, size, bound=6)
                assert int(np.prod(m.to_snf().diagonal(), dtype=object)) == abs(m.determinant())

    def test_low_rank_product(self):
        rng = np.random.default_rng(3)
        left = random_matrix(rng, 5, 2)
        right = random_matrix(rng, 2, 6)
        snf = left.multiply(right).to_snf()
        assert_smith_form(snf)
        assert snf.diagonal()[2:] == (0, 0, 0)

    def test_large_intermediate_values(self):
        # entries near the int64 limit must reduce exactly
        big = 2 ** 62
        m = IntegerMatrix([[big, big - 1], [big - 1, big - 2]])
        assert m.to_snf().diagonal() == (1, 1)

    def test_overflowing_divisor(self):
        # gcd/lcm pass would produce 3 * 2^62
        with pytest.raises(MatrixOverflowError):
            IntegerMatrix([[2 ** 62, 0], [0, 3]]).to_snf()


class TestConcurrentReduction:
    MATRIX = [
        [81, 20, 3, 4, 50, 6, 7, 8, 79], [1, 2, 3, 0, 5, 60, 5, 8, 9],
        [10, 2, 3, 4, 5, 64, 7, 8, 90], [1, 2, 3, 64, 5, 6, 7, 8, 9],
        [1, 42, 3, 74, 50, 63, 70, 8, 9], [31, 2, 3, 4, 15, 6, 7, 68, 9],
        [1, 27, 3, 4, 5, 88, 7, 8, 9], [51, 2, 3, 4, 52, 6, 7, 8, 9],
        [1, 34, 3, 4, 5, 46, 74, 68, 9],
    ]

    def test_shared_matrix_across_threads(self):
        matrix = IntegerMatrix(self.MATRIX)
        expected = matrix.to_snf()

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: matrix.to_snf(), range(64)))

        assert all(snf == expected for snf in results)
        assert matrix == IntegerMatrix(self.MATRIX)
        assert abs(matrix.determinant()) == math.prod(expected.diagonal())


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
