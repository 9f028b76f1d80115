"""
Graded Homology Module

Sparse containers for the homology of a complex (one grade) and of a
bicomplex (two grades). Zero groups are never stored: a missing grade
means the zero group. First/last grades are updated on insertion.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple, Union

from .constants import FIRST_GRADE_UNSET, LAST_GRADE_UNSET
from .exceptions import EmptyStructureError
from .homology import NULL_HOMOLOGY, Homology

Bound = Union[int, float]


class GradedHomology:
    """
    Homology groups indexed by one integer grade.

    first_grade and last_grade are inf and -inf while nothing is stored.
    """

    def __init__(self, grade: Optional[int] = None, homology: Optional[Homology] = None):
        self._groups: Dict[int, Homology] = {}
        self._first_grade: Bound = FIRST_GRADE_UNSET
        self._last_grade: Bound = LAST_GRADE_UNSET
        if grade is not None and homology is not None:
            self.set_homology_at(grade, homology)

    def set_homology_at(self, grade: int, homology: Homology) -> None:
        """Store a group at a grade; the zero group is ignored."""
        if homology.is_empty():
            return

        self._groups[grade] = homology
        if grade < self._first_grade:
            self._first_grade = grade
        if grade > self._last_grade:
            self._last_grade = grade

    @property
    def first_grade(self) -> Bound:
        """Smallest grade holding a non-zero group."""
        return self._first_grade

    @property
    def last_grade(self) -> Bound:
        """Largest grade holding a non-zero group."""
        return self._last_grade

    def homology_at(self, grade: int) -> Homology:
        return self._groups.get(grade, NULL_HOMOLOGY)

    def is_empty(self) -> bool:
        return not self._groups

    def is_empty_at(self, grade: int) -> bool:
        return grade not in self._groups

    def non_null_grades(self) -> List[int]:
        return sorted(self._groups)

    def items(self) -> Iterator[Tuple[int, Homology]]:
        """(grade, group) pairs in ascending grade order."""
        for grade in self.non_null_grades():
            yield grade, self._groups[grade]

    def copy(self) -> GradedHomology:
        clone = GradedHomology()
        for grade, homology in self._groups.items():
            clone.set_homology_at(grade, homology)
        return clone

    def __len__(self) -> int:
        return len(self._groups)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GradedHomology):
            return NotImplemented
        return self._groups == other._groups

    def __repr__(self) -> str:
        return f"GradedHomology({dict(self.items())!r})"

    def __str__(self) -> str:
        if self.is_empty():
            return "0"

        grades = self.non_null_grades()
        header = "i" + "".join(f"\t\t{grade}" for grade in grades)
        cells = "".join(f"\t\t{self._groups[grade]}" for grade in grades)
        return header + "\n" + cells


class BiGradedHomology:
    """
    Homology groups indexed by (i, j): one GradedHomology over i per j.

    The j bounds are tracked on insertion. The i bounds are reduced over
    all slices and are undefined on an empty structure.
    """

    def __init__(self, i_grade: Optional[int] = None, j_grade: Optional[int] = None,
                 homology: Optional[Homology] = None):
        self._slices: Dict[int, GradedHomology] = {}
        self._first_j_grade: Bound = FIRST_GRADE_UNSET
        self._last_j_grade: Bound = LAST_GRADE_UNSET
        if i_grade is not None and j_grade is not None and homology is not None:
            self.set_homology_at(i_grade, j_grade, homology)

    def _track_j(self, j_grade: int) -> None:
        if j_grade < self._first_j_grade:
            self._first_j_grade = j_grade
        if j_grade > self._last_j_grade:
            self._last_j_grade = j_grade

    @property
    def first_j_grade(self) -> Bound:
        return self._first_j_grade

    @property
    def last_j_grade(self) -> Bound:
        return self._last_j_grade

    def set_graded_homology_at(self, j_grade: int, homology: GradedHomology) -> None:
        """Store a whole slice at j; an empty slice is ignored."""
        if homology.is_empty():
            return

        self._slices[j_grade] = homology.copy()
        self._track_j(j_grade)

    def set_homology_at(self, i_grade: int, j_grade: int, homology: Homology) -> None:
        """Store a group at (i, j); the zero group is ignored."""
        if homology.is_empty():
            return

        if j_grade in self._slices:
            self._slices[j_grade].set_homology_at(i_grade, homology)
        else:
            self._slices[j_grade] = GradedHomology(i_grade, homology)
        self._track_j(j_grade)

    def graded_homology_at(self, j_grade: int) -> GradedHomology:
        """Copy of the slice at j, or an empty one."""
        if j_grade in self._slices:
            return self._slices[j_grade].copy()
        return GradedHomology()

    def homology_at(self, i_grade: int, j_grade: int) -> Homology:
        if j_grade in self._slices:
            return self._slices[j_grade].homology_at(i_grade)
        return NULL_HOMOLOGY

    def is_empty(self) -> bool:
        return not self._slices

    def is_slice_empty(self, j_grade: int) -> bool:
        return j_grade not in self._slices

    def is_empty_at(self, i_grade: int, j_grade: int) -> bool:
        return self.homology_at(i_grade, j_grade).is_empty()

    @property
    def first_i_grade(self) -> int:
        """
        Smallest i holding a non-zero group, over all slices.

        Raises:
            EmptyStructureError: if nothing is stored
        """
        if not self._slices:
            raise EmptyStructureError("first_i_grade is undefined on an empty bigraded homology")
        return min(s.first_grade for s in self._slices.values())

    @property
    def last_i_grade(self) -> int:
        """
        Largest i holding a non-zero group, over all slices.

        Raises:
            EmptyStructureError: if nothing is stored
        """
        if not self._slices:
            raise EmptyStructureError("last_i_grade is undefined on an empty bigraded homology")
        return max(s.last_grade for s in self._slices.values())

    def non_null_i_grades(self) -> List[int]:
        grades = set()
        for graded in self._slices.values():
            grades.update(graded.non_null_grades())
        return sorted(grades)

    def non_null_j_grades(self) -> List[int]:
        return sorted(self._slices)

    def items(self) -> Iterator[Tuple[Tuple[int, int], Homology]]:
        """((i, j), group) pairs, j ascending then i ascending."""
        for j_grade in self.non_null_j_grades():
            for i_grade, homology in self._slices[j_grade].items():
                yield (i_grade, j_grade), homology

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BiGradedHomology):
            return NotImplemented
        return self._slices == other._slices

    def __repr__(self) -> str:
        return f"BiGradedHomology({dict(self.items())!r})"

    def __str__(self) -> str:
        if self.is_empty():
            return "0"

        i_grades = self.non_null_i_grades()
        lines = ["j\\i" + "".join(f"\t\t{i}" for i in i_grades)]
        for j_grade in reversed(self.non_null_j_grades()):
            cells = "".join(
                "\t\t" + ("" if self.is_empty_at(i, j_grade) else str(self.homology_at(i, j_grade)))
                for i in i_grades
            )
            lines.append(f"{j_grade}{cells}")
        return "\n".join(lines)
