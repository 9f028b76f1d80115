"""
Homology Group Module

A finitely generated abelian group written as a free part Z^rank plus
torsion summands Z/d, d >= 2, each with a multiplicity.
"""

from __future__ import annotations

from collections import Counter
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

TorsionSpec = Union[Mapping[int, int], Iterable[int]]


class Homology:
    """
    Immutable homology group Z^rank + sum of (Z/d)^power.

    Torsion is kept as a mapping magnitude -> power (the number of Z/d
    summands). Powers of zero are never stored, so two groups are equal
    exactly when their ranks and torsion mappings are.

    Args:
        rank: Rank of the free part
        torsion: Either a mapping magnitude -> power, or raw magnitudes
            (such as SNF elementary divisors > 1) which are grouped and
            counted

    Example:
        >>> str(Homology(2, [3]))
        'Z^2+3Z'
        >>> Homology(0, [2, 2, 4]).torsion[2]
        2
    """

    __slots__ = ("_rank", "_torsion")

    def __init__(self, rank: int = 0, torsion: Optional[TorsionSpec] = None):
        if rank < 0:
            raise ValueError(f"Homology rank must be >= 0, got {rank}")
        self._rank = int(rank)

        if torsion is None:
            counts: Mapping[int, int] = {}
        elif isinstance(torsion, Mapping):
            counts = torsion
        else:
            counts = Counter(int(t) for t in torsion)

        normalized: Dict[int, int] = {}
        for magnitude, power in counts.items():
            magnitude, power = int(magnitude), int(power)
            if magnitude < 2:
                raise ValueError(f"Torsion generator must be >= 2, got {magnitude}")
            if power < 0:
                raise ValueError(f"Torsion power must be >= 0, got {power} for {magnitude}")
            if power:
                normalized[magnitude] = power
        self._torsion = normalized

    @classmethod
    def free(cls, rank: int) -> Homology:
        """Free abelian group Z^rank."""
        return cls(rank)

    @classmethod
    def cyclic(cls, rank: int, magnitude: int, power: int = 1) -> Homology:
        """Z^rank + (Z/magnitude)^power."""
        return cls(rank, {magnitude: power})

    @property
    def rank(self) -> int:
        return self._rank

    @property
    def torsion(self) -> Mapping[int, int]:
        """Read-only mapping magnitude -> power."""
        return MappingProxyType(self._torsion)

    @property
    def torsion_generators(self) -> Tuple[int, ...]:
        return tuple(sorted(self._torsion))

    def torsion_factors(self) -> Tuple[int, ...]:
        """Torsion magnitudes repeated by multiplicity, ascending."""
        return tuple(m for m in sorted(self._torsion) for _ in range(self._torsion[m]))

    def is_null_rank(self) -> bool:
        return self._rank == 0

    def is_torsion_free(self) -> bool:
        return not self._torsion

    def is_empty(self) -> bool:
        """True for the zero group."""
        return self.is_null_rank() and self.is_torsion_free()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Homology):
            return NotImplemented
        return self._rank == other._rank and self._torsion == other._torsion

    def __hash__(self) -> int:
        return hash((self._rank, frozenset(self._torsion.items())))

    def __repr__(self) -> str:
        return f"Homology(rank={self._rank}, torsion={self._torsion})"

    def __str__(self) -> str:
        if self.is_empty():
            return "0"

        parts = []
        if self._rank:
            parts.append("Z" if self._rank == 1 else f"Z^{self._rank}")
        for magnitude in sorted(self._torsion):
            power = self._torsion[magnitude]
            parts.append(f"{magnitude}Z" if power == 1 else f"{magnitude}Z^{power}")
        return "+".join(parts)


NULL_HOMOLOGY = Homology()
