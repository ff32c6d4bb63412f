"""Dense float vectors with in-place arithmetic and distance measures."""

from __future__ import annotations

import math
from decimal import Decimal
from itertools import zip_longest
from typing import Iterable, SupportsFloat

_DEFAULT_CAPACITY = 10


def _divide(value: float, divisor: float) -> float:
    """Divide with IEEE semantics: a zero divisor yields an infinity or NaN."""
    if divisor != 0:
        return value / divisor
    if value == 0 or math.isnan(value):
        return math.nan
    return math.copysign(math.inf, value) * math.copysign(1.0, divisor)


def _format_float(value: float) -> str:
    """Shortest exact decimal form of a float, never in exponent notation."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return format(Decimal(repr(value)).normalize(), "f")


class Vector:
    """A mutable vector of floats.

    Arithmetic methods change the vector in place and return it, so calls
    can be chained.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Iterable[SupportsFloat] = ()) -> None:
        coords = [float(v) for v in values]
        self._values = coords if coords else [0.0] * _DEFAULT_CAPACITY

    @classmethod
    def _of(cls, values: list[float]) -> Vector:
        vec = cls.__new__(cls)
        vec._values = values
        return vec

    @classmethod
    def zeros(cls, capacity: int) -> Vector:
        """Return a vector of ``capacity`` zero coordinates."""
        if capacity < 0:
            raise ValueError(f"negative capacity: {capacity}")
        return cls._of([0.0] * capacity)

    @classmethod
    def radius(cls, start: Iterable[SupportsFloat], end: Iterable[SupportsFloat]) -> Vector:
        """Return ``end - start``; missing coordinates count as zero."""
        return cls._of(
            [float(e) - float(s) for s, e in zip_longest(start, end, fillvalue=0.0)]
        )

    def copy(self) -> Vector:
        return self._of(list(self._values))

    def clear(self) -> None:
        """Drop all coordinates."""
        self._values = []

    def is_point(self) -> bool:
        return self.module() == 0

    def capacity(self) -> int:
        return len(self._values)

    def to_list(self) -> list[float]:
        return list(self._values)

    def module(self) -> float:
        """Euclidean length of the vector."""
        return math.sqrt(sum(d * d for d in self._values))

    def normalize(self) -> Vector:
        module = self.module()
        if module == 0:
            return self
        self._values = [d / module for d in self._values]
        return self

    def add(self, other: Vector) -> Vector:
        """Add ``other``; vectors of different capacity leave this one unchanged."""
        if self.capacity() == other.capacity():
            self._values = [a + b for a, b in zip(self._values, other._values)]
        return self

    def subtract(self, *args: Vector) -> Vector:
        for other in args:
            if other.capacity() < self.capacity():
                raise ValueError(
                    f"cannot subtract a vector of capacity {other.capacity()} "
                    f"from one of capacity {self.capacity()}"
                )
            self._values = [a - b for a, b in zip(self._values, other._values)]
        return self

    def multiply(self, c: float) -> Vector:
        self._values = [d * c for d in self._values]
        return self

    def divide(self, c: float) -> Vector:
        self._values = [_divide(d, c) for d in self._values]
        return self

    def scalar(self, other: Vector) -> float:
        """Dot product over the shared coordinates."""
        return sum(a * b for a, b in zip(self._values, other._values))

    def equals(self, other: Vector) -> bool:
        return self._values == other._values

    def middle(self) -> list[float]:
        return [d / 2 for d in self._values]

    def cos_distance(self, other: Vector) -> float:
        """Cosine of the angle between the vectors; 0 if either is zero."""
        first = self.module()
        second = other.module()
        if first == 0 or second == 0:
            return 0.0
        return self.scalar(other) / (first * second)

    def to_pq_string(self) -> str:
        """Render as a pgvector literal, e.g. ``[1,0.5]``."""
        return "[" + ",".join(_format_float(d) for d in self._values) + "]"

    def minkowski_distance(self, other: Vector, p: float) -> float:
        """Minkowski distance of order ``p``; -1 for ``p <= 1`` or mismatched sizes."""
        if p <= 1 or self.capacity() != other.capacity():
            return -1.0
        diffs = (abs(a - b) for a, b in zip(self._values, other._values))
        if p == math.inf:
            return max(diffs, default=-math.inf)
        return sum(d**p for d in diffs) ** (1 / p)

    def manhattan_distance(self, other: Vector) -> float:
        return self.minkowski_distance(other, 1)

    def euclidean_distance(self, other: Vector) -> float:
        return self.minkowski_distance(other, 2)

    def chebyshev_distance(self, other: Vector) -> float:
        return self.minkowski_distance(other, math.inf)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self.equals(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Vector({self._values!r})"