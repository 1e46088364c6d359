"""Signed distance primitives and the combinators that compose them."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple

from .engine import ORIGIN, DistanceField, Mat4, Vec3


@dataclass(frozen=True, slots=True)
class Sphere:
    center: Vec3
    radius: float

    def distance(self, point: Vec3) -> float:
        return (point - self.center).length() - self.radius


@dataclass(frozen=True, slots=True)
class Box:
    """Axis-aligned box; exact both inside and outside."""

    center: Vec3
    half_extents: Vec3

    def distance(self, point: Vec3) -> float:
        p = abs(point - self.center) - self.half_extents
        outside = p.maximum(ORIGIN).length()
        inside = min(p.max_component(), 0.0)
        return outside + inside


@dataclass(frozen=True, slots=True)
class Torus:
    """Ring lying in the local XY plane, revolving around the Z axis."""

    center: Vec3
    major_radius: float
    minor_radius: float

    def distance(self, point: Vec3) -> float:
        p = point - self.center
        ring = math.hypot(p.x, p.y) - self.major_radius
        return math.hypot(ring, p.z) - self.minor_radius


class Union:
    """Closest-surface union over an ordered collection of fields."""

    def __init__(self, fields: Iterable[DistanceField]):
        self._fields: Tuple[DistanceField, ...] = tuple(fields)
        if not self._fields:
            raise ValueError("Union requires at least one field")

    @property
    def fields(self) -> Tuple[DistanceField, ...]:
        return self._fields

    def __iter__(self) -> Iterator[DistanceField]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def distance(self, point: Vec3) -> float:
        return min(field.distance(point) for field in self._fields)


@dataclass(frozen=True, slots=True)
class Transformed:
    """Evaluate ``inner`` in its local space.

    ``matrix`` maps world space to the inner field's local space. Only rigid
    motions (rotations and translations) keep the result a true distance.
    """

    matrix: Mat4
    inner: DistanceField

    @classmethod
    def placed(cls, placement: Mat4, inner: DistanceField) -> "Transformed":
        """Wrap ``inner`` given its local-to-world ``placement``."""
        return cls(placement.inverted(), inner)

    def distance(self, point: Vec3) -> float:
        return self.inner.distance(self.matrix.transform_point(point))
