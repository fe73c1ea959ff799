"""Small 2-D vector helpers shared by the geometry and stroke modules."""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

Point = Tuple[float, float]
Vector = Tuple[float, float]

_DENOM_EPS = 1e-12


def as_point(value) -> Point:
    arr = np.asarray(value, dtype=float)
    if arr.shape != (2,):
        raise ValueError("coordinate must be length-2")
    return float(arr[0]), float(arr[1])


def add(a: Vector, b: Vector) -> Vector:
    return a[0] + b[0], a[1] + b[1]


def sub(a: Vector, b: Vector) -> Vector:
    return a[0] - b[0], a[1] - b[1]


def scale(v: Vector, factor: float) -> Vector:
    return v[0] * factor, v[1] * factor


def neg(v: Vector) -> Vector:
    return -v[0], -v[1]


def dot(a: Vector, b: Vector) -> float:
    return a[0] * b[0] + a[1] * b[1]


def cross(a: Vector, b: Vector) -> float:
    return a[0] * b[1] - a[1] * b[0]


def norm(v: Vector) -> float:
    return math.hypot(v[0], v[1])


def distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def normalize(v: Vector) -> Vector:
    length = norm(v)
    if length <= _DENOM_EPS:
        raise ValueError("cannot normalize a zero-length vector")
    return v[0] / length, v[1] / length


def orthogonal(v: Vector) -> Vector:
    """Right-hand perpendicular of ``v`` (clockwise quarter turn)."""

    return v[1], -v[0]


def left_orthogonal(v: Vector) -> Vector:
    return -v[1], v[0]


def to_basis(v: Vector, basis_x: Vector) -> Vector:
    """Express ``v`` in the orthonormal basis spanned by ``basis_x`` and its left perpendicular."""

    basis_y = left_orthogonal(basis_x)
    return dot(v, basis_x), dot(v, basis_y)


def from_basis(v: Vector, basis_x: Vector) -> Vector:
    basis_y = left_orthogonal(basis_x)
    return (
        v[0] * basis_x[0] + v[1] * basis_y[0],
        v[0] * basis_x[1] + v[1] * basis_y[1],
    )


def roughly_within(a: Vector, b: Vector, tolerance: float) -> bool:
    """Return ``True`` when ``a`` and ``b`` are at most ``tolerance`` apart."""

    return distance(a, b) <= tolerance


__all__ = [
    "Point",
    "Vector",
    "add",
    "as_point",
    "cross",
    "distance",
    "dot",
    "from_basis",
    "left_orthogonal",
    "neg",
    "norm",
    "normalize",
    "orthogonal",
    "roughly_within",
    "scale",
    "sub",
    "to_basis",
]
