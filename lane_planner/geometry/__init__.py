"""Geometry primitives: vectors, line/arc segments and paths."""

from .path import Path
from .segment import MAX_SWEEP, MIN_START_TO_END, THICKNESS, Segment
from .vectors import Point, Vector, roughly_within

__all__ = [
    "MAX_SWEEP",
    "MIN_START_TO_END",
    "Path",
    "Point",
    "Segment",
    "THICKNESS",
    "Vector",
    "roughly_within",
]
