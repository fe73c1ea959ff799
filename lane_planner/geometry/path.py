"""Arc-length parametrized chains of segments."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .segment import THICKNESS, Segment
from .vectors import Point, Vector, distance


@dataclass(frozen=True)
class Path:
    """Continuous path through consecutive segments.

    A path without segments is a single anchored point, which is what a
    one-node stroke exposes.
    """

    segments: Tuple[Segment, ...]
    anchor_position: Point
    anchor_direction: Vector
    _starts: np.ndarray = field(init=False, repr=False, compare=False)
    _length: float = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        lengths = np.array([segment.length for segment in self.segments], dtype=float)
        starts = np.concatenate(([0.0], np.cumsum(lengths)[:-1])) if len(lengths) else np.zeros(0)
        object.__setattr__(self, "segments", tuple(self.segments))
        object.__setattr__(self, "_starts", starts)
        object.__setattr__(self, "_length", float(lengths.sum()) if len(lengths) else 0.0)

    @classmethod
    def from_segments(cls, segments: Sequence[Segment]) -> "Path":
        if not segments:
            raise ValueError("a path needs at least one segment")
        first = segments[0]
        return cls(tuple(segments), first.start, first.start_direction)

    @classmethod
    def point(cls, position: Point, direction: Vector) -> "Path":
        return cls((), position, direction)

    def length(self) -> float:
        return self._length

    def _locate(self, distance_along: float) -> Tuple[Segment, float]:
        idx = int(np.searchsorted(self._starts, distance_along, side="right")) - 1
        idx = min(max(idx, 0), len(self.segments) - 1)
        return self.segments[idx], distance_along - float(self._starts[idx])

    def along(self, distance_along: float) -> Point:
        if not self.segments:
            return self.anchor_position
        segment, local = self._locate(min(max(distance_along, 0.0), self._length))
        return segment.along(local)

    def direction_along(self, distance_along: float) -> Vector:
        if not self.segments:
            return self.anchor_direction
        segment, local = self._locate(min(max(distance_along, 0.0), self._length))
        return segment.direction_along(local)

    def project(self, point: Point) -> Optional[float]:
        """Arc-length of the closest foot of ``point`` on the path, or ``None``."""

        if not self.segments:
            if distance(point, self.anchor_position) <= THICKNESS:
                return 0.0
            return None

        best: Optional[Tuple[float, float]] = None
        for start, segment in zip(self._starts, self.segments):
            local = segment.project(point)
            if local is None:
                continue
            gap = distance(segment.along(local), point)
            if best is None or gap < best[0]:
                best = (gap, float(start) + local)
        return None if best is None else best[1]

    def vertex_distances(self) -> List[float]:
        """Arc-length of every segment joint, including both path ends."""

        if not self.segments:
            return [0.0]
        return [float(start) for start in self._starts] + [self._length]

    def distance_to(self, point: Point) -> Optional[float]:
        projected = self.project(point)
        if projected is None:
            return None
        return distance(self.along(projected), point)


__all__ = ["Path"]
