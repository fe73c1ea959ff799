"""Line and circular-arc segments with arc-length parametrization."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .vectors import (
    Point,
    Vector,
    add,
    cross,
    dot,
    left_orthogonal,
    norm,
    normalize,
    scale,
    sub,
)

THICKNESS = 0.001
MIN_START_TO_END = 0.01
MAX_SWEEP = math.pi

# sine of the angle between chord and start direction below which an arc is a line
_LINE_ISH = 1e-9
_TWO_PI = 2.0 * math.pi


@dataclass(frozen=True)
class Segment:
    """A line (``center is None``) or a circular arc.

    Arcs are stored by center, radius, start angle and signed sweep; a positive
    sweep turns counter-clockwise.
    """

    start: Point
    end: Point
    start_direction: Vector
    length: float
    center: Optional[Point] = None
    radius: float = 0.0
    start_angle: float = 0.0
    sweep: float = 0.0

    @property
    def is_line(self) -> bool:
        return self.center is None

    @classmethod
    def line(cls, start: Point, end: Point) -> "Segment":
        chord = sub(end, start)
        length = norm(chord)
        return cls(start=start, end=end, start_direction=normalize(chord), length=length)

    @classmethod
    def arc_with_direction(cls, start: Point, direction: Vector, end: Point) -> "Segment":
        """Arc leaving ``start`` tangent to ``direction`` and ending at ``end``.

        Degenerates to a line when the chord is aligned with ``direction``. When
        ``end`` lies straight behind ``start`` the returned line runs against
        ``direction``; callers detect this through :attr:`start_direction`.
        Raises :class:`ValueError` if ``start`` and ``end`` coincide.
        """

        chord = sub(end, start)
        chord_length = norm(chord)
        if chord_length <= 1e-12:
            raise ValueError("segment start and end coincide")
        direction = normalize(direction)
        side = cross(direction, chord) / chord_length
        if abs(side) <= _LINE_ISH:
            return cls.line(start, end)

        left = left_orthogonal(direction)
        offset = chord_length * chord_length / (2.0 * dot(left, chord))
        center = add(start, scale(left, offset))
        radius = abs(offset)
        start_angle = math.atan2(start[1] - center[1], start[0] - center[0])
        end_angle = math.atan2(end[1] - center[1], end[0] - center[0])
        if offset > 0.0:
            sweep = (end_angle - start_angle) % _TWO_PI
        else:
            sweep = -((start_angle - end_angle) % _TWO_PI)
        return cls(
            start=start,
            end=end,
            start_direction=direction,
            length=radius * abs(sweep),
            center=center,
            radius=radius,
            start_angle=start_angle,
            sweep=sweep,
        )

    @property
    def end_direction(self) -> Vector:
        return self.direction_along(self.length)

    def _angle_at(self, distance: float) -> float:
        turn = distance / self.radius
        return self.start_angle + (turn if self.sweep > 0.0 else -turn)

    def along(self, distance: float) -> Point:
        distance = min(max(distance, 0.0), self.length)
        if self.center is None:
            return add(self.start, scale(self.start_direction, distance))
        angle = self._angle_at(distance)
        return (
            self.center[0] + self.radius * math.cos(angle),
            self.center[1] + self.radius * math.sin(angle),
        )

    def direction_along(self, distance: float) -> Vector:
        if self.center is None:
            return self.start_direction
        angle = self._angle_at(min(max(distance, 0.0), self.length))
        if self.sweep > 0.0:
            return -math.sin(angle), math.cos(angle)
        return math.sin(angle), -math.cos(angle)

    def project(self, point: Point) -> Optional[float]:
        """Arc-length of the foot of ``point`` on this segment, if it falls on it."""

        if self.center is None:
            distance = dot(sub(point, self.start), self.start_direction)
            if -THICKNESS <= distance <= self.length + THICKNESS:
                return min(max(distance, 0.0), self.length)
            return None

        rel = sub(point, self.center)
        if norm(rel) <= 1e-12:
            return None
        angle = math.atan2(rel[1], rel[0])
        delta = angle - self.start_angle
        turned = (delta if self.sweep > 0.0 else -delta) % _TWO_PI
        slack = THICKNESS / self.radius
        if turned <= abs(self.sweep) + slack:
            return min(turned * self.radius, self.length)
        if turned >= _TWO_PI - slack:
            return 0.0
        return None

    def starts_along(self, direction: Vector) -> bool:
        """Whether this segment leaves its start heading along ``direction``."""

        return dot(self.start_direction, direction) > 0.0 and abs(self.sweep) < MAX_SWEEP


__all__ = ["MAX_SWEEP", "MIN_START_TO_END", "Segment", "THICKNESS"]
