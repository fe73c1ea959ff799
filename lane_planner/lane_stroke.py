"""Lane strokes: ordered node sequences describing a lane centerline."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Iterable, List, Optional, Sequence, Tuple

from .geometry import MIN_START_TO_END, THICKNESS, Path, Segment
from .geometry.vectors import Point, Vector, add, distance, norm, orthogonal, scale

logger = logging.getLogger(__name__)

# minimum distance between a connector and the moved sub-range it joins
MIN_CONNECTOR_DISTANCE = 1.0


class LaneStrokeError(ValueError):
    """Raised when a node sequence does not form a well-formed stroke."""


@dataclass(frozen=True)
class LaneStrokeNode:
    position: Point
    direction: Vector

    def translated(self, delta: Vector) -> "LaneStrokeNode":
        return LaneStrokeNode(add(self.position, delta), self.direction)

    def offset(self, lateral: float) -> "LaneStrokeNode":
        """Shift the node to the right of its direction, keeping the direction."""

        return LaneStrokeNode(add(self.position, scale(orthogonal(self.direction), lateral)), self.direction)


class ConnectorEnd(Enum):
    BEFORE = "before"
    AFTER = "after"


@dataclass
class MovedSubsection:
    """A stroke split around a moved sub-range.

    ``before``/``after`` are untouched nodes, the connectors are the unmoved
    junction nodes (``None`` when the sub-range reaches that stroke end) and
    ``section`` holds the translated sub-range.
    """

    before: List[LaneStrokeNode]
    before_connector: Optional[LaneStrokeNode]
    section: List[LaneStrokeNode]
    after_connector: Optional[LaneStrokeNode]
    after: List[LaneStrokeNode]

    def connector(self, end: ConnectorEnd) -> Optional[LaneStrokeNode]:
        return self.before_connector if end is ConnectorEnd.BEFORE else self.after_connector

    def set_connector(self, end: ConnectorEnd, node: LaneStrokeNode) -> None:
        if end is ConnectorEnd.BEFORE:
            self.before_connector = node
        else:
            self.after_connector = node

    @property
    def first(self) -> Optional[LaneStrokeNode]:
        return self.section[0] if self.section else None

    @property
    def last(self) -> Optional[LaneStrokeNode]:
        return self.section[-1] if self.section else None

    def nodes(self) -> List[LaneStrokeNode]:
        assembled = list(self.before)
        if self.before_connector is not None:
            assembled.append(self.before_connector)
        assembled.extend(self.section)
        if self.after_connector is not None:
            assembled.append(self.after_connector)
        assembled.extend(self.after)
        return assembled


def _pair_problem(a: LaneStrokeNode, b: LaneStrokeNode) -> Optional[str]:
    if norm(a.direction) < THICKNESS:
        return f"node at {a.position} has no direction"
    if distance(a.position, b.position) < MIN_START_TO_END:
        return f"nodes at {a.position} and {b.position} are too close"
    segment = Segment.arc_with_direction(a.position, a.direction, b.position)
    if not segment.starts_along(a.direction):
        return f"node at {b.position} cannot be reached smoothly from {a.position}"
    return None


@dataclass(frozen=True)
class LaneStroke:
    nodes: Tuple[LaneStrokeNode, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "nodes", tuple(self.nodes))

    @cached_property
    def path(self) -> Path:
        """Continuous path through the nodes; only valid for well-formed strokes."""

        if len(self.nodes) == 1:
            return Path.point(self.nodes[0].position, self.nodes[0].direction)
        return Path.from_segments(
            [
                Segment.arc_with_direction(a.position, a.direction, b.position)
                for a, b in zip(self.nodes, self.nodes[1:])
            ]
        )

    @classmethod
    def new(cls, nodes: Iterable[LaneStrokeNode]) -> "LaneStroke":
        stroke = cls(tuple(nodes))
        problem = stroke.problem()
        if problem is not None:
            raise LaneStrokeError(problem)
        return stroke

    @classmethod
    def with_single_node(cls, node: LaneStrokeNode) -> "LaneStroke":
        return cls((node,))

    def problem(self) -> Optional[str]:
        """Describe the first well-formedness violation, or ``None``."""

        if not self.nodes:
            return "a stroke needs at least one node"
        for a, b in zip(self.nodes, self.nodes[1:]):
            problem = _pair_problem(a, b)
            if problem is not None:
                return problem
        return None

    def well_formed(self) -> bool:
        return self.problem() is None

    def with_node_appended(self, node: LaneStrokeNode) -> "LaneStroke":
        return LaneStroke(self.nodes + (node,))

    def with_node_prepended(self, node: LaneStrokeNode) -> "LaneStroke":
        return LaneStroke((node,) + self.nodes)

    def node_at(self, distance_along: float) -> LaneStrokeNode:
        for node, node_distance in zip(self.nodes, self.path.vertex_distances()):
            if abs(node_distance - distance_along) <= THICKNESS:
                return node
        return LaneStrokeNode(self.path.along(distance_along), self.path.direction_along(distance_along))

    def _nodes_between(self, start: float, end: float) -> List[LaneStrokeNode]:
        return [
            node
            for node, node_distance in zip(self.nodes, self.path.vertex_distances())
            if start + MIN_START_TO_END < node_distance < end - MIN_START_TO_END
        ]

    def _clamp_range(self, start: float, end: float) -> Tuple[float, float]:
        length = self.path.length()
        start = min(max(start, 0.0), length)
        end = min(max(end, start), length)
        return start, end

    def subsection(self, start: float, end: float) -> Optional["LaneStroke"]:
        """The part of the stroke between two arc-lengths, if it is not degenerate."""

        start, end = self._clamp_range(start, end)
        if end - start < MIN_START_TO_END:
            return None
        nodes = [self.node_at(start), *self._nodes_between(start, end), self.node_at(end)]
        try:
            return LaneStroke.new(nodes)
        except LaneStrokeError as exc:
            logger.debug("Subsection %.3f..%.3f is not well-formed: %s", start, end, exc)
            return None

    def with_subsection_moved(self, start: float, end: float, delta: Vector) -> MovedSubsection:
        start, end = self._clamp_range(start, end)
        length = self.path.length()
        transition = max(2.0 * norm(delta), MIN_CONNECTOR_DISTANCE)
        distances = self.path.vertex_distances()

        before: List[LaneStrokeNode] = []
        before_connector = None
        if start > THICKNESS:
            cut = max(start - transition, 0.0)
            before_connector = self.node_at(cut)
            before = [
                node for node, d in zip(self.nodes, distances) if d < cut - MIN_START_TO_END
            ]

        after: List[LaneStrokeNode] = []
        after_connector = None
        if end < length - THICKNESS:
            cut = min(end + transition, length)
            after_connector = self.node_at(cut)
            after = [
                node for node, d in zip(self.nodes, distances) if d > cut + MIN_START_TO_END
            ]

        section = [self.node_at(start), *self._nodes_between(start, end)]
        if end - start >= MIN_START_TO_END:
            section.append(self.node_at(end))

        return MovedSubsection(
            before=before,
            before_connector=before_connector,
            section=[node.translated(delta) for node in section],
            after_connector=after_connector,
            after=after,
        )

    def offset_nodes(self, lateral: float) -> List[LaneStrokeNode]:
        return [node.offset(lateral) for node in self.nodes]

    def is_roughly_within(self, other: "LaneStroke", tolerance: float) -> bool:
        """Whether both strokes trace the same centerline within ``tolerance``."""

        return _covers(other, self.nodes, tolerance) and _covers(self, other.nodes, tolerance)


def _covers(stroke: LaneStroke, nodes: Sequence[LaneStrokeNode], tolerance: float) -> bool:
    for node in nodes:
        gap = stroke.path.distance_to(node.position)
        if gap is None or gap > tolerance:
            return False
    return True


__all__ = [
    "ConnectorEnd",
    "LaneStroke",
    "LaneStrokeError",
    "LaneStrokeNode",
    "MIN_CONNECTOR_DISTANCE",
    "MovedSubsection",
]
