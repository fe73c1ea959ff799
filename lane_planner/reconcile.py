"""Connector reconciliation for simultaneously moved selections.

When several selected sub-ranges are moved together, the connectors that join
each moved range back to its unmoved stroke have to keep lane spacing with the
connectors of neighbouring lanes. Alignments are recorded as
``source -> target`` pairs: the source connector is re-placed next to the
target connector. Targets may themselves be sources of other alignments, so
alignments are applied in dependency order.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from itertools import product
from typing import Dict, List, Mapping, MutableMapping, Optional, Sequence, Tuple

from .config import CENTER_LANE_DISTANCE, LANE_DISTANCE
from .geometry.vectors import add, dot, orthogonal, roughly_within, scale, sub
from .lane_stroke import ConnectorEnd, LaneStrokeNode, MovedSubsection
from .model import StrokeRef

logger = logging.getLogger(__name__)

CONNECTOR_SNAP_DISTANCE = 7.0

ConnectorRef = Tuple[StrokeRef, ConnectorEnd]


@dataclass(frozen=True)
class ConnectorAlignment:
    source: ConnectorRef
    target: ConnectorRef

    def mirrored(self) -> "ConnectorAlignment":
        return ConnectorAlignment(self.target, self.source)

    def __str__(self) -> str:
        return (
            f"{self.source[0]}.{self.source[1].value} -> "
            f"{self.target[0]}.{self.target[1].value}"
        )


def close_and_right_of(a: Optional[LaneStrokeNode], b: Optional[LaneStrokeNode]) -> bool:
    """Whether ``a`` is near ``b`` and on the right of ``b`` seen along ``a``'s direction."""

    if a is None or b is None:
        return False
    return (
        roughly_within(a.position, b.position, CONNECTOR_SNAP_DISTANCE)
        and dot(sub(a.position, b.position), orthogonal(a.direction)) > 0.0
    )


def collect_connector_alignments(moved: Mapping[StrokeRef, MovedSubsection]) -> List[ConnectorAlignment]:
    alignments: List[ConnectorAlignment] = []
    before, after = ConnectorEnd.BEFORE, ConnectorEnd.AFTER

    for (ref_a, a), (ref_b, b) in product(moved.items(), repeat=2):
        if ref_a == ref_b:
            continue
        if (
            close_and_right_of(a.first, b.first)
            and a.before_connector is not None
            and b.before_connector is not None
        ):
            alignments.append(ConnectorAlignment((ref_a, before), (ref_b, before)))

        candidate = ConnectorAlignment((ref_a, before), (ref_b, after))
        if (
            close_and_right_of(a.first, b.last)
            and a.before_connector is not None
            and b.after_connector is not None
            and candidate.mirrored() not in alignments
        ):
            alignments.append(candidate)

        if (
            close_and_right_of(a.last, b.last)
            and a.after_connector is not None
            and b.after_connector is not None
        ):
            alignments.append(ConnectorAlignment((ref_a, after), (ref_b, after)))

        candidate = ConnectorAlignment((ref_a, after), (ref_b, before))
        if (
            close_and_right_of(a.last, b.first)
            and a.after_connector is not None
            and b.before_connector is not None
            and candidate.mirrored() not in alignments
        ):
            alignments.append(candidate)

    logger.debug("Collected %d connector alignment(s)", len(alignments))
    return alignments


def order_connector_alignments(alignments: Sequence[ConnectorAlignment]) -> List[ConnectorAlignment]:
    """Order alignments so that every target is final before it is aligned to.

    Alignment ``j`` must run before alignment ``i`` when ``j`` moves the
    connector ``i`` aligns to. Alignments caught in a cycle cannot be ordered;
    they are appended in recorded order after a warning.
    """

    count = len(alignments)
    dependents: Dict[int, List[int]] = {idx: [] for idx in range(count)}
    indegree = [0] * count
    for idx, alignment in enumerate(alignments):
        for other_idx, other in enumerate(alignments):
            if other_idx != idx and other.source == alignment.target:
                dependents[other_idx].append(idx)
                indegree[idx] += 1

    queue = [idx for idx in range(count) if indegree[idx] == 0]
    i = 0
    while i < len(queue):
        for dependent in dependents[queue[i]]:
            indegree[dependent] -= 1
            if indegree[dependent] == 0:
                queue.append(dependent)
        i += 1

    if len(queue) < count:
        ordered = set(queue)
        stuck = [idx for idx in range(count) if idx not in ordered]
        logger.warning(
            "Connector alignments form a cycle: %s; applying them in recorded order",
            ", ".join(str(alignments[idx]) for idx in stuck),
        )
        queue.extend(stuck)
    return [alignments[idx] for idx in queue]


def align_connector(node: LaneStrokeNode, target: LaneStrokeNode) -> LaneStrokeNode:
    """Place ``node`` one lane to the right of ``target``.

    Connectors meeting head-on keep the wider center clearance.
    """

    sign = math.copysign(1.0, dot(node.direction, target.direction))
    direction = scale(target.direction, sign)
    spacing = CENTER_LANE_DISTANCE if sign < 0.0 else LANE_DISTANCE
    return LaneStrokeNode(add(target.position, scale(orthogonal(direction), spacing)), direction)


def apply_connector_alignments(
    moved: MutableMapping[StrokeRef, MovedSubsection],
    alignments: Sequence[ConnectorAlignment],
) -> None:
    for alignment in alignments:
        (source_ref, source_end), (target_ref, target_end) = alignment.source, alignment.target
        target = moved[target_ref].connector(target_end)
        node = moved[source_ref].connector(source_end)
        if target is None or node is None:
            continue
        aligned = align_connector(node, target)
        logger.debug("Aligning connector %s: %s -> %s", alignment, node.position, aligned.position)
        moved[source_ref].set_connector(source_end, aligned)


def reconcile_connectors(moved: MutableMapping[StrokeRef, MovedSubsection]) -> List[ConnectorAlignment]:
    """Align all connectors of ``moved`` in place and return the applied alignments."""

    ordered = order_connector_alignments(collect_connector_alignments(moved))
    apply_connector_alignments(moved, ordered)
    return ordered


__all__ = [
    "CONNECTOR_SNAP_DISTANCE",
    "ConnectorAlignment",
    "ConnectorRef",
    "align_connector",
    "apply_connector_alignments",
    "close_and_right_of",
    "collect_connector_alignments",
    "order_connector_alignments",
    "reconcile_connectors",
]
