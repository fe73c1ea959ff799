"""Application of editing intents to plan snapshots.

:func:`apply_intent` is a pure function: it reads the current
:class:`~lane_planner.model.PlanStep`, the built strokes and the settings and
returns a new snapshot. Expected edge cases (points too close together,
ill-formed node insertions, failed projections) are handled by skipping or
rolling back the affected piece of work; only a missing built-strokes snapshot
for an intent that needs it raises.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from .config import CENTER_LANE_DISTANCE, LANE_DISTANCE, Settings, get_default_settings
from .errors import BuiltStrokesRequiredError
from .geometry import MIN_START_TO_END, Segment
from .geometry.vectors import (
    Point,
    Vector,
    add,
    as_point,
    from_basis,
    neg,
    normalize,
    orthogonal,
    roughly_within,
    scale,
    sub,
    to_basis,
)
from .lane_stroke import LaneStroke, LaneStrokeError, LaneStrokeNode, MovedSubsection
from .logging_utils import trace_intent
from .model import (
    BuiltStrokes,
    ContinuationMode,
    ContinueRoad,
    CreateNextLane,
    DeleteSelection,
    MaximizeSelection,
    MoveSelection,
    NewRoad,
    NoIntent,
    PlanDelta,
    PlanStep,
    Select,
    Selection,
    StrokeRef,
)
from .reconcile import reconcile_connectors

logger = logging.getLogger(__name__)

PARALLEL_SELECTION_DISTANCE = 60.0
PARALLEL_SELECTION_ANGLE = 0.1
NEXT_LANE_TOLERANCE = 0.1


def apply_intent(
    current: PlanStep,
    built_strokes: Optional[BuiltStrokes] = None,
    settings: Optional[Settings] = None,
) -> PlanStep:
    """Apply ``current.intent`` and return the resulting snapshot."""

    settings = settings if settings is not None else get_default_settings()
    intent = current.intent

    def still_built_strokes() -> BuiltStrokes:
        if built_strokes is None:
            raise BuiltStrokesRequiredError(f"{type(intent).__name__} needs the built strokes")
        return built_strokes

    if isinstance(intent, NoIntent):
        return current
    if isinstance(intent, NewRoad):
        return apply_new_road(intent.points, current, settings)
    if isinstance(intent, ContinueRoad):
        return apply_continue_road(
            intent.continue_from,
            intent.additional_points,
            intent.start_reference_point,
            current,
        )
    if isinstance(intent, Select):
        return apply_select(intent.stroke_ref, intent.start, intent.end, current, still_built_strokes(), settings)
    if isinstance(intent, MaximizeSelection):
        return apply_maximize_selection(current, still_built_strokes())
    if isinstance(intent, MoveSelection):
        return apply_move_selection(intent.delta, current, still_built_strokes())
    if isinstance(intent, DeleteSelection):
        return apply_delete_selection(current, still_built_strokes())
    if isinstance(intent, CreateNextLane):
        return apply_create_next_lane(current, still_built_strokes())
    raise TypeError(f"unsupported intent {intent!r}")


@trace_intent(logger)
def apply_new_road(points: Sequence[Point], current: PlanStep, settings: Settings) -> PlanStep:
    # drawing a new road is continuing a road that consists only of its start points
    points = [as_point(point) for point in points]
    try:
        direction = normalize(sub(points[1], points[0]))
    except (IndexError, ValueError):
        logger.debug("New road needs two distinct points, got %s", points)
        return PlanStep(plan_delta=current.plan_delta, selections={}, intent=NoIntent())

    base_idx = len(current.plan_delta.new_strokes)
    n_per_side = settings.n_lanes_per_side

    def offset(lane_idx: int) -> Vector:
        return scale(orthogonal(direction), CENTER_LANE_DISTANCE / 2.0 + LANE_DISTANCE * lane_idx)

    one_point_strokes: List[LaneStroke] = []
    continue_from: List[Tuple[StrokeRef, ContinuationMode]] = []
    for lane_idx in range(n_per_side):
        one_point_strokes.append(
            LaneStroke.with_single_node(LaneStrokeNode(add(points[0], offset(lane_idx)), direction))
        )
        continue_from.append((StrokeRef.new(base_idx + lane_idx), ContinuationMode.APPEND))

    if settings.create_both_sides:
        for lane_idx in range(n_per_side):
            one_point_strokes.append(
                LaneStroke.with_single_node(LaneStrokeNode(sub(points[0], offset(lane_idx)), neg(direction)))
            )
            continue_from.append((StrokeRef.new(base_idx + n_per_side + lane_idx), ContinuationMode.PREPEND))

    current_with_new_strokes = replace(
        current,
        plan_delta=replace(
            current.plan_delta,
            new_strokes=current.plan_delta.new_strokes + tuple(one_point_strokes),
        ),
    )
    return apply_continue_road(continue_from, points[1:], points[0], current_with_new_strokes)


def _new_stroke_index(stroke_ref: StrokeRef) -> int:
    if not stroke_ref.is_new:
        raise ValueError(f"only new strokes can be continued, got {stroke_ref}")
    return stroke_ref.key


def _continued_node(
    node: LaneStrokeNode,
    mode: ContinuationMode,
    previous_reference_point: Point,
    next_reference_point: Point,
) -> LaneStrokeNode:
    if mode is ContinuationMode.APPEND:
        next_direction = Segment.arc_with_direction(
            previous_reference_point, node.direction, next_reference_point
        ).end_direction
    else:
        next_direction = neg(
            Segment.arc_with_direction(
                previous_reference_point, neg(node.direction), next_reference_point
            ).end_direction
        )
    relative = to_basis(sub(node.position, previous_reference_point), node.direction)
    return LaneStrokeNode(add(next_reference_point, from_basis(relative, next_direction)), next_direction)


@trace_intent(logger)
def apply_continue_road(
    continue_from: Sequence[Tuple[StrokeRef, ContinuationMode]],
    additional_points: Sequence[Point],
    start_reference_point: Point,
    current: PlanStep,
) -> PlanStep:
    new_strokes = list(current.plan_delta.new_strokes)
    previous_reference_point = as_point(start_reference_point)

    for next_reference_point in (as_point(point) for point in additional_points):
        if roughly_within(next_reference_point, previous_reference_point, MIN_START_TO_END):
            logger.debug("Skipping reference point %s, too close to the previous one", next_reference_point)
            continue

        for stroke_ref, mode in continue_from:
            idx = _new_stroke_index(stroke_ref)
            stroke = new_strokes[idx]
            if mode is ContinuationMode.APPEND:
                node = _continued_node(stroke.nodes[-1], mode, previous_reference_point, next_reference_point)
                candidate = stroke.with_node_appended(node)
            else:
                node = _continued_node(stroke.nodes[0], mode, previous_reference_point, next_reference_point)
                candidate = stroke.with_node_prepended(node)

            problem = candidate.problem()
            if problem is None:
                new_strokes[idx] = candidate
            else:
                logger.debug("Rolled back node %s on %s: %s", node.position, stroke_ref, problem)

        previous_reference_point = next_reference_point

    return PlanStep(
        plan_delta=replace(current.plan_delta, new_strokes=tuple(new_strokes)),
        selections={},
        intent=NoIntent(),
    )


def _parallel_range(
    other: LaneStroke,
    start_position: Point,
    start_direction: Vector,
    end_position: Point,
    end_direction: Vector,
    select_opposite: bool,
) -> Optional[Selection]:
    path = other.path
    start_on_other_distance = path.project(start_position)
    end_on_other_distance = path.project(end_position)
    if start_on_other_distance is None or end_on_other_distance is None:
        return None

    if not (
        roughly_within(path.along(start_on_other_distance), start_position, PARALLEL_SELECTION_DISTANCE)
        and roughly_within(path.along(end_on_other_distance), end_position, PARALLEL_SELECTION_DISTANCE)
    ):
        return None

    start_direction_on_other = path.direction_along(start_on_other_distance)
    end_direction_on_other = path.direction_along(end_on_other_distance)
    if start_on_other_distance < end_on_other_distance:
        matches = roughly_within(
            start_direction_on_other, start_direction, PARALLEL_SELECTION_ANGLE
        ) and roughly_within(end_direction_on_other, end_direction, PARALLEL_SELECTION_ANGLE)
    elif select_opposite:
        matches = roughly_within(
            start_direction_on_other, neg(start_direction), PARALLEL_SELECTION_ANGLE
        ) and roughly_within(end_direction_on_other, neg(end_direction), PARALLEL_SELECTION_ANGLE)
    else:
        matches = False

    if not matches:
        return None
    return (
        min(start_on_other_distance, end_on_other_distance),
        max(start_on_other_distance, end_on_other_distance),
    )


@trace_intent(logger)
def apply_select(
    selection_ref: StrokeRef,
    start: float,
    end: float,
    current: PlanStep,
    built_strokes: BuiltStrokes,
    settings: Settings,
) -> PlanStep:
    new_selections: Dict[StrokeRef, Selection] = dict(current.selections)
    new_selections[selection_ref] = (start, end)

    if settings.select_parallel:
        path = selection_ref.get_stroke(current.plan_delta, built_strokes).path
        start_position = path.along(start)
        start_direction = path.direction_along(start)
        end_position = path.along(end)
        end_direction = path.direction_along(end)

        additional_selections: Dict[StrokeRef, Selection] = {}
        for other_ref, other_stroke in current.plan_delta.all_strokes(built_strokes):
            if other_ref == selection_ref:
                continue
            match = _parallel_range(
                other_stroke,
                start_position,
                start_direction,
                end_position,
                end_direction,
                settings.select_opposite,
            )
            if match is not None:
                additional_selections[other_ref] = match
        if additional_selections:
            logger.debug("Selected %d parallel stroke(s) alongside %s", len(additional_selections), selection_ref)
        new_selections.update(additional_selections)

    return replace(current, selections=new_selections, intent=NoIntent())


@trace_intent(logger)
def apply_maximize_selection(current: PlanStep, built_strokes: BuiltStrokes) -> PlanStep:
    new_selections = {
        selection_ref: (0.0, selection_ref.get_stroke(current.plan_delta, built_strokes).path.length())
        for selection_ref in current.selections
    }
    return replace(current, selections=new_selections)


@trace_intent(logger)
def apply_move_selection(delta: Vector, current: PlanStep, built_strokes: BuiltStrokes) -> PlanStep:
    delta = as_point(delta)
    new_strokes = list(current.plan_delta.new_strokes)
    strokes_to_destroy = dict(current.plan_delta.strokes_to_destroy)

    with_subsections_moved: Dict[StrokeRef, MovedSubsection] = {
        selection_ref: selection_ref.get_stroke(current.plan_delta, built_strokes).with_subsection_moved(
            start, end, delta
        )
        for selection_ref, (start, end) in current.selections.items()
    }
    reconcile_connectors(with_subsections_moved)

    new_selections: Dict[StrokeRef, Selection] = {}
    for selection_ref, moved in with_subsections_moved.items():
        try:
            new_stroke = LaneStroke.new(moved.nodes())
        except LaneStrokeError as exc:
            logger.warning("Dropping move of %s: %s", selection_ref, exc)
            continue

        new_selection_start = new_stroke.path.project(moved.section[0].position)
        new_selection_end = new_stroke.path.project(moved.section[-1].position)
        if new_selection_start is None or new_selection_end is None:
            logger.warning("Dropping move of %s: moved range does not project onto the rebuilt stroke", selection_ref)
            continue

        if selection_ref.is_new:
            new_strokes[selection_ref.key] = new_stroke
            new_selection_ref = selection_ref
        else:
            strokes_to_destroy[selection_ref.key] = built_strokes.get(selection_ref.key)
            new_strokes.append(new_stroke)
            new_selection_ref = StrokeRef.new(len(new_strokes) - 1)

        new_selections[new_selection_ref] = (new_selection_start, new_selection_end)

    return replace(
        current,
        plan_delta=PlanDelta(new_strokes=tuple(new_strokes), strokes_to_destroy=strokes_to_destroy),
        selections=new_selections,
    )


@trace_intent(logger)
def apply_delete_selection(current: PlanStep, built_strokes: BuiltStrokes) -> PlanStep:
    new_strokes = list(current.plan_delta.new_strokes)
    strokes_to_destroy = dict(current.plan_delta.strokes_to_destroy)
    new_stroke_indices_to_remove: List[int] = []
    fragments: List[LaneStroke] = []

    for selection_ref, (start, end) in current.selections.items():
        stroke = selection_ref.get_stroke(current.plan_delta, built_strokes)
        before = stroke.subsection(0.0, start)
        if before is not None:
            fragments.append(before)
        after = stroke.subsection(end, stroke.path.length())
        if after is not None:
            fragments.append(after)

        if selection_ref.is_new:
            new_stroke_indices_to_remove.append(selection_ref.key)
        else:
            strokes_to_destroy[selection_ref.key] = built_strokes.get(selection_ref.key)

    for index_to_remove in sorted(set(new_stroke_indices_to_remove), reverse=True):
        del new_strokes[index_to_remove]
    new_strokes.extend(fragments)

    return PlanStep(
        plan_delta=PlanDelta(new_strokes=tuple(new_strokes), strokes_to_destroy=strokes_to_destroy),
        selections={},
        intent=NoIntent(),
    )


@trace_intent(logger)
def apply_create_next_lane(current: PlanStep, built_strokes: BuiltStrokes) -> PlanStep:
    selected_subsections = [
        subsection
        for subsection in (
            selection_ref.get_stroke(current.plan_delta, built_strokes).subsection(start, end)
            for selection_ref, (start, end) in current.selections.items()
        )
        if subsection is not None
    ]

    next_lane_strokes: List[LaneStroke] = []
    for subsection in selected_subsections:
        try:
            candidate = LaneStroke.new(subsection.offset_nodes(LANE_DISTANCE))
        except LaneStrokeError as exc:
            logger.debug("Skipping next lane candidate: %s", exc)
            continue
        if any(candidate.is_roughly_within(other, NEXT_LANE_TOLERANCE) for other in selected_subsections):
            logger.debug("Next lane already selected, not creating it again")
            continue
        next_lane_strokes.append(candidate)

    return PlanStep(
        plan_delta=replace(
            current.plan_delta,
            new_strokes=current.plan_delta.new_strokes + tuple(next_lane_strokes),
        ),
        selections={},
        intent=NoIntent(),
    )


__all__ = [
    "NEXT_LANE_TOLERANCE",
    "PARALLEL_SELECTION_ANGLE",
    "PARALLEL_SELECTION_DISTANCE",
    "apply_continue_road",
    "apply_create_next_lane",
    "apply_delete_selection",
    "apply_intent",
    "apply_maximize_selection",
    "apply_move_selection",
    "apply_new_road",
    "apply_select",
]
