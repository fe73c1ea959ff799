import pytest

from lane_planner import (
    ContinuationMode,
    ContinueRoad,
    LaneStroke,
    LaneStrokeNode,
    NewRoad,
    NoIntent,
    PlanDelta,
    PlanStep,
    Settings,
    StrokeRef,
    apply_intent,
)

ONE_LANE = Settings(n_lanes_per_side=1, create_both_sides=False)


def _new_road(points, settings=None, current=None):
    current = current or PlanStep()
    step = PlanStep(plan_delta=current.plan_delta, selections=current.selections, intent=NewRoad(points))
    return apply_intent(step, settings=settings)


def _positions(stroke):
    return [tuple(round(c, 6) for c in node.position) for node in stroke.nodes]


def test_new_road_creates_lanes_on_both_sides():
    result = _new_road([(0.0, 0.0), (50.0, 0.0)])

    strokes = result.plan_delta.new_strokes
    assert len(strokes) == 4
    assert _positions(strokes[0]) == [(0.0, -3.0), (50.0, -3.0)]
    assert _positions(strokes[1]) == [(0.0, -8.0), (50.0, -8.0)]
    # opposite lanes are prepended so they still run from their first node
    assert _positions(strokes[2]) == [(50.0, 3.0), (0.0, 3.0)]
    assert _positions(strokes[3]) == [(50.0, 8.0), (0.0, 8.0)]
    for node in strokes[2].nodes:
        assert node.direction == pytest.approx((-1.0, 0.0))
    assert all(stroke.well_formed() for stroke in strokes)
    assert result.selections == {}
    assert result.intent == NoIntent()


def test_new_road_single_side():
    result = _new_road([(0.0, 0.0), (0.0, 20.0)], ONE_LANE)

    (stroke,) = result.plan_delta.new_strokes
    # right of a lane heading north is east
    assert _positions(stroke) == [(3.0, 0.0), (3.0, 20.0)]


def test_new_road_appends_after_existing_strokes():
    first = _new_road([(0.0, 0.0), (50.0, 0.0)], ONE_LANE)
    second = _new_road([(0.0, 100.0), (50.0, 100.0)], ONE_LANE, current=first)

    strokes = second.plan_delta.new_strokes
    assert len(strokes) == 2
    assert strokes[0] == first.plan_delta.new_strokes[0]
    assert _positions(strokes[1]) == [(0.0, 97.0), (50.0, 97.0)]


def test_new_road_follows_curve():
    result = _new_road([(0.0, 0.0), (50.0, 0.0), (100.0, 50.0)], ONE_LANE)

    (stroke,) = result.plan_delta.new_strokes
    assert _positions(stroke) == [(0.0, -3.0), (50.0, -3.0), (103.0, 50.0)]
    assert stroke.nodes[-1].direction == pytest.approx((0.0, 1.0), abs=1e-9)
    assert stroke.well_formed()


def test_reference_points_too_close_are_skipped():
    result = _new_road([(0.0, 0.0), (0.001, 0.0), (50.0, 0.0)], ONE_LANE)

    (stroke,) = result.plan_delta.new_strokes
    assert _positions(stroke) == [(0.0, -3.0), (50.0, -3.0)]


def test_ill_formed_node_is_rolled_back():
    result = _new_road([(0.0, 0.0), (50.0, 0.0), (40.0, 0.0)], ONE_LANE)

    (stroke,) = result.plan_delta.new_strokes
    assert _positions(stroke) == [(0.0, -3.0), (50.0, -3.0)]


def test_new_road_with_fewer_than_two_points_changes_nothing():
    current = PlanStep(
        plan_delta=PlanDelta(new_strokes=(LaneStroke.with_single_node(LaneStrokeNode((0.0, 0.0), (1.0, 0.0))),)),
        selections={StrokeRef.new(0): (0.0, 0.0)},
    )
    result = _new_road([(5.0, 5.0)], current=current)

    assert result.plan_delta == current.plan_delta
    assert result.selections == {}
    assert result.intent == NoIntent()


def test_zero_lanes_per_side_adds_no_strokes():
    result = _new_road([(0.0, 0.0), (50.0, 0.0)], Settings(n_lanes_per_side=0))
    assert result.plan_delta.new_strokes == ()


def test_continue_road_prepends_to_opposite_lane():
    stroke = LaneStroke.new(
        [LaneStrokeNode((50.0, 3.0), (-1.0, 0.0)), LaneStrokeNode((0.0, 3.0), (-1.0, 0.0))]
    )
    current = PlanStep(
        plan_delta=PlanDelta(new_strokes=(stroke,)),
        intent=ContinueRoad(((StrokeRef.new(0), ContinuationMode.PREPEND),), [(100.0, 0.0)], (50.0, 0.0)),
    )

    result = apply_intent(current)

    (continued,) = result.plan_delta.new_strokes
    assert _positions(continued) == [(100.0, 3.0), (50.0, 3.0), (0.0, 3.0)]
    assert continued.well_formed()
    assert result.intent == NoIntent()


def test_continue_road_appends_to_several_strokes():
    strokes = tuple(
        LaneStroke.new([LaneStrokeNode((0.0, y), (1.0, 0.0)), LaneStrokeNode((10.0, y), (1.0, 0.0))])
        for y in (-3.0, -8.0)
    )
    current = PlanStep(
        plan_delta=PlanDelta(new_strokes=strokes),
        intent=ContinueRoad(
            [(StrokeRef.new(0), "append"), (StrokeRef.new(1), "append")],
            [(20.0, 0.0), (30.0, 0.0)],
            (10.0, 0.0),
        ),
    )

    result = apply_intent(current)

    assert _positions(result.plan_delta.new_strokes[0])[-2:] == [(20.0, -3.0), (30.0, -3.0)]
    assert _positions(result.plan_delta.new_strokes[1])[-2:] == [(20.0, -8.0), (30.0, -8.0)]


def test_continue_road_rejects_built_strokes():
    current = PlanStep(
        intent=ContinueRoad(((StrokeRef.built("main"), ContinuationMode.APPEND),), [(10.0, 0.0)], (0.0, 0.0))
    )
    with pytest.raises(ValueError, match="only new strokes"):
        apply_intent(current)


def test_new_road_one_side_with_two_lanes():
    result = _new_road([(0.0, 0.0), (50.0, 0.0)], Settings(n_lanes_per_side=2, create_both_sides=False))

    first, second = result.plan_delta.new_strokes
    assert _positions(first) == [(0.0, -3.0), (50.0, -3.0)]
    assert _positions(second) == [(0.0, -8.0), (50.0, -8.0)]


def test_continue_road_rolls_back_turn_past_half_circle():
    stroke = LaneStroke.with_single_node(LaneStrokeNode((0.0, 0.0), (1.0, 0.0)))
    current = PlanStep(
        plan_delta=PlanDelta(new_strokes=(stroke,)),
        intent=ContinueRoad(((StrokeRef.new(0), ContinuationMode.APPEND),), [(-1.0, 10.0)], (0.0, 0.0)),
    )

    result = apply_intent(current)

    assert result.plan_delta.new_strokes == (stroke,)
    assert result.intent == NoIntent()
