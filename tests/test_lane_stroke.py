import pytest

from lane_planner import LaneStroke, LaneStrokeError, LaneStrokeNode
from lane_planner.lane_stroke import ConnectorEnd


def _straight(*xs, y=0.0):
    return LaneStroke.new(LaneStrokeNode((float(x), y), (1.0, 0.0)) for x in xs)


def _positions(nodes):
    return [tuple(round(c, 6) for c in node.position) for node in nodes]


def test_new_rejects_nodes_closer_than_min_start_to_end():
    with pytest.raises(LaneStrokeError, match="too close"):
        LaneStroke.new(
            [LaneStrokeNode((0.0, 0.0), (1.0, 0.0)), LaneStrokeNode((0.005, 0.0), (1.0, 0.0))]
        )


def test_new_rejects_node_behind_previous_direction():
    with pytest.raises(LaneStrokeError, match="smoothly"):
        LaneStroke.new(
            [LaneStrokeNode((10.0, 0.0), (1.0, 0.0)), LaneStrokeNode((0.0, 0.0), (1.0, 0.0))]
        )


def test_single_node_stroke_has_point_path():
    stroke = LaneStroke.with_single_node(LaneStrokeNode((2.0, 3.0), (0.0, 1.0)))
    assert stroke.well_formed()
    assert stroke.path.length() == 0.0
    assert stroke.path.along(0.0) == (2.0, 3.0)


def test_curved_stroke_path_length():
    stroke = LaneStroke.new(
        [LaneStrokeNode((0.0, 0.0), (1.0, 0.0)), LaneStrokeNode((10.0, 10.0), (0.0, 1.0))]
    )
    assert stroke.path.length() == pytest.approx(5.0 * 3.141592653589793)


def test_node_at_snaps_to_existing_nodes():
    stroke = _straight(0, 50, 100)
    assert stroke.node_at(50.0005) is stroke.nodes[1]
    interpolated = stroke.node_at(25.0)
    assert interpolated.position == pytest.approx((25.0, 0.0))
    assert interpolated.direction == pytest.approx((1.0, 0.0))


def test_subsection_keeps_interior_nodes():
    stroke = _straight(0, 50, 100)
    sub = stroke.subsection(30.0, 60.0)
    assert _positions(sub.nodes) == [(30.0, 0.0), (50.0, 0.0), (60.0, 0.0)]
    assert sub.path.length() == pytest.approx(30.0)


def test_subsection_clamps_and_rejects_degenerate_ranges():
    stroke = _straight(0, 100)
    assert _positions(stroke.subsection(-10.0, 20.0).nodes) == [(0.0, 0.0), (20.0, 0.0)]
    assert stroke.subsection(40.0, 40.005) is None
    assert stroke.subsection(100.0, 120.0) is None


def test_with_subsection_moved_splits_around_connectors():
    stroke = _straight(0, 100)
    moved = stroke.with_subsection_moved(40.0, 60.0, (0.0, 2.0))

    assert _positions(moved.before) == [(0.0, 0.0)]
    assert moved.before_connector.position == pytest.approx((36.0, 0.0))
    assert _positions(moved.section) == [(40.0, 2.0), (60.0, 2.0)]
    assert moved.after_connector.position == pytest.approx((64.0, 0.0))
    assert _positions(moved.after) == [(100.0, 0.0)]
    assert moved.connector(ConnectorEnd.AFTER) is moved.after_connector

    rebuilt = LaneStroke.new(moved.nodes())
    assert len(rebuilt.nodes) == 6


def test_with_subsection_moved_has_no_connector_at_stroke_ends():
    stroke = _straight(0, 100)
    moved = stroke.with_subsection_moved(0.0, 100.0, (3.0, 0.0))
    assert moved.before_connector is None
    assert moved.after_connector is None
    assert moved.before == [] and moved.after == []
    assert _positions(moved.nodes()) == [(3.0, 0.0), (103.0, 0.0)]


def test_connector_clamped_to_stroke_start():
    stroke = _straight(0, 100)
    moved = stroke.with_subsection_moved(2.0, 50.0, (0.0, 4.0))
    assert moved.before == []
    assert moved.before_connector is stroke.nodes[0]


def test_set_connector_replaces_node():
    moved = _straight(0, 100).with_subsection_moved(40.0, 60.0, (0.0, 2.0))
    replacement = LaneStrokeNode((35.0, 0.0), (1.0, 0.0))
    moved.set_connector(ConnectorEnd.BEFORE, replacement)
    assert moved.nodes()[1] is replacement


def test_offset_nodes_moves_to_the_right():
    stroke = _straight(0, 10)
    assert _positions(stroke.offset_nodes(5.0)) == [(0.0, -5.0), (10.0, -5.0)]


def test_is_roughly_within():
    stroke = _straight(0, 50, 100)
    assert stroke.is_roughly_within(_straight(0, 100, y=0.05), 0.1)
    assert not stroke.is_roughly_within(_straight(0, 100, y=0.5), 0.1)
    assert not stroke.is_roughly_within(_straight(0, 80), 0.1)


def test_new_rejects_turn_of_more_than_half_a_circle():
    with pytest.raises(LaneStrokeError, match="smoothly"):
        LaneStroke.new(
            [LaneStrokeNode((10.0, -3.0), (1.0, 0.0)), LaneStrokeNode((5.0, 3.0), (1.0, 0.0))]
        )


def test_new_rejects_node_without_direction():
    with pytest.raises(LaneStrokeError, match="no direction"):
        LaneStroke.new(
            [LaneStrokeNode((0.0, 0.0), (0.0, 0.0)), LaneStrokeNode((10.0, 0.0), (1.0, 0.0))]
        )
