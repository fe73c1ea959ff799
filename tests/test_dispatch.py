import dataclasses
import logging

import pytest

import lane_planner.config as config
from lane_planner import (
    BuiltStrokesRequiredError,
    CreateNextLane,
    LaneStroke,
    LaneStrokeNode,
    MaximizeSelection,
    MoveSelection,
    NewRoad,
    NoIntent,
    PlanDelta,
    PlanStep,
    PlanningError,
    Settings,
    StrokeRef,
    apply_intent,
)


def _step(intent):
    stroke = LaneStroke.new([LaneStrokeNode((0.0, 0.0), (1.0, 0.0)), LaneStrokeNode((10.0, 0.0), (1.0, 0.0))])
    return PlanStep(
        plan_delta=PlanDelta(new_strokes=(stroke,)),
        selections={StrokeRef.new(0): (0.0, 10.0)},
        intent=intent,
    )


def test_no_intent_returns_current_snapshot():
    step = _step(NoIntent())
    assert apply_intent(step) is step


@pytest.mark.parametrize("intent", [MaximizeSelection(), MoveSelection((1.0, 0.0)), CreateNextLane()])
def test_intents_reading_built_strokes_require_them(intent):
    with pytest.raises(BuiltStrokesRequiredError) as excinfo:
        apply_intent(_step(intent))
    assert isinstance(excinfo.value, PlanningError)
    assert type(intent).__name__ in str(excinfo.value)


def test_new_road_does_not_need_built_strokes():
    result = apply_intent(PlanStep(intent=NewRoad([(0.0, 0.0), (10.0, 0.0)])))
    assert len(result.plan_delta.new_strokes) == 4


def test_unknown_intent_is_rejected():
    with pytest.raises(TypeError, match="unsupported intent"):
        apply_intent(PlanStep(intent="teleport"))


def test_default_settings_are_used_when_none_given(monkeypatch):
    monkeypatch.setattr(config, "_DEFAULT_SETTINGS", Settings(n_lanes_per_side=1, create_both_sides=False))

    result = apply_intent(PlanStep(intent=NewRoad([(0.0, 0.0), (10.0, 0.0)])))

    assert len(result.plan_delta.new_strokes) == 1


def test_snapshots_are_frozen():
    step = _step(NoIntent())
    with pytest.raises(dataclasses.FrozenInstanceError):
        step.intent = MaximizeSelection()
    with pytest.raises(dataclasses.FrozenInstanceError):
        step.plan_delta.new_strokes = ()


def test_handlers_trace_entry_and_exit(caplog):
    with caplog.at_level(logging.DEBUG, logger="lane_planner.intent"):
        apply_intent(PlanStep(intent=NewRoad([(0.0, 0.0), (10.0, 0.0)])))

    assert "Entering apply_new_road" in caplog.text
    assert "Exiting apply_continue_road -> PlanStep(new=4 (8 nodes) destroy=0 selected=0 intent=NoIntent)" in caplog.text
