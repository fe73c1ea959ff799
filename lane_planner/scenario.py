"""JSON scenarios replayed by the command line tool.

A scenario lists built strokes, optional settings, an optional starting plan
and a sequence of intents::

    {
      "settings": {"n_lanes_per_side": 1, "create_both_sides": false},
      "built_strokes": {"main": [{"position": [0, 0], "direction": [1, 0]},
                                 {"position": [50, 0], "direction": [1, 0]}]},
      "intents": [{"kind": "select", "stroke": {"built": "main"}, "start": 0, "end": 20},
                  {"kind": "move_selection", "delta": [0, 4]}]
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .config import Settings, get_default_settings
from .geometry.vectors import normalize
from .lane_stroke import LaneStroke, LaneStrokeError, LaneStrokeNode
from .model import (
    BuiltStrokes,
    ContinuationMode,
    ContinueRoad,
    CreateNextLane,
    DeleteSelection,
    Intent,
    MaximizeSelection,
    MoveSelection,
    NewRoad,
    NoIntent,
    PlanDelta,
    PlanStep,
    Select,
    StrokeRef,
)


class ScenarioError(ValueError):
    pass


@dataclass
class Scenario:
    settings: Settings
    built_strokes: BuiltStrokes
    initial_step: PlanStep
    intents: List[Intent] = field(default_factory=list)


def _point(value: Any, what: str):
    if not (isinstance(value, (list, tuple)) and len(value) == 2):
        raise ScenarioError(f"{what} must be a pair of numbers, got {value!r}")
    try:
        return float(value[0]), float(value[1])
    except (TypeError, ValueError) as exc:
        raise ScenarioError(f"{what} must be a pair of numbers, got {value!r}") from exc


def _stroke(data: Any, what: str) -> LaneStroke:
    if not isinstance(data, list):
        raise ScenarioError(f"{what} must be a list of nodes")
    nodes = []
    for idx, node in enumerate(data):
        if not isinstance(node, Mapping):
            raise ScenarioError(f"{what} node {idx} must be an object")
        direction = _point(node.get("direction"), f"{what} node {idx} direction")
        try:
            direction = normalize(direction)
        except ValueError as exc:
            raise ScenarioError(f"{what} node {idx} direction must not be zero") from exc
        nodes.append(LaneStrokeNode(_point(node.get("position"), f"{what} node {idx} position"), direction))
    try:
        return LaneStroke.new(nodes)
    except LaneStrokeError as exc:
        raise ScenarioError(f"{what} is not well-formed: {exc}") from exc


def _section(data: Mapping[str, Any], name: str, kind: type, default):
    value = data.get(name, default)
    if not isinstance(value, kind):
        expected = "an object" if kind is Mapping else "a list"
        raise ScenarioError(f"{name!r} must be {expected}, got {type(value).__name__}")
    return value


def _stroke_ref(data: Any) -> StrokeRef:
    if isinstance(data, Mapping) and len(data) == 1:
        if "new" in data:
            return StrokeRef.new(data["new"])
        if "built" in data:
            return StrokeRef.built(data["built"])
    raise ScenarioError(f'stroke reference must be {{"new": index}} or {{"built": key}}, got {data!r}')


def parse_intent(data: Mapping[str, Any]) -> Intent:
    if not isinstance(data, Mapping):
        raise ScenarioError(f"intent must be an object, got {data!r}")
    kind = data.get("kind")
    try:
        if kind in (None, "none"):
            return NoIntent()
        if kind == "new_road":
            return NewRoad(tuple(_point(p, "new_road point") for p in data["points"]))
        if kind == "continue_road":
            continue_from = tuple(
                (_stroke_ref(entry["stroke"]), ContinuationMode(entry.get("mode", "append")))
                for entry in data["continue_from"]
            )
            return ContinueRoad(
                continue_from,
                tuple(_point(p, "continue_road point") for p in data["points"]),
                _point(data["start_reference_point"], "start_reference_point"),
            )
        if kind == "select":
            return Select(_stroke_ref(data["stroke"]), float(data["start"]), float(data["end"]))
        if kind == "maximize_selection":
            return MaximizeSelection()
        if kind == "move_selection":
            return MoveSelection(_point(data["delta"], "move_selection delta"))
        if kind == "delete_selection":
            return DeleteSelection()
        if kind == "create_next_lane":
            return CreateNextLane()
    except ScenarioError:
        raise
    except KeyError as exc:
        raise ScenarioError(f"intent {kind!r} is missing field {exc.args[0]!r}") from exc
    except (TypeError, ValueError) as exc:
        raise ScenarioError(f"intent {kind!r} is malformed: {exc}") from exc
    raise ScenarioError(f"unknown intent kind {kind!r}")


def parse_scenario(data: Mapping[str, Any]) -> Scenario:
    if not isinstance(data, Mapping):
        raise ScenarioError("scenario must be a JSON object")

    settings_data = data.get("settings")
    try:
        settings = Settings.from_mapping(settings_data) if settings_data else get_default_settings()
    except (TypeError, ValueError) as exc:
        raise ScenarioError(f"invalid settings: {exc}") from exc

    built_strokes = BuiltStrokes(
        {
            key: _stroke(nodes, f"built stroke {key!r}")
            for key, nodes in _section(data, "built_strokes", Mapping, {}).items()
        }
    )

    plan = _section(data, "plan", Mapping, {})
    new_strokes = tuple(
        _stroke(nodes, f"new stroke {idx}") for idx, nodes in enumerate(_section(plan, "new_strokes", list, []))
    )
    strokes_to_destroy = {}
    for key in _section(plan, "strokes_to_destroy", list, []):
        if key not in built_strokes:
            raise ScenarioError(f"stroke to destroy {key!r} is not a built stroke")
        strokes_to_destroy[key] = built_strokes.get(key)

    selections = {}
    for entry in _section(data, "selections", list, []):
        try:
            selections[_stroke_ref(entry["stroke"])] = (float(entry["start"]), float(entry["end"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise ScenarioError(f"malformed selection {entry!r}") from exc

    intents = [parse_intent(entry) for entry in _section(data, "intents", list, [])]
    initial_step = PlanStep(
        plan_delta=PlanDelta(new_strokes=new_strokes, strokes_to_destroy=strokes_to_destroy),
        selections=selections,
    )
    return Scenario(settings=settings, built_strokes=built_strokes, initial_step=initial_step, intents=intents)


def load_scenario(path: Path) -> Scenario:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ScenarioError(f"{path} is not valid JSON: {exc}") from exc
    return parse_scenario(data)


def _dump_stroke(stroke: LaneStroke) -> List[Dict[str, List[float]]]:
    return [
        {"position": [node.position[0], node.position[1]], "direction": [node.direction[0], node.direction[1]]}
        for node in stroke.nodes
    ]


def _dump_ref(ref: StrokeRef) -> Dict[str, Any]:
    return {"new": ref.key} if ref.is_new else {"built": ref.key}


def dump_plan(step: PlanStep) -> Dict[str, Any]:
    """JSON-compatible view of a snapshot, readable back as a scenario ``plan``."""

    return {
        "plan": {
            "new_strokes": [_dump_stroke(stroke) for stroke in step.plan_delta.new_strokes],
            "strokes_to_destroy": list(step.plan_delta.strokes_to_destroy),
        },
        "selections": [
            {"stroke": _dump_ref(ref), "start": start, "end": end}
            for ref, (start, end) in step.selections.items()
        ],
    }


def describe_stroke(stroke: LaneStroke, precision: int = 3) -> str:
    points = ", ".join(f"({x:.{precision}f}, {y:.{precision}f})" for x, y in (n.position for n in stroke.nodes))
    return f"{len(stroke.nodes)} node(s), length={stroke.path.length():.{precision}f}: {points}"


__all__ = [
    "Scenario",
    "ScenarioError",
    "describe_stroke",
    "dump_plan",
    "load_scenario",
    "parse_intent",
    "parse_scenario",
]
