from .config import (
    CENTER_LANE_DISTANCE,
    LANE_DISTANCE,
    Settings,
    get_default_settings,
    set_default_settings,
)
from .errors import BuiltStrokesRequiredError, PlanningError
from .intent import (
    apply_continue_road,
    apply_create_next_lane,
    apply_delete_selection,
    apply_intent,
    apply_maximize_selection,
    apply_move_selection,
    apply_new_road,
    apply_select,
)
from .lane_stroke import ConnectorEnd, LaneStroke, LaneStrokeError, LaneStrokeNode, MovedSubsection
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
    StrokeKind,
    StrokeRef,
)
from .reconcile import ConnectorAlignment, reconcile_connectors
from .scenario import Scenario, ScenarioError, dump_plan, load_scenario, parse_scenario

__all__ = [
    'CENTER_LANE_DISTANCE',
    'LANE_DISTANCE',
    'Settings',
    'get_default_settings',
    'set_default_settings',
    'BuiltStrokesRequiredError',
    'PlanningError',
    'apply_intent',
    'apply_new_road',
    'apply_continue_road',
    'apply_select',
    'apply_maximize_selection',
    'apply_move_selection',
    'apply_delete_selection',
    'apply_create_next_lane',
    'ConnectorEnd',
    'LaneStroke',
    'LaneStrokeError',
    'LaneStrokeNode',
    'MovedSubsection',
    'BuiltStrokes',
    'ContinuationMode',
    'ContinueRoad',
    'CreateNextLane',
    'DeleteSelection',
    'Intent',
    'MaximizeSelection',
    'MoveSelection',
    'NewRoad',
    'NoIntent',
    'PlanDelta',
    'PlanStep',
    'Select',
    'StrokeKind',
    'StrokeRef',
    'ConnectorAlignment',
    'reconcile_connectors',
    'Scenario',
    'ScenarioError',
    'dump_plan',
    'load_scenario',
    'parse_scenario',
]
