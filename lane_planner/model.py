"""Core data structures: stroke references, plan snapshots and intents."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from functools import total_ordering
from typing import Any, Hashable, Iterator, Mapping, Optional, Tuple, Union

from .errors import BuiltStrokesRequiredError
from .geometry.vectors import Point, Vector, as_point
from .lane_stroke import LaneStroke

BuiltKey = Hashable
Selection = Tuple[float, float]


class ContinuationMode(Enum):
    APPEND = "append"
    PREPEND = "prepend"


class StrokeKind(IntEnum):
    NEW = 0
    BUILT = 1


@total_ordering
@dataclass(frozen=True)
class StrokeRef:
    """Reference to a newly authored stroke (by index) or a built one (by key).

    References order new strokes before built ones. Built keys of different
    types are ordered by type name, keys of one type by value.
    """

    kind: StrokeKind
    key: BuiltKey

    @classmethod
    def new(cls, index: int) -> "StrokeRef":
        return cls(StrokeKind.NEW, int(index))

    @classmethod
    def built(cls, key: BuiltKey) -> "StrokeRef":
        return cls(StrokeKind.BUILT, key)

    @property
    def is_new(self) -> bool:
        return self.kind is StrokeKind.NEW

    def get_stroke(self, plan_delta: "PlanDelta", built_strokes: Optional["BuiltStrokes"]) -> LaneStroke:
        if self.is_new:
            return plan_delta.new_strokes[self.key]
        if built_strokes is None:
            raise BuiltStrokesRequiredError(f"resolving {self} needs the built strokes")
        return built_strokes.get(self.key)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, StrokeRef):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def _sort_key(self) -> Tuple[StrokeKind, str, Any]:
        return self.kind, type(self.key).__name__, self.key

    def __str__(self) -> str:
        return f"{self.kind.name.lower()}:{self.key}"


@dataclass(frozen=True)
class BuiltStrokes:
    """Read-only view of the strokes committed before the current plan."""

    mapping: Mapping[BuiltKey, LaneStroke] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "mapping", dict(self.mapping))

    def get(self, key: BuiltKey) -> LaneStroke:
        return self.mapping[key]

    def items(self) -> Iterator[Tuple[BuiltKey, LaneStroke]]:
        return iter(self.mapping.items())

    def __contains__(self, key: object) -> bool:
        return key in self.mapping

    def __len__(self) -> int:
        return len(self.mapping)


@dataclass(frozen=True)
class PlanDelta:
    new_strokes: Tuple[LaneStroke, ...] = ()
    strokes_to_destroy: Mapping[BuiltKey, LaneStroke] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "new_strokes", tuple(self.new_strokes))
        object.__setattr__(self, "strokes_to_destroy", dict(self.strokes_to_destroy))

    def all_strokes(self, built_strokes: Optional[BuiltStrokes]) -> Iterator[Tuple[StrokeRef, LaneStroke]]:
        """New strokes first, then every built stroke."""

        for index, stroke in enumerate(self.new_strokes):
            yield StrokeRef.new(index), stroke
        if built_strokes is not None:
            for key, stroke in built_strokes.items():
                yield StrokeRef.built(key), stroke


@dataclass(frozen=True)
class NoIntent:
    pass


@dataclass(frozen=True)
class NewRoad:
    points: Tuple[Point, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(as_point(p) for p in self.points))


@dataclass(frozen=True)
class ContinueRoad:
    continue_from: Tuple[Tuple[StrokeRef, ContinuationMode], ...]
    additional_points: Tuple[Point, ...]
    start_reference_point: Point

    def __post_init__(self) -> None:
        object.__setattr__(self, "continue_from", tuple((ref, ContinuationMode(mode)) for ref, mode in self.continue_from))
        object.__setattr__(self, "additional_points", tuple(as_point(p) for p in self.additional_points))
        object.__setattr__(self, "start_reference_point", as_point(self.start_reference_point))


@dataclass(frozen=True)
class Select:
    stroke_ref: StrokeRef
    start: float
    end: float


@dataclass(frozen=True)
class MaximizeSelection:
    pass


@dataclass(frozen=True)
class MoveSelection:
    delta: Vector

    def __post_init__(self) -> None:
        object.__setattr__(self, "delta", as_point(self.delta))


@dataclass(frozen=True)
class DeleteSelection:
    pass


@dataclass(frozen=True)
class CreateNextLane:
    pass


Intent = Union[
    NoIntent,
    NewRoad,
    ContinueRoad,
    Select,
    MaximizeSelection,
    MoveSelection,
    DeleteSelection,
    CreateNextLane,
]


@dataclass(frozen=True)
class PlanStep:
    """Immutable snapshot of the plan being edited plus the pending intent."""

    plan_delta: PlanDelta = field(default_factory=PlanDelta)
    selections: Mapping[StrokeRef, Selection] = field(default_factory=dict)
    intent: Intent = field(default_factory=NoIntent)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "selections",
            {ref: (float(start), float(end)) for ref, (start, end) in self.selections.items()},
        )


__all__ = [
    "BuiltKey",
    "BuiltStrokes",
    "ContinuationMode",
    "ContinueRoad",
    "CreateNextLane",
    "DeleteSelection",
    "Intent",
    "MaximizeSelection",
    "MoveSelection",
    "NewRoad",
    "NoIntent",
    "PlanDelta",
    "PlanStep",
    "Select",
    "Selection",
    "StrokeKind",
    "StrokeRef",
]
