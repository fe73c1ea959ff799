"""Editor settings and lane spacing constants."""

from __future__ import annotations

import copy
from dataclasses import dataclass, fields
from typing import Any, Mapping

# spacing between adjacent lanes running the same way
LANE_DISTANCE = 5.0
# distance between the road centerline and the innermost lanes of both sides
CENTER_LANE_DISTANCE = 6.0


@dataclass(frozen=True)
class Settings:
    n_lanes_per_side: int = 2
    create_both_sides: bool = True
    select_parallel: bool = True
    select_opposite: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.n_lanes_per_side, bool) or not isinstance(self.n_lanes_per_side, int):
            raise ValueError(f"n_lanes_per_side must be an integer, got {self.n_lanes_per_side!r}")
        if self.n_lanes_per_side < 0:
            raise ValueError(f"n_lanes_per_side must be >= 0, got {self.n_lanes_per_side}")
        for name in ("create_both_sides", "select_parallel", "select_opposite"):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be boolean")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Settings":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown settings option(s): {', '.join(unknown)}")
        return cls(**dict(data))


_DEFAULT_SETTINGS = Settings()


def get_default_settings() -> Settings:
    return copy.deepcopy(_DEFAULT_SETTINGS)


def set_default_settings(settings: Settings) -> None:
    global _DEFAULT_SETTINGS
    _DEFAULT_SETTINGS = copy.deepcopy(settings)


__all__ = [
    "CENTER_LANE_DISTANCE",
    "LANE_DISTANCE",
    "Settings",
    "get_default_settings",
    "set_default_settings",
]
