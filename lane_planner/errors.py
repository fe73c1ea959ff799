"""Exceptions signalling programming errors in callers of the planner."""


class PlanningError(RuntimeError):
    """Base class for precondition violations raised by the planner."""


class BuiltStrokesRequiredError(PlanningError):
    """An intent that reads built strokes was applied without them."""


__all__ = ["BuiltStrokesRequiredError", "PlanningError"]
