from __future__ import annotations

import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Sequence, TypeVar, cast

from .lane_stroke import LaneStroke
from .model import PlanDelta, PlanStep

F = TypeVar("F", bound=Callable[..., Any])

_repr = reprlib.Repr()
_repr.maxother = 120
_repr.maxlist = 6
_repr.maxtuple = 6
_repr.maxdict = 6


def summarize_delta(delta: PlanDelta) -> str:
    nodes = sum(len(stroke.nodes) for stroke in delta.new_strokes)
    return f"new={len(delta.new_strokes)} ({nodes} nodes) destroy={len(delta.strokes_to_destroy)}"


def summarize_step(step: PlanStep) -> str:
    """One-line description of a plan snapshot for log output."""

    return (
        f"PlanStep({summarize_delta(step.plan_delta)} "
        f"selected={len(step.selections)} intent={type(step.intent).__name__})"
    )


def _describe(value: Any) -> str:
    if isinstance(value, PlanStep):
        return summarize_step(value)
    if isinstance(value, PlanDelta):
        return summarize_delta(value)
    if isinstance(value, LaneStroke):
        return f"LaneStroke({len(value.nodes)} nodes)"
    try:
        return _repr.repr(value)
    except Exception as exc:  # pragma: no cover - repr of foreign objects
        return f"<repr-error {exc!r}>"


def _describe_arguments(args: Sequence[Any]) -> str:
    return ", ".join(_describe(arg) for arg in args) or "no-args"


def trace_intent(logger: logging.Logger) -> Callable[[F], F]:
    """Log entry and result of an intent handler at DEBUG level."""

    def decorator(func: F) -> F:
        name = func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Entering %s (%s)", name, _describe_arguments(args))
            result = func(*args, **kwargs)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Exiting %s -> %s", name, _describe(result))
            return result

        return cast(F, wrapper)

    return decorator


__all__ = ["summarize_delta", "summarize_step", "trace_intent"]
