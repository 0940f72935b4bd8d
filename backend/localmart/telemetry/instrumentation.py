from __future__ import annotations

import logging
from contextlib import contextmanager
from functools import wraps
from time import perf_counter
from typing import Callable, ParamSpec, TypeVar

from .trace import STAGES, get_current_trace

P = ParamSpec("P")
R = TypeVar("R")

logger = logging.getLogger(__name__)


@contextmanager
def timed_stage(stage: str):
    if stage not in STAGES:
        raise ValueError(f"Unknown telemetry stage: {stage}")
    started = perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (perf_counter() - started) * 1000.0
        trace = get_current_trace()
        if trace is None:
            logger.debug("stage=%s elapsed_ms=%.3f (no active trace)", stage, elapsed_ms)
        else:
            trace.record_stage_time(stage, elapsed_ms)


def instrument_stage(stage: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with timed_stage(stage):
                return func(*args, **kwargs)

        return wrapper

    return decorator
