"""Per-request tracing and logging for the discovery API.

Services time their work with ``instrument_stage``/``timed_stage``; the middleware
owns the ``RequestTrace`` those timings land in.
"""

from .instrumentation import instrument_stage, timed_stage
from .logging_utils import PERF_LOGGER_NAME, RequestIdFilter, configure_logging
from .trace import STAGES, RequestTrace, get_current_trace, reset_current_trace, set_current_trace

__all__ = [
    "PERF_LOGGER_NAME",
    "STAGES",
    "RequestIdFilter",
    "RequestTrace",
    "configure_logging",
    "get_current_trace",
    "instrument_stage",
    "reset_current_trace",
    "set_current_trace",
    "timed_stage",
]
