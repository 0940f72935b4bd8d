"""Logging setup for the discovery service.

Application modules log under ``localmart.*``. One PERF line per traced request goes
to ``localmart.perf`` so it can be routed or silenced on its own. Records emitted
while a request is in flight carry that request's id.
"""

from __future__ import annotations

import logging

from .trace import get_current_trace

PERF_LEVEL_NUM = 25
PERF_LEVEL_NAME = "PERF"
PERF_LOGGER_NAME = "localmart.perf"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"

# Provider request URLs carry the maps API key in the query string.
_QUIET_LOGGERS = ("httpx", "httpcore")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            trace = get_current_trace()
            record.request_id = str(trace.request_id) if trace is not None else "-"
        return True


def level_number(name: str) -> int:
    normalized = name.strip().upper()
    if normalized == PERF_LEVEL_NAME:
        return PERF_LEVEL_NUM
    level = logging.getLevelName(normalized)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level


def configure_logging(app_level: str, perf_level: str) -> None:
    logging.addLevelName(PERF_LEVEL_NUM, PERF_LEVEL_NAME)
    app_log_level = level_number(app_level)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(RequestIdFilter())
        root.addHandler(handler)
    root.setLevel(app_log_level)

    logging.getLogger(PERF_LOGGER_NAME).setLevel(level_number(perf_level))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(app_log_level, logging.WARNING))
