from __future__ import annotations

import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from ..config import settings
from .logging_utils import PERF_LEVEL_NUM, PERF_LOGGER_NAME
from .repository import persist_trace
from .trace import RequestTrace, reset_current_trace, set_current_trace

API_PREFIX = "/api/"
PERFORMANCE_HEADER = "X-Search-Performance"
REQUEST_ID_HEADER = "X-Request-Id"

logger = logging.getLogger(__name__)
perf_logger = logging.getLogger(PERF_LOGGER_NAME)


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Opens a ``RequestTrace`` for every request and reports it when the response is ready.

    Only ``/api/`` responses carry the trace headers. Traces that never reached a search
    or a provider call are neither logged nor stored.
    """

    def __init__(self, app: ASGIApp, *, persist: bool | None = None) -> None:
        super().__init__(app)
        self.persist = settings.telemetry_enabled if persist is None else persist

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace = RequestTrace(path=request.url.path, method=request.method)
        request.state.request_id = str(trace.request_id)
        token = set_current_trace(trace)

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            trace.finalize()
            if request.url.path.startswith(API_PREFIX):
                response.headers[PERFORMANCE_HEADER] = trace.to_header_value()
                response.headers[REQUEST_ID_HEADER] = str(trace.request_id)
            return response
        finally:
            trace.finalize()
            self._report(trace, status_code)
            reset_current_trace(token)

    def _report(self, trace: RequestTrace, status_code: int) -> None:
        if not trace.active:
            return

        missing = trace.missing_required_stages()
        # Failed searches stop early, so gaps only matter on success.
        if missing and status_code < 400:
            logger.warning("Search trace missing stage timing(s): %s", ", ".join(missing))

        fields = " ".join(f"{key}={value}" for key, value in trace.summary_fields().items())
        perf_logger.log(
            PERF_LEVEL_NUM,
            "request_trace method=%s path=%s status=%s query=%r %s",
            trace.method,
            trace.path,
            status_code,
            trace.query_text,
            fields,
        )
        if self.persist:
            persist_trace(trace)
