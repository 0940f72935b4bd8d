import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .config import settings
from .database import SessionLocal
from .errors import NotFoundError, ProviderUnavailableError, RepositoryError, ValidationError
from .routes.search import router as search_router
from .schemas import ErrorResponse, HealthMetricsResponse, HealthResponse
from .telemetry import configure_logging
from .telemetry.middleware import TelemetryMiddleware
from .telemetry.repository import fetch_average_latency_metrics

configure_logging(settings.log_level, settings.perf_log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TelemetryMiddleware)

app.include_router(search_router, prefix="/api")


def _error(status_code: int, detail: str, field: str | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(detail=detail, field=field).model_dump())


@app.exception_handler(ValidationError)
async def handle_validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
    return _error(422, str(exc), exc.field)


@app.exception_handler(NotFoundError)
async def handle_not_found(_request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, str(exc))


@app.exception_handler(ProviderUnavailableError)
async def handle_provider_unavailable(_request: Request, exc: ProviderUnavailableError) -> JSONResponse:
    logger.warning("Maps provider unavailable: %s", exc)
    return _error(503, str(exc))


@app.exception_handler(RepositoryError)
async def handle_repository_error(_request: Request, exc: RepositoryError) -> JSONResponse:
    return _error(500, str(exc))


@app.get("/health", response_model=HealthResponse)
def healthcheck() -> HealthResponse:
    with SessionLocal() as session:
        session.execute(text("SELECT 1"))
    return HealthResponse(status="ok")


@app.get("/health/metrics", response_model=HealthMetricsResponse)
def health_metrics() -> HealthMetricsResponse:
    with SessionLocal() as session:
        metrics = fetch_average_latency_metrics(session)
    return HealthMetricsResponse(**metrics)
