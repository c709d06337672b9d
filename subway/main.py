"""Main FastAPI application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from subway import __version__
from subway.api import lines, stations
from subway.core.config import settings
from subway.core.logging import configure_logging
from subway.core.store import get_store
from subway.core.telemetry import get_tracer_provider, shutdown_tracer_provider
from subway.middleware import AccessLoggingMiddleware
from subway.schemas.health import HealthResponse, RootResponse

# Configure logging at module level so Uvicorn startup logs go through structlog pipeline
configure_logging(log_level=settings.LOG_LEVEL)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - install the OTEL TracerProvider and warm up the store."""
    if settings.OTEL_ENABLED and (provider := get_tracer_provider()):
        trace.set_tracer_provider(provider)
        logger.info("otel_tracer_provider_initialized")

    get_store()
    logger.info("startup_complete", debug=settings.DEBUG)

    yield

    logger.info("shutdown_starting")
    if settings.OTEL_ENABLED:
        shutdown_tracer_provider()
    logger.info("shutdown_complete")


app = FastAPI(
    title="Subway Sections API",
    description="Subway line and section management backend",
    version=__version__,
    lifespan=lifespan,
)

if settings.OTEL_ENABLED:
    FastAPIInstrumentor().instrument_app(
        app,
        excluded_urls=",".join(settings.OTEL_EXCLUDED_URLS),
    )
    logger.info("otel_fastapi_instrumented", excluded_urls=settings.OTEL_EXCLUDED_URLS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(AccessLoggingMiddleware)

app.include_router(stations.router, prefix=settings.API_V1_PREFIX)
app.include_router(lines.router, prefix=settings.API_V1_PREFIX)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed requests as 400 Bad Request rather than 422."""
    logger.info("request_validation_failed", path=request.url.path, error_count=len(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.get("/", response_model=RootResponse)
async def root() -> RootResponse:
    """Root endpoint."""
    return RootResponse(message="Subway Sections API", version=__version__)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy")


@app.get("/ready", response_model=HealthResponse)
async def readiness_check() -> HealthResponse:
    """Readiness check endpoint - the store must be reachable."""
    get_store()
    return HealthResponse(status="ready")
