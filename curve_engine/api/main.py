"""FastAPI application for the curve quote service."""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from curve_engine import __version__
from curve_engine.api.endpoints import router
from curve_engine.errors import CurveError, CurveNotInitialized
from curve_engine.models import ErrorResponse
from curve_engine.safe_int import SafeIntError

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("CURVE_HOST", "0.0.0.0")
PORT = int(os.environ.get("CURVE_PORT", "8000"))
DEBUG = os.environ.get("CURVE_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.environ.get("CURVE_LOG_LEVEL", "INFO").upper()

logger = structlog.get_logger()

app = FastAPI(
    title="Curve Engine",
    description="Quotes and introspection for bonding curve priced assets",
    version=__version__,
)


@app.exception_handler(CurveError)
async def curve_error_handler(request: Request, exc: CurveError) -> JSONResponse:
    """Map curve precondition failures to client errors."""
    status_code = 404 if isinstance(exc, CurveNotInitialized) else 400
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        detail=str(exc),
    )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=type(exc).__name__, detail=str(exc)).model_dump(),
    )


@app.exception_handler(SafeIntError)
async def arithmetic_error_handler(request: Request, exc: SafeIntError) -> JSONResponse:
    """Amounts whose pricing leaves the uint256 domain are client errors."""
    logger.info("request_overflow", path=request.url.path, detail=str(exc))
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error=type(exc).__name__, detail=str(exc)).model_dump(),
    )


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure structlog for console output at the given level."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level)
        ),
    )


def run() -> None:
    """Run the quote service.

    Configuration via environment variables:
    - CURVE_HOST: Host to bind to (default: 0.0.0.0)
    - CURVE_PORT: Port to bind to (default: 8000)
    - CURVE_DEBUG: Enable debug/reload mode (default: false)
    - CURVE_LOG_LEVEL: Log level (default: INFO)
    - CURVE_DEMO: Seed a quadratic demo curve (default: false)
    """
    configure_logging()
    uvicorn.run(
        "curve_engine.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
