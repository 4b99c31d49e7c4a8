"""FastAPI application exposing pools, quotes and governance state."""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ammkernel import __version__
from ammkernel.api.endpoints import router
from ammkernel.config import configure_logging
from ammkernel.errors import KernelError, PoolNotFound, UnknownContract, UnknownRequest
from ammkernel.models.api import ErrorResponse

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("AMM_HOST", "0.0.0.0")
PORT = int(os.environ.get("AMM_PORT", "8000"))
DEBUG = os.environ.get("AMM_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.environ.get("AMM_LOG_LEVEL", "INFO")

# Lookups of things that do not exist are 404, every other kernel rejection is 400
NOT_FOUND_ERRORS = (PoolNotFound, UnknownRequest, UnknownContract)

configure_logging(LOG_LEVEL)
logger = structlog.get_logger()

app = FastAPI(
    title="AMM Kernel",
    description="Read-only query API for a constant product AMM kernel",
    version=__version__,
)


@app.exception_handler(KernelError)
async def kernel_error_handler(request: Request, exc: KernelError) -> JSONResponse:
    """Translate kernel rejections into JSON errors."""
    status_code = 404 if isinstance(exc, NOT_FOUND_ERRORS) else 400
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        status_code=status_code,
    )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=str(exc), error=type(exc).__name__).model_dump(),
    )


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the query API server.

    Configuration via environment variables:
    - AMM_HOST: Host to bind to (default: 0.0.0.0)
    - AMM_PORT: Port to bind to (default: 8000)
    - AMM_DEBUG: Enable debug/reload mode (default: false)
    - AMM_LOG_LEVEL: Log level (default: INFO)
    """
    uvicorn.run(
        "ammkernel.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
